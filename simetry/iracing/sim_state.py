"""One reading of iRacing telemetry together with its session info."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from ..moment import AngularVelocity, Moment, Pedals, Velocity
from ..racing_flags import RacingFlags
from .flags import DriverBlackFlags, GlobalFlags, StartFlags
from .header import Header, VarHeader, VarType
from .var_data import (
    CarPositions,
    Value,
    parse_bit_field,
    parse_bool,
    parse_car_positions,
    parse_double,
    parse_float,
    parse_from_raw,
    parse_int,
    parse_value,
)

T = TypeVar("T")

_BLACK_MASK = DriverBlackFlags.BLACK | DriverBlackFlags.DISQUALIFY | DriverBlackFlags.FURLED


def _lookup(node: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node


def _as_f64(value: Any) -> float | None:
    if isinstance(value, float):
        return value
    return None


def _as_i64(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


@dataclass(repr=False, eq=False)
class SimState(Moment):
    """A buffer row of variables plus the header and session info it belongs to."""

    header: Header
    variables: dict[str, VarHeader]
    raw_data: bytes
    session_info: Any

    def read(self, parser: Callable[[VarType, bytes], T | None], var: VarHeader) -> T | None:
        """Read the first entry of a variable."""
        return self.read_at(parser, 0, var)

    def read_at(
        self, parser: Callable[[VarType, bytes], T | None], idx: int, var: VarHeader
    ) -> T | None:
        """Read entry `idx` of a variable."""
        return parse_from_raw(parser, idx, var, self.raw_data)

    def read_name(self, parser: Callable[[VarType, bytes], T | None], name: str) -> T | None:
        """Read the first entry of the variable with the given name."""
        return self.read_name_at(parser, name, 0)

    def read_name_at(
        self, parser: Callable[[VarType, bytes], T | None], name: str, idx: int
    ) -> T | None:
        """Read entry `idx` of the named variable; None if there is no such variable."""
        var = self.variables.get(name)
        if var is None:
            return None
        return self.read_at(parser, idx, var)

    def describe_variables(self) -> list[dict[str, Any]]:
        """Describe every variable with all of its entries rendered as text."""
        unknown = Value(VarType.CHAR, ord("?"))
        described = []
        for var in self.variables.values():
            entries = (self.read_at(parse_value, idx, var) for idx in range(var.count))
            described.append(
                {
                    "name": var.name,
                    "description": var.desc,
                    "datatype": var.var_type,
                    "unit": var.unit,
                    "count_as_time": var.count_as_time,
                    "data": ", ".join(str(entry or unknown) for entry in entries),
                }
            )
        return described

    def __repr__(self) -> str:
        return (
            f"SimState(header={self.header!r}, session_info={self.session_info!r}, "
            f"data={self.describe_variables()!r})"
        )

    def vehicle_gear(self) -> int | None:
        gear = self.read_name(parse_int, "Gear")
        if gear is None or not -128 <= gear <= 127:
            return None
        return gear

    def vehicle_velocity(self) -> Velocity | None:
        speed = self.read_name(parse_double, "Speed")
        return None if speed is None else Velocity(speed)

    def vehicle_engine_rotation_speed(self) -> AngularVelocity | None:
        rpm = self.read_name(parse_double, "RPM")
        return None if rpm is None else AngularVelocity.from_rpm(rpm)

    def vehicle_max_engine_rotation_speed(self) -> AngularVelocity | None:
        red_line = _as_f64(_lookup(self.session_info, "DriverInfo", "DriverCarRedLine"))
        return None if red_line is None else AngularVelocity.from_rpm(red_line)

    def is_pit_limiter_engaged(self) -> bool | None:
        return self.read_name(parse_bool, "dcPitSpeedLimiterToggle")

    def is_vehicle_in_pit_lane(self) -> bool | None:
        return self.read_name(parse_bool, "OnPitRoad")

    def _car_positions(self) -> CarPositions:
        positions = self.read_name(parse_car_positions, "CarLeftRight")
        return CarPositions.OFF if positions is None else positions

    def is_vehicle_left(self) -> bool | None:
        return self._car_positions().car_left()

    def is_vehicle_right(self) -> bool | None:
        return self._car_positions().car_right()

    def shift_point(self) -> AngularVelocity | None:
        shift = _as_f64(_lookup(self.session_info, "DriverInfo", "DriverCarSLShiftRPM"))
        return None if shift is None else AngularVelocity.from_rpm(shift)

    def flags(self) -> RacingFlags | None:
        bit_field = self.read_name(parse_bit_field, "SessionFlags")
        if bit_field is None:
            return None
        bits = bit_field.value
        return RacingFlags(
            green=bool(bits & GlobalFlags.GREEN),
            yellow=bool(bits & GlobalFlags.YELLOW),
            blue=bool(bits & GlobalFlags.BLUE),
            white=bool(bits & GlobalFlags.WHITE),
            red=bool(bits & GlobalFlags.RED),
            black=bool(bits & _BLACK_MASK),
            checkered=bool(bits & GlobalFlags.CHECKERED),
            meatball=bool(bits & DriverBlackFlags.REPAIR),
            black_and_white=False,
            start_ready=bool(bits & StartFlags.READY),
            start_set=bool(bits & StartFlags.SET),
            start_go=bool(bits & StartFlags.GO),
        )

    def vehicle_unique_id(self) -> str | None:
        driver_info = _lookup(self.session_info, "DriverInfo")
        player_car_idx = _as_i64(_lookup(driver_info, "DriverCarIdx"))
        if player_car_idx is None:
            return None
        drivers = _lookup(driver_info, "Drivers")
        if not isinstance(drivers, list):
            return None
        player = next(
            (d for d in drivers if _as_i64(_lookup(d, "CarIdx")) == player_car_idx), None
        )
        if player is None:
            return None
        car_id = _as_i64(_lookup(player, "CarID"))
        return None if car_id is None else str(car_id)

    def is_ignition_on(self) -> bool | None:
        voltage = self.read_name(parse_float, "Voltage")
        return (0.0 if voltage is None else voltage) > 1.0

    def is_starter_on(self) -> bool | None:
        return self.read_name(parse_bool, "dcStarter")

    def _pedals(self, throttle: str, brake: str, clutch: str) -> Pedals | None:
        values = [self.read_name(parse_float, name) for name in (throttle, brake, clutch)]
        if any(value is None for value in values):
            return None
        return Pedals(throttle=values[0], brake=values[1], clutch=1.0 - values[2])

    def pedals(self) -> Pedals | None:
        return self._pedals("Throttle", "Brake", "Clutch")

    def pedals_raw(self) -> Pedals | None:
        return self._pedals("ThrottleRaw", "BrakeRaw", "ClutchRaw")