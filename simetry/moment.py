"""Sim-independent view of a single telemetry reading."""

from __future__ import annotations

import abc
import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

from .racing_flags import RacingFlags

_KMH_PER_MS = 3.6
_RPM_PER_RAD_S = 60.0 / (2.0 * math.pi)


@dataclass(frozen=True)
class Velocity:
    """Linear velocity, stored in metres per second."""

    meters_per_second: float

    @classmethod
    def from_kilometers_per_hour(cls, value: float) -> Velocity:
        return cls(value / _KMH_PER_MS)

    def kilometers_per_hour(self) -> float:
        return self.meters_per_second * _KMH_PER_MS


@dataclass(frozen=True)
class AngularVelocity:
    """Rotation speed, stored in radians per second."""

    radians_per_second: float

    @classmethod
    def from_rpm(cls, value: float) -> AngularVelocity:
        return cls(value / _RPM_PER_RAD_S)

    def rpm(self) -> float:
        return self.radians_per_second * _RPM_PER_RAD_S


def _number(data: Mapping[str, Any], key: str) -> float:
    if key not in data:
        raise ValueError(f"missing field {key!r}")
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field {key!r} must be a number, got {value!r}")
    return float(value)


@dataclass
class Pedals:
    """Pedal inputs as fractions, 0.0 released to 1.0 fully pressed."""

    throttle: float = 0.0
    brake: float = 0.0
    clutch: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Pedals:
        if not isinstance(data, Mapping):
            raise ValueError(f"pedals must be a mapping, got {type(data).__name__}")
        return cls(
            throttle=_number(data, "throttle"),
            brake=_number(data, "brake"),
            clutch=_number(data, "clutch"),
        )


class Moment:
    """Common data points of one reading; each returns None when unknown."""

    def vehicle_gear(self) -> int | None:
        return None

    def vehicle_velocity(self) -> Velocity | None:
        return None

    def vehicle_engine_rotation_speed(self) -> AngularVelocity | None:
        return None

    def vehicle_max_engine_rotation_speed(self) -> AngularVelocity | None:
        return None

    def is_pit_limiter_engaged(self) -> bool | None:
        return None

    def is_vehicle_in_pit_lane(self) -> bool | None:
        return None

    def is_vehicle_left(self) -> bool | None:
        """Whether there is a vehicle to the left of the driver."""
        return None

    def is_vehicle_right(self) -> bool | None:
        """Whether there is a vehicle to the right of the driver."""
        return None

    def shift_point(self) -> AngularVelocity | None:
        return None

    def flags(self) -> RacingFlags | None:
        return None

    def vehicle_brand_id(self) -> str | None:
        """ID shared by all vehicles of the same brand within one sim."""
        return None

    def vehicle_model_id(self) -> str | None:
        """ID of a vehicle model within one sim; not unique across brands."""
        return None

    def vehicle_unique_id(self) -> str | None:
        """ID that uniquely identifies the vehicle brand and model."""
        brand = self.vehicle_brand_id()
        if brand is None:
            return None
        model = self.vehicle_model_id()
        if model is None:
            return None
        return f"{brand}|{model}"

    def is_left_turn_indicator_on(self) -> bool | None:
        """Whether the left indicator is blinking."""
        return None

    def is_right_turn_indicator_on(self) -> bool | None:
        """Whether the right indicator is blinking."""
        return None

    def is_hazard_indicator_on(self) -> bool | None:
        """Whether both indicators are blinking."""
        left = self.is_left_turn_indicator_on()
        if left is None:
            return None
        if not left:
            return False
        return self.is_right_turn_indicator_on()

    def is_ignition_on(self) -> bool | None:
        return None

    def is_starter_on(self) -> bool | None:
        return None

    def pedals(self) -> Pedals | None:
        """Pedal input as read by the game, often modified by assists."""
        return None

    def pedals_raw(self) -> Pedals | None:
        """Pedal input straight from the controls."""
        return self.pedals()


class Simetry(abc.ABC):
    """A connection to a running sim that yields readings."""

    @abc.abstractmethod
    def name(self) -> str:
        """Name of the connected sim."""

    @abc.abstractmethod
    async def next_moment(self) -> Moment | None:
        """Wait for the next reading; None means the connection is over."""