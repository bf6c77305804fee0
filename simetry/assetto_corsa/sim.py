"""Assetto Corsa client and its sim-independent view of a reading."""

from __future__ import annotations

from ..moment import AngularVelocity, Moment, Simetry, Velocity
from ..racing_flags import RacingFlags
from .data import FlagType
from .util import SharedMemoryClient, SimState

_FLAG_FIELDS = {
    FlagType.BLUE: "blue",
    FlagType.YELLOW: "yellow",
    FlagType.BLACK: "black",
    FlagType.WHITE: "white",
    FlagType.CHECKERED: "checkered",
    FlagType.PENALTY: "black",
    FlagType.GREEN: "green",
    FlagType.ORANGE: "meatball",
}


def _as_i8(value: int) -> int:
    """Wrap an integer into the signed 8-bit range."""
    return ((value + 128) % 256) - 128


class AssettoCorsaSimState(SimState, Moment):
    """A reading from Assetto Corsa: static data plus the latest physics and graphics."""

    def vehicle_gear(self) -> int | None:
        # The sim counts reverse as 0 and neutral as 1.
        return _as_i8(self.physics.gear - 1)

    def vehicle_velocity(self) -> Velocity | None:
        return Velocity.from_kilometers_per_hour(float(self.physics.speed_kmh))

    def vehicle_engine_rotation_speed(self) -> AngularVelocity | None:
        return AngularVelocity.from_rpm(float(self.physics.rpm))

    def vehicle_max_engine_rotation_speed(self) -> AngularVelocity | None:
        return AngularVelocity.from_rpm(float(self.static_data.max_rpm))

    def is_pit_limiter_engaged(self) -> bool | None:
        return self.physics.pit_limiter_on != 0

    def is_vehicle_in_pit_lane(self) -> bool | None:
        return self.graphics.is_in_pit_lane != 0

    def flags(self) -> RacingFlags | None:
        flags = RacingFlags()
        name = _FLAG_FIELDS.get(self.graphics.flag)
        if name is not None:
            setattr(flags, name, True)
        return flags

    def vehicle_unique_id(self) -> str | None:
        return self.static_data.car_model

    def is_left_turn_indicator_on(self) -> bool | None:
        return self.graphics.direction_lights_left != 0

    def is_right_turn_indicator_on(self) -> bool | None:
        return self.graphics.direction_lights_right != 0

    def is_ignition_on(self) -> bool | None:
        return self.physics.ignition_on != 0

    def is_starter_on(self) -> bool | None:
        return self.physics.starter_engine_on != 0


class Client(SharedMemoryClient, Simetry):
    """Connection to Assetto Corsa through its shared memory pages."""

    STATE_TYPE = AssettoCorsaSimState

    def name(self) -> str:
        return "AssettoCorsa"

    async def next_moment(self) -> Moment | None:
        return await self.next_sim_state()