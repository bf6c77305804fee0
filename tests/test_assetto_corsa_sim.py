import struct
from dataclasses import replace

import pytest

from simetry.assetto_corsa.conversions import (
    graphics_from_page,
    physics_from_page,
    static_from_page,
)
from simetry.assetto_corsa.data import FlagType
from simetry.assetto_corsa.layout import PageFileGraphics, PageFilePhysics, PageFileStatic
from simetry.assetto_corsa.sim import AssettoCorsaSimState, Client
from simetry.racing_flags import RacingFlags


def _state(physics=None, graphics=None, static=None):
    return AssettoCorsaSimState(
        static_data=replace(static_from_page(PageFileStatic()), **(static or {})),
        physics=replace(physics_from_page(PageFilePhysics()), **(physics or {})),
        graphics=replace(graphics_from_page(PageFileGraphics()), **(graphics or {})),
    )


@pytest.mark.parametrize("raw, expected", [(0, -1), (1, 0), (3, 2)])
def test_gear_is_shifted_by_one(raw, expected):
    assert _state(physics={"gear": raw}).vehicle_gear() == expected


def test_velocity_round_trips_kmh():
    velocity = _state(physics={"speed_kmh": 36.0}).vehicle_velocity()
    assert velocity.kilometers_per_hour() == pytest.approx(36.0)


def test_rpm_and_max_rpm():
    state = _state(physics={"rpm": 7000}, static={"max_rpm": 8500})
    assert state.vehicle_engine_rotation_speed().rpm() == pytest.approx(7000)
    assert state.vehicle_max_engine_rotation_speed().rpm() == pytest.approx(8500)


@pytest.mark.parametrize("raw, expected", [(0, False), (1, True)])
def test_boolean_fields(raw, expected):
    state = _state(
        physics={"pit_limiter_on": raw, "ignition_on": raw, "starter_engine_on": raw},
        graphics={"is_in_pit_lane": raw},
    )
    assert state.is_pit_limiter_engaged() is expected
    assert state.is_vehicle_in_pit_lane() is expected
    assert state.is_ignition_on() is expected
    assert state.is_starter_on() is expected


@pytest.mark.parametrize(
    "flag, field",
    [
        (FlagType.BLUE, "blue"),
        (FlagType.YELLOW, "yellow"),
        (FlagType.BLACK, "black"),
        (FlagType.WHITE, "white"),
        (FlagType.CHECKERED, "checkered"),
        (FlagType.PENALTY, "black"),
        (FlagType.GREEN, "green"),
        (FlagType.ORANGE, "meatball"),
    ],
)
def test_flags_map_to_racing_flags(flag, field):
    flags = _state(graphics={"flag": flag}).flags()
    assert flags == replace(RacingFlags(), **{field: True})


def test_no_flag_gives_empty_flags():
    assert _state(graphics={"flag": FlagType.NONE}).flags() == RacingFlags()


def test_unique_id_is_car_model():
    assert _state(static={"car_model": "ks_example_car"}).vehicle_unique_id() == "ks_example_car"


def test_hazard_needs_both_indicators():
    both = _state(graphics={"direction_lights_left": 1, "direction_lights_right": 1})
    left = _state(graphics={"direction_lights_left": 1, "direction_lights_right": 0})
    assert both.is_hazard_indicator_on() is True
    assert left.is_hazard_indicator_on() is False
    assert left.is_left_turn_indicator_on() is True
    assert left.is_right_turn_indicator_on() is False


def _pages(version="1.7"):
    static = bytearray(PageFileStatic.SIZE)
    encoded = version.encode("utf-16-le")
    static[: len(encoded)] = encoded
    physics = bytearray(PageFilePhysics.SIZE)
    struct.pack_into("<i", physics, PageFilePhysics.OFFSETS["packet_id"], 1)
    graphics = bytearray(PageFileGraphics.SIZE)
    struct.pack_into("<i", graphics, PageFileGraphics.OFFSETS["packet_id"], 1)
    struct.pack_into("<i", graphics, PageFileGraphics.OFFSETS["status"], 2)
    return static, physics, graphics


@pytest.mark.asyncio
async def test_client_yields_moments_until_off():
    static, physics, graphics = _pages()
    client = await Client.try_connect(static, physics, graphics)
    assert client.name() == "AssettoCorsa"

    struct.pack_into("<i", physics, PageFilePhysics.OFFSETS["packet_id"], 2)
    struct.pack_into("<i", physics, PageFilePhysics.OFFSETS["gear"], 4)
    moment = await client.next_moment()
    assert isinstance(moment, AssettoCorsaSimState)
    assert moment.physics.packet_id == 2
    assert moment.vehicle_gear() == 3

    struct.pack_into("<i", graphics, PageFileGraphics.OFFSETS["status"], 0)
    assert await client.next_moment() is None


@pytest.mark.asyncio
async def test_client_rejects_unsupported_version():
    static, physics, graphics = _pages("2.0")
    with pytest.raises(ValueError):
        await Client.try_connect(static, physics, graphics)