"""Binary layout of the Assetto Corsa shared memory pages."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar

from .data import Status

_SIZES = {"i": 4, "f": 4, "H": 2}
_PACK = 4


def _zeros(code: str, shape: tuple[int, ...]) -> Any:
    if not shape:
        return 0.0 if code == "f" else 0
    return tuple(_zeros(code, shape[1:]) for _ in range(shape[0]))


def _slot(code: str, *shape: int) -> Any:
    return field(default=_zeros(code, shape), metadata={"code": code, "shape": shape})


def _i() -> Any:
    return _slot("i")


def _f() -> Any:
    return _slot("f")


def _fa(*shape: int) -> Any:
    return _slot("f", *shape)


def _ia(count: int) -> Any:
    return _slot("i", count)


def _text(count: int) -> Any:
    return _slot("H", count)


def _take(values, shape: tuple[int, ...]) -> Any:
    if not shape:
        return next(values)
    return tuple(_take(values, shape[1:]) for _ in range(shape[0]))


class _Page:
    SIZE: ClassVar[int]
    OFFSETS: ClassVar[dict[str, int]]
    _STRUCT: ClassVar[struct.Struct]
    _SHAPES: ClassVar[tuple[tuple[str, tuple[int, ...]], ...]]

    @classmethod
    def _decode(cls, data: bytes):
        if len(data) < cls.SIZE:
            raise ValueError(f"{cls.__name__} needs {cls.SIZE} bytes, got {len(data)}")
        values = iter(cls._STRUCT.unpack_from(data))
        return cls(**{name: _take(values, shape) for name, shape in cls._SHAPES})


def _page(cls):
    """Derive the packed little-endian layout of a page from its fields."""
    parts = ["<"]
    offsets: dict[str, int] = {}
    shapes = []
    offset = 0
    for item in fields(cls):
        code = item.metadata["code"]
        shape = item.metadata["shape"]
        size = _SIZES[code]
        pad = -offset % min(size, _PACK)
        if pad:
            parts.append(f"{pad}x")
            offset += pad
        offsets[item.name] = offset
        count = math.prod(shape)
        parts.append(f"{count}{code}")
        offset += count * size
        shapes.append((item.name, shape))
    pad = -offset % _PACK
    if pad:
        parts.append(f"{pad}x")
    cls._STRUCT = struct.Struct("".join(parts))
    cls.SIZE = cls._STRUCT.size
    cls.OFFSETS = offsets
    cls._SHAPES = tuple(shapes)
    return cls


@_page
@dataclass
class PageFilePhysics(_Page):
    """Raw physics page."""

    packet_id: int = _i()
    gas: float = _f()
    brake: float = _f()
    fuel: float = _f()
    gear: int = _i()
    rpm: int = _i()
    steer_angle: float = _f()
    speed_kmh: float = _f()
    velocity: tuple = _fa(3)
    acc_g: tuple = _fa(3)
    wheel_slip: tuple = _fa(4)
    wheel_load: tuple = _fa(4)
    wheels_pressure: tuple = _fa(4)
    wheel_angular_speed: tuple = _fa(4)
    tyre_wear: tuple = _fa(4)
    tyre_dirty_level: tuple = _fa(4)
    tyre_core_temperature: tuple = _fa(4)
    camber_rad: tuple = _fa(4)
    suspension_travel: tuple = _fa(4)
    drs: float = _f()
    tc: float = _f()
    heading: float = _f()
    pitch: float = _f()
    roll: float = _f()
    cg_height: float = _f()
    car_damage: tuple = _fa(5)
    number_of_tyres_out: int = _i()
    pit_limiter_on: int = _i()
    abs: float = _f()
    kers_charge: float = _f()
    kers_input: float = _f()
    auto_shifter_on: int = _i()
    ride_height: tuple = _fa(2)
    turbo_boost: float = _f()
    ballast: float = _f()
    air_density: float = _f()
    air_temp: float = _f()
    road_temp: float = _f()
    local_angular_vel: tuple = _fa(3)
    final_ff: float = _f()
    performance_meter: float = _f()
    engine_brake: int = _i()
    ers_recovery_level: int = _i()
    ers_power_level: int = _i()
    ers_heat_charging: int = _i()
    ers_is_charging: int = _i()
    kers_current_kj: float = _f()
    drs_available: int = _i()
    drs_enabled: int = _i()
    brake_temp: tuple = _fa(4)
    clutch: float = _f()
    tyre_temp_i: tuple = _fa(4)
    tyre_temp_m: tuple = _fa(4)
    tyre_temp_o: tuple = _fa(4)
    is_ai_controlled: int = _i()
    tyre_contact_point: tuple = _fa(4, 3)
    tyre_contact_normal: tuple = _fa(4, 3)
    tyre_contact_heading: tuple = _fa(4, 3)
    brake_bias: float = _f()
    local_velocity: tuple = _fa(3)
    p2p_activations: int = _i()
    p2p_status: int = _i()
    current_max_rpm: int = _i()
    mz: tuple = _fa(4)
    fx: tuple = _fa(4)
    fy: tuple = _fa(4)
    slip_ratio: tuple = _fa(4)
    slip_angle: tuple = _fa(4)
    tc_in_action: int = _i()
    abs_in_action: int = _i()
    suspension_damage: tuple = _fa(4)
    tyre_temp: tuple = _fa(4)
    water_temp: float = _f()
    brake_pressure: tuple = _fa(4)
    front_brake_compound: int = _i()
    rear_brake_compound: int = _i()
    pad_life: tuple = _fa(4)
    disc_life: tuple = _fa(4)
    ignition_on: int = _i()
    starter_engine_on: int = _i()
    is_engine_running: int = _i()
    kerb_vibration: float = _f()
    slip_vibrations: float = _f()
    g_vibrations: float = _f()
    abs_vibrations: float = _f()

    @classmethod
    def from_bytes(cls, data: bytes) -> PageFilePhysics:
        """Decode the physics page; raises ValueError if data is too short."""
        return cls._decode(data)


@_page
@dataclass
class PageFileGraphics(_Page):
    """Raw graphics page; text fields are UTF-16 code units."""

    packet_id: int = _i()
    status: int = _i()
    session: int = _i()
    current_time: tuple = _text(15)
    last_time: tuple = _text(15)
    best_time: tuple = _text(15)
    split: tuple = _text(15)
    completed_laps: int = _i()
    position: int = _i()
    i_current_time: int = _i()
    i_last_time: int = _i()
    i_best_time: int = _i()
    session_time_left: float = _f()
    distance_traveled: float = _f()
    is_in_pit: int = _i()
    current_sector_index: int = _i()
    last_sector_time: int = _i()
    number_of_laps: int = _i()
    tyre_compound: tuple = _text(33)
    replay_time_multiplier: float = _f()
    normalized_car_position: float = _f()
    active_cars: int = _i()
    car_coordinates: tuple = _fa(60, 3)
    car_id: tuple = _ia(60)
    player_car_id: int = _i()
    penalty_time: float = _f()
    flag: int = _i()
    penalty: int = _i()
    ideal_line_on: int = _i()
    is_in_pit_lane: int = _i()
    surface_grip: float = _f()
    mandatory_pit_done: int = _i()
    wind_speed: float = _f()
    wind_direction: float = _f()
    is_setup_menu_visible: int = _i()
    main_display_index: int = _i()
    secondary_display_index: int = _i()
    tc: int = _i()
    tc_cut: int = _i()
    engine_map: int = _i()
    abs: int = _i()
    fuel_used_per_lap: float = _f()
    rain_lights: int = _i()
    flashing_lights: int = _i()
    lights_stage: int = _i()
    exhaust_temperature: float = _f()
    wiper_lv: int = _i()
    driver_stint_total_time_left: int = _i()
    driver_stint_time_left: int = _i()
    rain_tyres: int = _i()
    session_index: int = _i()
    used_fuel: float = _f()
    delta_lap_time: tuple = _text(15)
    i_delta_lap_time: int = _i()
    estimated_lap_time: tuple = _text(15)
    i_estimated_lap_time: int = _i()
    is_delta_positive: int = _i()
    i_split: int = _i()
    is_valid_lap: int = _i()
    fuel_estimated_laps: float = _f()
    track_status: tuple = _text(33)
    missing_mandatory_pits: int = _i()
    clock: float = _f()
    direction_lights_left: int = _i()
    direction_lights_right: int = _i()

    @classmethod
    def from_bytes(cls, data: bytes) -> PageFileGraphics:
        """Decode the graphics page; raises ValueError if data is too short."""
        return cls._decode(data)


@_page
@dataclass
class PageFileStatic(_Page):
    """Raw static page; text fields are UTF-16 code units."""

    sm_version: tuple = _text(15)
    ac_version: tuple = _text(15)
    number_of_sessions: int = _i()
    num_cars: int = _i()
    car_model: tuple = _text(33)
    track: tuple = _text(33)
    player_name: tuple = _text(33)
    player_surname: tuple = _text(33)
    player_nick: tuple = _text(33)
    sector_count: int = _i()
    max_torque: float = _f()
    max_power: float = _f()
    max_rpm: int = _i()
    max_fuel: float = _f()
    suspension_max_travel: tuple = _fa(4)
    tyre_radius: tuple = _fa(4)
    max_turbo_boost: float = _f()
    deprecated_1: float = _f()
    deprecated_2: float = _f()
    penalties_enabled: int = _i()
    aid_fuel_rate: float = _f()
    aid_tire_rate: float = _f()
    aid_mechanical_damage: float = _f()
    aid_allow_tyre_blankets: int = _i()
    aid_stability: float = _f()
    aid_auto_clutch: int = _i()
    aid_auto_blip: int = _i()
    has_drs: int = _i()
    has_ers: int = _i()
    has_kers: int = _i()
    kers_max_j: float = _f()
    engine_brake_settings_count: int = _i()
    ers_power_controller_count: int = _i()
    track_spline_length: float = _f()
    track_configuration: tuple = _text(33)
    ers_max_j: float = _f()
    is_timed_race: int = _i()
    has_extra_lap: int = _i()
    car_skin: tuple = _text(33)
    reversed_grid_positions: int = _i()
    pit_window_start: int = _i()
    pit_window_end: int = _i()
    is_online: int = _i()

    @classmethod
    def from_bytes(cls, data: bytes) -> PageFileStatic:
        """Decode the static page; raises ValueError if data is too short."""
        return cls._decode(data)


_I32 = struct.Struct("<i")
_SM_VERSION = struct.Struct("<15H")


def _require(data: bytes, size: int, what: str) -> None:
    if len(data) < size:
        raise ValueError(f"{what} needs {size} bytes, got {len(data)}")


def read_packet_id(data: bytes) -> int:
    """Packet id at the start of a physics or graphics page."""
    _require(data, _I32.size, "packet id")
    return _I32.unpack_from(data, 0)[0]


def read_status(data: bytes) -> Status:
    """Sim status from the start of a graphics page."""
    offset = PageFileGraphics.OFFSETS["status"]
    _require(data, offset + _I32.size, "status")
    return Status.from_raw(_I32.unpack_from(data, offset)[0])


def read_sm_version(data: bytes) -> tuple[int, ...]:
    """Raw UTF-16 code units of the shared memory version in a static page."""
    _require(data, _SM_VERSION.size, "shared memory version")
    return _SM_VERSION.unpack_from(data, 0)