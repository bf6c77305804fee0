"""Decoded Assetto Corsa telemetry: enumerations and per-page records."""

from __future__ import annotations

import enum
from dataclasses import dataclass

Vec2 = tuple[float, float]
Vec3 = tuple[float, float, float]
Vec4 = tuple[float, float, float, float]


class _RawEnum(enum.IntEnum):
    """Enumeration decoded from a raw integer, with a fallback for unknown codes."""

    @classmethod
    def _fallback(cls) -> _RawEnum:
        raise NotImplementedError

    @classmethod
    def from_raw(cls, value: int):
        try:
            return cls(value)
        except ValueError:
            return cls._fallback()


class Penalty(_RawEnum):
    NONE = 0
    DRIVE_THROUGH_CUTTING = 1
    STOP_AND_GO_10_CUTTING = 2
    STOP_AND_GO_20_CUTTING = 3
    STOP_AND_GO_30_CUTTING = 4
    DISQUALIFIED_CUTTING = 5
    REMOVE_BEST_LAPTIME_CUTTING = 6
    DRIVE_THROUGH_PIT_SPEEDING = 7
    STOP_AND_GO_10_PIT_SPEEDING = 8
    STOP_AND_GO_20_PIT_SPEEDING = 9
    STOP_AND_GO_30_PIT_SPEEDING = 10
    DISQUALIFIED_PIT_SPEEDING = 11
    REMOVE_BEST_LAPTIME_PIT_SPEEDING = 12
    DISQUALIFIED_IGNORED_MANDATORY_PIT = 13
    POST_RACE_TIME = 14
    DISQUALIFIED_TROLLING = 15
    DISQUALIFIED_PIT_ENTRY = 16
    DISQUALIFIED_PIT_EXIT = 17
    DISQUALIFIED_WRONG_WAY = 18
    DRIVE_THROUGH_IGNORED_DRIVER_STINT = 19
    DISQUALIFIED_IGNORED_DRIVER_STINT = 20
    DISQUALIFIED_EXCEEDED_DRIVER_STINT_LIMIT = 21

    @classmethod
    def from_raw(cls, value: int) -> Penalty:
        """Decode a raw penalty code; unknown codes mean no penalty."""
        return super().from_raw(value)

    @classmethod
    def _fallback(cls) -> Penalty:
        return cls.NONE


class Status(_RawEnum):
    OFF = 0
    REPLAY = 1
    LIVE = 2
    PAUSE = 3

    @classmethod
    def from_raw(cls, value: int) -> Status:
        """Decode a raw status code; unknown codes mean off."""
        return super().from_raw(value)

    @classmethod
    def _fallback(cls) -> Status:
        return cls.OFF


class SessionType(_RawEnum):
    UNKNOWN = -1
    PRACTICE = 0
    QUALIFY = 1
    RACE = 2
    HOTLAP = 3
    TIME_ATTACK = 4
    DRIFT = 5
    DRAG = 6
    HOT_STINT = 7
    HOTLAP_SUPER_POLE = 8

    @classmethod
    def from_raw(cls, value: int) -> SessionType:
        """Decode a raw session code; unknown codes map to UNKNOWN."""
        return super().from_raw(value)

    @classmethod
    def _fallback(cls) -> SessionType:
        return cls.UNKNOWN


class FlagType(_RawEnum):
    NONE = 0
    BLUE = 1
    YELLOW = 2
    BLACK = 3
    WHITE = 4
    CHECKERED = 5
    PENALTY = 6
    GREEN = 7
    ORANGE = 8

    @classmethod
    def from_raw(cls, value: int) -> FlagType:
        """Decode a raw flag code; unknown codes mean no flag."""
        return super().from_raw(value)

    @classmethod
    def _fallback(cls) -> FlagType:
        return cls.NONE


@dataclass
class Physics:
    """Data updated at every physics step."""

    packet_id: int
    gas: float
    brake: float
    fuel: float
    gear: int
    rpm: int
    steer_angle: float
    speed_kmh: float
    velocity: Vec3
    acc_g: Vec3
    wheel_slip: Vec4
    wheel_load: Vec4
    wheels_pressure: Vec4
    wheel_angular_speed: Vec4
    tyre_wear: Vec4
    tyre_dirty_level: Vec4
    tyre_core_temperature: Vec4
    camber_rad: Vec4
    suspension_travel: Vec4
    drs: float
    tc: float
    heading: float
    pitch: float
    roll: float
    cg_height: float
    car_damage: tuple[float, float, float, float, float]
    number_of_tyres_out: int
    pit_limiter_on: int
    abs: float
    kers_charge: float
    kers_input: float
    auto_shifter_on: int
    ride_height: Vec2
    turbo_boost: float
    ballast: float
    air_density: float
    air_temp: float
    road_temp: float
    local_angular_vel: Vec3
    final_ff: float
    performance_meter: float
    engine_brake: int
    ers_recovery_level: int
    ers_power_level: int
    ers_heat_charging: int
    ers_is_charging: int
    kers_current_kj: float
    drs_available: int
    drs_enabled: int
    brake_temp: Vec4
    clutch: float
    tyre_temp_i: Vec4
    tyre_temp_m: Vec4
    tyre_temp_o: Vec4
    is_ai_controlled: int
    tyre_contact_point: tuple[Vec3, Vec3, Vec3, Vec3]
    tyre_contact_normal: tuple[Vec3, Vec3, Vec3, Vec3]
    tyre_contact_heading: tuple[Vec3, Vec3, Vec3, Vec3]
    brake_bias: float
    local_velocity: Vec3
    p2p_activations: int
    p2p_status: int
    current_max_rpm: int
    mz: Vec4
    fx: Vec4
    fy: Vec4
    slip_ratio: Vec4
    slip_angle: Vec4
    tc_in_action: int
    abs_in_action: int
    suspension_damage: Vec4
    tyre_temp: Vec4
    water_temp: float
    brake_pressure: Vec4
    front_brake_compound: int
    rear_brake_compound: int
    pad_life: Vec4
    disc_life: Vec4
    ignition_on: int
    starter_engine_on: int
    is_engine_running: int
    kerb_vibration: float
    slip_vibrations: float
    g_vibrations: float
    abs_vibrations: float


@dataclass
class Graphics:
    """Data updated at every graphics step."""

    packet_id: int
    status: Status
    session: SessionType
    current_time: str
    last_time: str
    best_time: str
    split: str
    completed_laps: int
    position: int
    i_current_time: int
    i_last_time: int
    i_best_time: int
    session_time_left: float
    distance_traveled: float
    is_in_pit: int
    current_sector_index: int
    last_sector_time: int
    number_of_laps: int
    tyre_compound: str
    replay_time_multiplier: float
    normalized_car_position: float
    active_cars: int
    car_coordinates: list[Vec3]
    car_id: list[int]
    player_car_id: int
    penalty_time: float
    flag: FlagType
    penalty: Penalty
    ideal_line_on: int
    is_in_pit_lane: int
    surface_grip: float
    mandatory_pit_done: int
    wind_speed: float
    wind_direction: float
    is_setup_menu_visible: int
    main_display_index: int
    secondary_display_index: int
    tc: int
    tc_cut: int
    engine_map: int
    abs: int
    fuel_used_per_lap: float
    rain_lights: int
    flashing_lights: int
    lights_stage: int
    exhaust_temperature: float
    wiper_lv: int
    driver_stint_total_time_left: int
    driver_stint_time_left: int
    rain_tyres: int
    session_index: int
    used_fuel: float
    delta_lap_time: str
    i_delta_lap_time: int
    estimated_lap_time: str
    i_estimated_lap_time: int
    is_delta_positive: int
    i_split: int
    is_valid_lap: int
    fuel_estimated_laps: float
    track_status: str
    missing_mandatory_pits: int
    clock: float
    direction_lights_left: int
    direction_lights_right: int


@dataclass
class StaticData:
    """Data that never changes during a session."""

    sm_version: str
    ac_version: str
    number_of_sessions: int
    num_cars: int
    car_model: str
    track: str
    player_name: str
    player_surname: str
    player_nick: str
    sector_count: int
    max_torque: float
    max_power: float
    max_rpm: int
    max_fuel: float
    suspension_max_travel: Vec4
    tyre_radius: Vec4
    max_turbo_boost: float
    penalties_enabled: int
    aid_fuel_rate: float
    aid_tire_rate: float
    aid_mechanical_damage: float
    aid_allow_tyre_blankets: int
    aid_stability: float
    aid_auto_clutch: int
    aid_auto_blip: int
    has_drs: int
    has_ers: int
    has_kers: int
    kers_max_j: float
    engine_brake_settings_count: int
    ers_power_controller_count: int
    track_spline_length: float
    track_configuration: str
    ers_max_j: float
    is_timed_race: int
    has_extra_lap: int
    car_skin: str
    reversed_grid_positions: int
    pit_window_start: int
    pit_window_end: int
    is_online: int