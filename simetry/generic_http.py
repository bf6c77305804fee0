"""Telemetry from any program that serves readings as JSON over HTTP."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from .moment import AngularVelocity, Moment, Pedals, Simetry, Velocity
from .racing_flags import RacingFlags

DEFAULT_ADDRESS = "0.0.0.0:25055"
DEFAULT_URI = "http://localhost:25055/"

_QUERY_TIMEOUT = 2.0


def _opt_bool(data: Mapping[str, Any], key: str) -> bool | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ValueError(f"field {key!r} must be a boolean, got {value!r}")
    return value


def _opt_float(data: Mapping[str, Any], key: str) -> float | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field {key!r} must be a number, got {value!r}")
    return float(value)


def _opt_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string, got {value!r}")
    return value


def _opt_gear(data: Mapping[str, Any]) -> int | None:
    value = data.get("gear")
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or not -128 <= value <= 127:
        raise ValueError(f"field 'gear' must be an integer in -128..127, got {value!r}")
    return value


def _opt_velocity(data: Mapping[str, Any], key: str) -> Velocity | None:
    value = _opt_float(data, key)
    return None if value is None else Velocity(value)


def _opt_angular(data: Mapping[str, Any], key: str) -> AngularVelocity | None:
    value = _opt_float(data, key)
    return None if value is None else AngularVelocity(value)


def _opt_pedals(data: Mapping[str, Any], key: str) -> Pedals | None:
    value = data.get(key)
    return None if value is None else Pedals.from_dict(value)


@dataclass
class SimState(Moment):
    """One reading; speeds are in m/s and rotation speeds in rad/s."""

    name: str = ""
    vehicle_left: bool | None = None
    vehicle_right: bool | None = None
    gear: int | None = None
    speed: Velocity | None = None
    engine_rotation_speed: AngularVelocity | None = None
    max_engine_rotation_speed: AngularVelocity | None = None
    pit_limiter_engaged: bool | None = None
    in_pit_lane: bool | None = None
    shift_point_speed: AngularVelocity | None = None
    racing_flags: RacingFlags | None = None
    brand_id: str | None = None
    model_id: str | None = None
    unique_id: str | None = None
    left_turn_indicator_on: bool | None = None
    right_turn_indicator_on: bool | None = None
    hazard_indicator_on: bool | None = None
    ignition_on: bool | None = None
    starter_on: bool | None = None
    pedal_input: Pedals | None = None
    pedal_input_raw: Pedals | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SimState:
        """Decode a JSON object; missing or null fields become unknown."""
        if not isinstance(data, Mapping):
            raise ValueError(f"sim state must be a JSON object, got {type(data).__name__}")
        name = data.get("name", "")
        if not isinstance(name, str):
            raise ValueError(f"field 'name' must be a string, got {name!r}")
        flags = data.get("flags")
        return cls(
            name=name,
            vehicle_left=_opt_bool(data, "vehicle_left"),
            vehicle_right=_opt_bool(data, "vehicle_right"),
            gear=_opt_gear(data),
            speed=_opt_velocity(data, "speed"),
            engine_rotation_speed=_opt_angular(data, "engine_rotation_speed"),
            max_engine_rotation_speed=_opt_angular(data, "max_engine_rotation_speed"),
            pit_limiter_engaged=_opt_bool(data, "pit_limiter_engaged"),
            in_pit_lane=_opt_bool(data, "in_pit_lane"),
            shift_point_speed=_opt_angular(data, "shift_point"),
            racing_flags=None if flags is None else RacingFlags.from_dict(flags),
            brand_id=_opt_str(data, "vehicle_brand_id"),
            model_id=_opt_str(data, "vehicle_model_id"),
            unique_id=_opt_str(data, "vehicle_unique_id"),
            left_turn_indicator_on=_opt_bool(data, "left_turn_indicator_on"),
            right_turn_indicator_on=_opt_bool(data, "right_turn_indicator_on"),
            hazard_indicator_on=_opt_bool(data, "hazard_indicator_on"),
            ignition_on=_opt_bool(data, "ignition_on"),
            starter_on=_opt_bool(data, "starter_on"),
            pedal_input=_opt_pedals(data, "pedals"),
            pedal_input_raw=_opt_pedals(data, "pedals_raw"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Encode to the JSON object layout that from_dict reads."""

        def speed(v: Velocity | None) -> float | None:
            return None if v is None else v.meters_per_second

        def angular(v: AngularVelocity | None) -> float | None:
            return None if v is None else v.radians_per_second

        return {
            "name": self.name,
            "vehicle_left": self.vehicle_left,
            "vehicle_right": self.vehicle_right,
            "gear": self.gear,
            "speed": speed(self.speed),
            "engine_rotation_speed": angular(self.engine_rotation_speed),
            "max_engine_rotation_speed": angular(self.max_engine_rotation_speed),
            "pit_limiter_engaged": self.pit_limiter_engaged,
            "in_pit_lane": self.in_pit_lane,
            "shift_point": angular(self.shift_point_speed),
            "flags": None if self.racing_flags is None else self.racing_flags.to_dict(),
            "vehicle_brand_id": self.brand_id,
            "vehicle_model_id": self.model_id,
            "vehicle_unique_id": self.unique_id,
            "left_turn_indicator_on": self.left_turn_indicator_on,
            "right_turn_indicator_on": self.right_turn_indicator_on,
            "hazard_indicator_on": self.hazard_indicator_on,
            "ignition_on": self.ignition_on,
            "starter_on": self.starter_on,
            "pedals": None if self.pedal_input is None else self.pedal_input.to_dict(),
            "pedals_raw": None if self.pedal_input_raw is None else self.pedal_input_raw.to_dict(),
        }

    def vehicle_gear(self) -> int | None:
        return self.gear

    def vehicle_velocity(self) -> Velocity | None:
        return self.speed

    def vehicle_engine_rotation_speed(self) -> AngularVelocity | None:
        return self.engine_rotation_speed

    def vehicle_max_engine_rotation_speed(self) -> AngularVelocity | None:
        return self.max_engine_rotation_speed

    def is_pit_limiter_engaged(self) -> bool | None:
        return self.pit_limiter_engaged

    def is_vehicle_in_pit_lane(self) -> bool | None:
        return self.in_pit_lane

    def is_vehicle_left(self) -> bool | None:
        return self.vehicle_left

    def is_vehicle_right(self) -> bool | None:
        return self.vehicle_right

    def shift_point(self) -> AngularVelocity | None:
        return self.shift_point_speed

    def flags(self) -> RacingFlags | None:
        return self.racing_flags

    def vehicle_brand_id(self) -> str | None:
        return self.brand_id

    def vehicle_model_id(self) -> str | None:
        return self.model_id

    def vehicle_unique_id(self) -> str | None:
        return self.unique_id

    def is_left_turn_indicator_on(self) -> bool | None:
        return self.left_turn_indicator_on

    def is_right_turn_indicator_on(self) -> bool | None:
        return self.right_turn_indicator_on

    def is_hazard_indicator_on(self) -> bool | None:
        return self.hazard_indicator_on

    def is_ignition_on(self) -> bool | None:
        return self.ignition_on

    def is_starter_on(self) -> bool | None:
        return self.starter_on

    def pedals(self) -> Pedals | None:
        return self.pedal_input

    def pedals_raw(self) -> Pedals | None:
        return self.pedal_input_raw


class GenericHttpClient(Simetry):
    """Polls an HTTP endpoint that serves SimState as JSON."""

    def __init__(self, uri: str, http_client: httpx.AsyncClient | None = None) -> None:
        self._uri = httpx.URL(uri)
        self._client = http_client or httpx.AsyncClient(trust_env=False)
        self._name = ""

    @classmethod
    async def connect(cls, uri: str = DEFAULT_URI, retry_delay: float = 5.0) -> GenericHttpClient:
        """Keep trying to connect, sleeping retry_delay seconds between tries."""
        while True:
            try:
                return await cls.try_connect(uri)
            except Exception:
                await asyncio.sleep(retry_delay)

    @classmethod
    async def try_connect(cls, uri: str) -> GenericHttpClient:
        """Query the endpoint once and remember the name it reports."""
        client = cls(uri)
        try:
            state = await client.query()
        except BaseException:
            await client.aclose()
            raise
        client._name = state.name
        return client

    async def query(self) -> SimState:
        """Fetch and decode one reading."""
        response = await self._client.get(self._uri)
        data = json.loads(response.content)
        return SimState.from_dict(data)

    def name(self) -> str:
        return self._name

    async def next_moment(self) -> Moment | None:
        try:
            data = await asyncio.wait_for(self.query(), _QUERY_TIMEOUT)
        except (asyncio.TimeoutError, httpx.HTTPError, ValueError):
            return None
        if data.name != self._name:
            return None
        return data

    async def aclose(self) -> None:
        await self._client.aclose()