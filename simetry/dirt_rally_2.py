"""Telemetry from DiRT Rally 2.0, received as UDP packets."""

from __future__ import annotations

import asyncio
import math
import struct
from dataclasses import dataclass

from .moment import AngularVelocity, Moment, Simetry, Velocity

PACKET_BUFFER_SIZE = 264

_PACKET = struct.Struct("<64f8x")

_LEADING_FIELDS = (
    "time",
    "time_of_current_lap",
    "distance_driven_on_current_lap",
    "distance_driven_overall",
    "position_x",
    "position_y",
    "position_z",
    "velocity_ms",
    "velocity_x",
    "velocity_y",
    "velocity_z",
    "roll_vector_x",
    "roll_vector_y",
    "roll_vector_z",
    "pitch_vector_x",
    "pitch_vector_y",
    "pitch_vector_z",
    "position_of_suspension_rear_left",
    "position_of_suspension_rear_right",
    "position_of_suspension_front_left",
    "position_of_suspension_front_right",
    "velocity_of_suspension_rear_left",
    "velocity_of_suspension_rear_right",
    "velocity_of_suspension_front_left",
    "velocity_of_suspension_front_right",
    "velocity_of_wheel_rear_left",
    "velocity_of_wheel_rear_right",
    "velocity_of_wheel_front_left",
    "velocity_of_wheel_front_right",
    "position_throttle",
    "position_steer",
    "position_brake",
    "position_clutch",
    "gear",
    "g_force_lateral",
    "g_force_longitudinal",
    "current_lap",
    "speed_of_engine_rpm_div_10",
)

_BRAKE_FIELDS = (
    "temperature_brake_rear_left",
    "temperature_brake_rear_right",
    "temperature_brake_front_left",
    "temperature_brake_front_right",
)


def _float_to_i8(value: float) -> int:
    """Truncate toward zero and saturate into the signed 8-bit range."""
    if math.isnan(value):
        return 0
    if value >= 127:
        return 127
    if value <= -128:
        return -128
    return int(value)


@dataclass
class SimState(Moment):
    """One telemetry packet."""

    time: float = 0.0
    time_of_current_lap: float = 0.0
    distance_driven_on_current_lap: float = 0.0
    distance_driven_overall: float = 0.0
    position_x: float = 0.0
    position_y: float = 0.0
    position_z: float = 0.0
    velocity_ms: float = 0.0
    velocity_x: float = 0.0
    velocity_y: float = 0.0
    velocity_z: float = 0.0
    roll_vector_x: float = 0.0
    roll_vector_y: float = 0.0
    roll_vector_z: float = 0.0
    pitch_vector_x: float = 0.0
    pitch_vector_y: float = 0.0
    pitch_vector_z: float = 0.0
    position_of_suspension_rear_left: float = 0.0
    position_of_suspension_rear_right: float = 0.0
    position_of_suspension_front_left: float = 0.0
    position_of_suspension_front_right: float = 0.0
    velocity_of_suspension_rear_left: float = 0.0
    velocity_of_suspension_rear_right: float = 0.0
    velocity_of_suspension_front_left: float = 0.0
    velocity_of_suspension_front_right: float = 0.0
    velocity_of_wheel_rear_left: float = 0.0
    velocity_of_wheel_rear_right: float = 0.0
    velocity_of_wheel_front_left: float = 0.0
    velocity_of_wheel_front_right: float = 0.0
    position_throttle: float = 0.0
    position_steer: float = 0.0
    position_brake: float = 0.0
    position_clutch: float = 0.0
    gear: float = 0.0
    g_force_lateral: float = 0.0
    g_force_longitudinal: float = 0.0
    current_lap: float = 0.0
    speed_of_engine_rpm_div_10: float = 0.0
    temperature_brake_rear_left: float = 0.0
    temperature_brake_rear_right: float = 0.0
    temperature_brake_front_left: float = 0.0
    temperature_brake_front_right: float = 0.0
    number_of_laps_in_total: float = 0.0
    length_of_track_in_total: float = 0.0
    maximum_rpm_div_10: float = 0.0

    @classmethod
    def from_bytes(cls, data: bytes) -> SimState:
        """Decode a packet; short packets are zero-filled, long ones cut."""
        buffer = bytes(data[:PACKET_BUFFER_SIZE]).ljust(PACKET_BUFFER_SIZE, b"\0")
        values = _PACKET.unpack(buffer)
        named = dict(zip(_LEADING_FIELDS, values[0:38]))
        named.update(zip(_BRAKE_FIELDS, values[51:55]))
        named["number_of_laps_in_total"] = values[60]
        named["length_of_track_in_total"] = values[61]
        named["maximum_rpm_div_10"] = values[63]
        return cls(**named)

    def vehicle_gear(self) -> int | None:
        gear = _float_to_i8(self.gear)
        if gear == 10:
            gear = -1
        return gear

    def vehicle_velocity(self) -> Velocity | None:
        return Velocity(float(self.velocity_ms))

    def vehicle_engine_rotation_speed(self) -> AngularVelocity | None:
        return AngularVelocity.from_rpm(self.speed_of_engine_rpm_div_10 * 10.0)

    def vehicle_max_engine_rotation_speed(self) -> AngularVelocity | None:
        return AngularVelocity.from_rpm(self.maximum_rpm_div_10 * 10.0)


class _PacketProtocol(asyncio.DatagramProtocol):
    def __init__(self) -> None:
        self.queue: asyncio.Queue[bytes | BaseException] = asyncio.Queue()

    def datagram_received(self, data: bytes, addr) -> None:
        self.queue.put_nowait(data)

    def error_received(self, exc: Exception) -> None:
        self.queue.put_nowait(exc)

    def connection_lost(self, exc: Exception | None) -> None:
        self.queue.put_nowait(exc or ConnectionError("socket closed"))


def _split_address(address: str) -> tuple[str, int]:
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"invalid socket address: {address!r}")
    return host.strip("[]"), int(port)


class Client(Simetry):
    """UDP listener for the game's telemetry output."""

    DEFAULT_URI = "127.0.0.1:20777"

    def __init__(self, transport: asyncio.DatagramTransport, protocol: _PacketProtocol) -> None:
        self._transport = transport
        self._protocol = protocol

    @classmethod
    async def connect(cls, address: str = DEFAULT_URI, retry_delay: float = 5.0) -> Client:
        """Keep trying to connect, sleeping retry_delay seconds between tries."""
        while True:
            try:
                return await cls.try_connect(address)
            except (OSError, ValueError):
                await asyncio.sleep(retry_delay)

    @classmethod
    async def try_connect(cls, address: str) -> Client:
        """Bind to the address and wait until the first packet arrives."""
        host, port = _split_address(address)
        loop = asyncio.get_running_loop()
        transport, protocol = await loop.create_datagram_endpoint(
            _PacketProtocol, local_addr=(host, port)
        )
        client = cls(transport, protocol)
        try:
            await client.next_sim_state()
        except BaseException:
            client.close()
            raise
        return client

    async def next_sim_state(self) -> SimState:
        """Wait for the next packet and decode it."""
        item = await self._protocol.queue.get()
        if isinstance(item, BaseException):
            raise item
        return SimState.from_bytes(item)

    def name(self) -> str:
        return "DirtRally2"

    async def next_moment(self) -> Moment | None:
        try:
            return await self.next_sim_state()
        except OSError:
            return None

    def close(self) -> None:
        self._transport.close()