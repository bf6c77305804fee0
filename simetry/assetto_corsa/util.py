"""Shared memory client common to the Assetto Corsa family of sims."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, ClassVar

from .conversions import extract_string, graphics_from_page, physics_from_page, static_from_page
from .data import Status
from .layout import (
    PageFileGraphics,
    PageFilePhysics,
    PageFileStatic,
    read_packet_id,
    read_sm_version,
    read_status,
)

_CONNECT_POLL = 0.1
_CHANGE_POLL = 0.002


@dataclass(frozen=True)
class ApiVersion:
    """Supported shared memory versions and the decoders for their pages."""

    major_min: int
    major_max: int
    minor_min: int
    minor_max: int
    decode_static: Callable[[bytes], Any]
    decode_physics: Callable[[bytes], Any]
    decode_graphics: Callable[[bytes], Any]


ASSETTO_CORSA_VERSION = ApiVersion(
    major_min=1,
    major_max=1,
    minor_min=0,
    minor_max=7,
    decode_static=lambda data: static_from_page(PageFileStatic.from_bytes(data)),
    decode_physics=lambda data: physics_from_page(PageFilePhysics.from_bytes(data)),
    decode_graphics=lambda data: graphics_from_page(PageFileGraphics.from_bytes(data)),
)


@dataclass
class SimState:
    """Static data with the latest physics and graphics records."""

    static_data: Any
    physics: Any
    graphics: Any


def _snapshot(memory: Any) -> bytes:
    with memoryview(memory) as view:
        return bytes(view)


def _packet_id(memory: Any) -> int:
    with memoryview(memory) as view:
        return read_packet_id(view)


def _parse_u16(text: str) -> int:
    digits = text[1:] if text.startswith("+") else text
    if not digits or not digits.isascii() or not digits.isdigit():
        raise ValueError(text)
    value = int(digits)
    if value > 0xFFFF:
        raise ValueError(text)
    return value


def check_version(static_bytes: bytes, version: ApiVersion) -> tuple[int, int]:
    """Check the static page's version against the supported range; return (major, minor)."""
    text = extract_string(read_sm_version(static_bytes))
    try:
        parts = [_parse_u16(part) for part in text.split(".")]
    except ValueError:
        raise ValueError(f"Invalid shared memory version string: {text!r}") from None
    if not parts:
        raise ValueError(f"Shared memory version is missing major version in: {text!r}")
    if len(parts) < 2:
        raise ValueError(f"Shared memory version is missing minor version in: {text!r}")
    major, minor = parts[0], parts[1]
    minimum = (version.major_min << 16) | version.minor_min
    maximum = (version.major_max << 16) | version.minor_max
    current = (major << 16) | minor
    if not minimum <= current <= maximum:
        raise ValueError(
            f"Expected shared memory major version in {version.major_min}.{version.minor_min}"
            f" - {version.major_max}.{version.minor_max} range, got {major}.{minor}"
        )
    return major, minor


def _read_page(memory: Any, decode: Callable[[bytes], Any]) -> Any:
    """Decode a page, retrying until it was not written to during the copy."""
    while True:
        before = _packet_id(memory)
        data = _snapshot(memory)
        if _packet_id(memory) == before:
            return decode(data)


class SharedMemoryClient:
    """Reads the static, physics and graphics pages from shared memory buffers.

    Each memory is any object supporting the buffer protocol, such as an mmap.
    """

    VERSION: ClassVar[ApiVersion] = ASSETTO_CORSA_VERSION
    STATE_TYPE: ClassVar[type[SimState]] = SimState

    def __init__(
        self,
        static_data: Any,
        physics_memory: Any,
        graphics_memory: Any,
        last_physics: Any,
        last_graphics: Any,
    ) -> None:
        self._static_data = static_data
        self._physics_memory = physics_memory
        self._graphics_memory = graphics_memory
        self._last_physics = last_physics
        self._last_graphics = last_graphics

    @classmethod
    async def connect(
        cls,
        static_memory: Any,
        physics_memory: Any,
        graphics_memory: Any,
        retry_delay: float = 5.0,
    ) -> SharedMemoryClient:
        """Keep trying to connect, sleeping retry_delay seconds between tries."""
        while True:
            try:
                return await cls.try_connect(static_memory, physics_memory, graphics_memory)
            except ValueError:
                await asyncio.sleep(retry_delay)

    @classmethod
    async def try_connect(
        cls, static_memory: Any, physics_memory: Any, graphics_memory: Any
    ) -> SharedMemoryClient:
        """Wait until the sim is running, check its version and read the first pages."""
        while not cls._graphics_connected(graphics_memory):
            await asyncio.sleep(_CONNECT_POLL)
        static_bytes = _snapshot(static_memory)
        check_version(static_bytes, cls.VERSION)
        static_data = cls.VERSION.decode_static(static_bytes)
        last_physics = _read_page(physics_memory, cls.VERSION.decode_physics)
        last_graphics = _read_page(graphics_memory, cls.VERSION.decode_graphics)
        return cls(static_data, physics_memory, graphics_memory, last_physics, last_graphics)

    @staticmethod
    def _graphics_connected(graphics_memory: Any) -> bool:
        with memoryview(graphics_memory) as view:
            return read_status(view) is not Status.OFF

    def is_connected(self) -> bool:
        """Whether the sim reports a status other than off."""
        return self._graphics_connected(self._graphics_memory)

    async def next_sim_state(self) -> SimState | None:
        """Wait for new physics or graphics data; None once the sim is off."""
        while True:
            if not self.is_connected():
                return None
            changed = False
            if _packet_id(self._physics_memory) != self._last_physics.packet_id:
                changed = True
                self._last_physics = _read_page(self._physics_memory, self.VERSION.decode_physics)
            if _packet_id(self._graphics_memory) != self._last_graphics.packet_id:
                changed = True
                self._last_graphics = _read_page(
                    self._graphics_memory, self.VERSION.decode_graphics
                )
            if changed:
                return self.STATE_TYPE(self._static_data, self._last_physics, self._last_graphics)
            await asyncio.sleep(_CHANGE_POLL)

    def static_data(self) -> Any:
        """Data that stays the same for the whole session."""
        return self._static_data