"""Binary layout of the iRacing telemetry header and variable descriptions."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from typing import ClassVar

IRSDK_VER = 2

UNLIMITED_LAPS = 32_767
"""Value for the session lap limit when it is unlimited."""

UNLIMITED_TIME = 604_800.0
"""Value for the session time limit when it is unlimited."""

MAX_BUFS = 4
MAX_STRING = 32
MAX_DESC = 64

_VAR_BUF = struct.Struct("<4i")
_HEADER_TOP = struct.Struct("<12i")
_DISK_SUB_HEADER = struct.Struct("<qddii")
_VAR_HEADER = struct.Struct(f"<3iB3x{MAX_STRING}s{MAX_DESC}s{MAX_STRING}s")


def _require(data: bytes, size: int, what: str) -> bytes:
    if len(data) < size:
        raise ValueError(f"{what} needs {size} bytes, got {len(data)}")
    return bytes(data[:size])


def _cp1252(raw: bytes) -> str:
    """Decode a nul-terminated CP1252 string."""
    return raw.split(b"\0", 1)[0].decode("cp1252")


class VarType(enum.IntEnum):
    """Data type of a telemetry variable."""

    CHAR = 0
    BOOL = 1
    INT = 2
    BIT_FIELD = 3
    FLOAT = 4
    DOUBLE = 5

    @classmethod
    def from_raw(cls, raw: int) -> VarType:
        try:
            return cls(raw)
        except ValueError:
            raise ValueError(f"Invalid data type ID: {raw}") from None

    def byte_count(self) -> int:
        """Size in bytes of one entry of this type."""
        return _BYTE_COUNTS[self]


_BYTE_COUNTS = {
    VarType.CHAR: 1,
    VarType.BOOL: 1,
    VarType.INT: 4,
    VarType.BIT_FIELD: 4,
    VarType.FLOAT: 4,
    VarType.DOUBLE: 8,
}


@dataclass
class VarBuf:
    """One of the rotating data buffers."""

    SIZE: ClassVar[int] = _VAR_BUF.size

    tick_count: int = 0
    buf_offset: int = 0
    pad: tuple[int, int] = (0, 0)

    @classmethod
    def from_bytes(cls, data: bytes) -> VarBuf:
        tick_count, buf_offset, pad0, pad1 = _VAR_BUF.unpack(_require(data, cls.SIZE, "VarBuf"))
        return cls(tick_count, buf_offset, (pad0, pad1))


@dataclass
class Header:
    """Main header at the start of the shared memory or a telemetry file."""

    SIZE: ClassVar[int] = _HEADER_TOP.size + MAX_BUFS * _VAR_BUF.size

    ver: int = 0
    status: int = 0
    tick_rate: int = 0
    session_info_update: int = 0
    session_info_len: int = 0
    session_info_offset: int = 0
    num_vars: int = 0
    var_header_offset: int = 0
    num_buf: int = 0
    buf_len: int = 0
    pad: tuple[int, int] = (0, 0)
    var_buf: list[VarBuf] = field(default_factory=lambda: [VarBuf() for _ in range(MAX_BUFS)])

    @classmethod
    def from_bytes(cls, data: bytes) -> Header:
        raw = _require(data, cls.SIZE, "Header")
        values = _HEADER_TOP.unpack(raw[: _HEADER_TOP.size])
        bufs_raw = raw[_HEADER_TOP.size :]
        var_buf = [
            VarBuf.from_bytes(bufs_raw[start : start + _VAR_BUF.size])
            for start in range(0, MAX_BUFS * _VAR_BUF.size, _VAR_BUF.size)
        ]
        return cls(*values[:10], pad=(values[10], values[11]), var_buf=var_buf)


@dataclass
class DiskSubHeader:
    """Extra header that follows the main header in telemetry files."""

    SIZE: ClassVar[int] = _DISK_SUB_HEADER.size

    session_start_date: int = 0
    session_start_time: float = 0.0
    session_end_time: float = 0.0
    session_lap_count: int = 0
    session_record_count: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> DiskSubHeader:
        return cls(*_DISK_SUB_HEADER.unpack(_require(data, cls.SIZE, "DiskSubHeader")))


@dataclass
class VarHeader:
    """Description of one telemetry variable."""

    SIZE: ClassVar[int] = _VAR_HEADER.size

    var_type: VarType
    offset: int
    count: int
    count_as_time: bool = False
    name: str = ""
    desc: str = ""
    unit: str = ""

    @classmethod
    def from_bytes(cls, data: bytes) -> VarHeader:
        """Decode a raw description; an invalid type or name raises ValueError."""
        var_type, offset, count, count_as_time, name, desc, unit = _VAR_HEADER.unpack(
            _require(data, cls.SIZE, "VarHeader")
        )
        try:
            desc_text = _cp1252(desc)
        except UnicodeDecodeError:
            desc_text = ""
        try:
            unit_text = _cp1252(unit)
        except UnicodeDecodeError:
            unit_text = ""
        return cls(
            var_type=VarType.from_raw(var_type),
            offset=offset,
            count=count,
            count_as_time=count_as_time != 0,
            name=_cp1252(name),
            desc=desc_text,
            unit=unit_text,
        )