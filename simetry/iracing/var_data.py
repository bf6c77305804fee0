"""Decoding of telemetry variable values from raw buffer rows."""

from __future__ import annotations

import enum
import math
import struct
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from typing import TypeVar

from .header import VarHeader, VarType

T = TypeVar("T")
Parser = Callable[[VarType, bytes], "T | None"]

_U8 = struct.Struct("<B")
_I32 = struct.Struct("<i")
_U32 = struct.Struct("<I")
_F32 = struct.Struct("<f")
_F64 = struct.Struct("<d")


def _read(fmt: struct.Struct, data: bytes):
    if len(data) < fmt.size:
        return None
    return fmt.unpack_from(data)[0]


@dataclass(frozen=True)
class BitField:
    """Raw 32-bit flag set."""

    value: int


class CarPositions(enum.IntEnum):
    """Cars detected around the player."""

    OFF = 0
    CLEAR = 1
    CAR_LEFT = 2
    CAR_RIGHT = 3
    CAR_LEFT_RIGHT = 4
    CARS_LEFT = 5
    CARS_RIGHT = 6

    def car_left(self) -> bool:
        return self in (CarPositions.CAR_LEFT, CarPositions.CAR_LEFT_RIGHT, CarPositions.CARS_LEFT)

    def car_right(self) -> bool:
        return self in (
            CarPositions.CAR_RIGHT,
            CarPositions.CAR_LEFT_RIGHT,
            CarPositions.CARS_RIGHT,
        )


def _to_f32(value: float) -> float:
    return _F32.unpack(_F32.pack(value))[0]


def _format_float(value: float, single: bool) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if single:
        target = _to_f32(value)
        text = f"{target:.9g}"
        for precision in range(1, 10):
            candidate = f"{target:.{precision}g}"
            if _to_f32(float(candidate)) == target:
                text = candidate
                break
    else:
        text = repr(float(value))
    return format(Decimal(text), "f")


@dataclass(frozen=True)
class Value:
    """A value of any variable type, tagged with that type."""

    kind: VarType
    value: int | bool | float

    def __str__(self) -> str:
        if self.kind is VarType.BOOL:
            return "true" if self.value else "false"
        if self.kind is VarType.BIT_FIELD:
            return format(int(self.value), "#032b")
        if self.kind is VarType.FLOAT:
            return _format_float(float(self.value), single=True)
        if self.kind is VarType.DOUBLE:
            return _format_float(float(self.value), single=False)
        return str(int(self.value))


def parse_char(var_type: VarType, data: bytes) -> int | None:
    if var_type in (VarType.CHAR, VarType.BOOL):
        return _read(_U8, data)
    return None


def parse_bool(var_type: VarType, data: bytes) -> bool | None:
    value = parse_char(var_type, data)
    return None if value is None else value != 0


def parse_int(var_type: VarType, data: bytes) -> int | None:
    if var_type is VarType.CHAR:
        return _read(_U8, data)
    if var_type is VarType.INT:
        return _read(_I32, data)
    return None


def parse_u32(var_type: VarType, data: bytes) -> int | None:
    if var_type is VarType.BIT_FIELD:
        return _read(_U32, data)
    return None


def parse_float(var_type: VarType, data: bytes) -> float | None:
    if var_type is VarType.FLOAT:
        return _read(_F32, data)
    return None


def parse_double(var_type: VarType, data: bytes) -> float | None:
    if var_type is VarType.FLOAT:
        return _read(_F32, data)
    if var_type is VarType.DOUBLE:
        return _read(_F64, data)
    return None


def parse_bit_field(var_type: VarType, data: bytes) -> BitField | None:
    value = parse_u32(var_type, data)
    return None if value is None else BitField(value)


def parse_car_positions(var_type: VarType, data: bytes) -> CarPositions | None:
    bit_field = parse_bit_field(var_type, data)
    if bit_field is None:
        return None
    try:
        return CarPositions(bit_field.value)
    except ValueError:
        return None


_VALUE_PARSERS: dict[VarType, Callable[[VarType, bytes], object]] = {
    VarType.CHAR: parse_char,
    VarType.BOOL: parse_bool,
    VarType.INT: parse_int,
    VarType.BIT_FIELD: parse_u32,
    VarType.FLOAT: parse_float,
    VarType.DOUBLE: parse_double,
}


def parse_value(var_type: VarType, data: bytes) -> Value | None:
    """Read a value of whatever type the variable has."""
    value = _VALUE_PARSERS[var_type](var_type, data)
    return None if value is None else Value(var_type, value)


def parse_list(parser: Callable[[VarType, bytes], T | None]) -> Callable[[VarType, bytes], list[T]]:
    """Turn a single-entry parser into one that reads every entry, skipping bad ones."""

    def parse(var_type: VarType, data: bytes) -> list[T]:
        size = var_type.byte_count()
        parsed = (parser(var_type, data[start : start + size]) for start in range(0, len(data), size))
        return [item for item in parsed if item is not None]

    return parse


def parse_from_raw(
    parser: Callable[[VarType, bytes], T | None],
    entry: int,
    header: VarHeader,
    data: bytes,
) -> T | None:
    """Read entry `entry` (and the entries after it) of a variable from a buffer row."""
    if entry >= header.count:
        return None
    size = header.var_type.byte_count()
    start = header.offset + entry * size
    end = start + (header.count - entry) * size
    if start < 0 or end > len(data):
        raise IndexError(
            f"variable {header.name!r} spans bytes {start}..{end}, buffer has {len(data)}"
        )
    return parser(header.var_type, bytes(data[start:end]))