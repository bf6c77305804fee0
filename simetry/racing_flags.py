"""Flags that can be waved at a driver during a race."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields
from typing import Any


@dataclass
class RacingFlags:
    """Set of racing flags currently shown to the driver."""

    green: bool = False
    yellow: bool = False
    blue: bool = False
    white: bool = False
    red: bool = False
    black: bool = False
    checkered: bool = False
    meatball: bool = False
    black_and_white: bool = False
    start_ready: bool = False
    start_set: bool = False
    start_go: bool = False

    def to_dict(self) -> dict[str, bool]:
        """Return the flags as a plain mapping of flag name to state."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RacingFlags:
        """Build flags from a mapping holding every flag as a boolean."""
        if not isinstance(data, Mapping):
            raise ValueError(f"racing flags must be a mapping, got {type(data).__name__}")
        values = {}
        for field in fields(cls):
            if field.name not in data:
                raise ValueError(f"missing racing flag {field.name!r}")
            value = data[field.name]
            if not isinstance(value, bool):
                raise ValueError(f"racing flag {field.name!r} must be a boolean, got {value!r}")
            values[field.name] = value
        return cls(**values)