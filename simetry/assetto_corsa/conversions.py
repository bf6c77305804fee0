"""Conversion of raw Assetto Corsa shared memory pages into decoded records."""

from __future__ import annotations

import struct
from collections.abc import Sequence
from dataclasses import fields
from typing import TypeVar

from .data import FlagType, Graphics, Penalty, Physics, SessionType, StaticData, Status
from .layout import PageFileGraphics, PageFilePhysics, PageFileStatic

T = TypeVar("T")

_GRAPHICS_TEXT = frozenset(
    {
        "current_time",
        "last_time",
        "best_time",
        "split",
        "tyre_compound",
        "delta_lap_time",
        "estimated_lap_time",
        "track_status",
    }
)

_STATIC_TEXT = frozenset(
    {
        "sm_version",
        "ac_version",
        "car_model",
        "track",
        "player_name",
        "player_surname",
        "player_nick",
        "track_configuration",
        "car_skin",
    }
)


def extract_string(data: Sequence[int]) -> str:
    """Decode UTF-16 code units up to the first zero; invalid text gives ""."""
    units = list(data)
    try:
        end = units.index(0)
    except ValueError:
        end = len(units)
    try:
        return struct.pack(f"<{end}H", *units[:end]).decode("utf-16-le")
    except (UnicodeDecodeError, struct.error):
        return ""


def combine_car_info(cars: Sequence[T], items: int) -> list[T]:
    """Keep the entries of the first `items` cars."""
    return list(cars[: max(items, 0)])


def physics_from_page(page: PageFilePhysics) -> Physics:
    """Decode a raw physics page."""
    return Physics(**{item.name: getattr(page, item.name) for item in fields(Physics)})


def graphics_from_page(page: PageFileGraphics) -> Graphics:
    """Decode a raw graphics page, keeping only the active cars."""
    values = {}
    for item in fields(Graphics):
        value = getattr(page, item.name)
        values[item.name] = extract_string(value) if item.name in _GRAPHICS_TEXT else value
    active_cars = max(page.active_cars, 0)
    values.update(
        status=Status.from_raw(page.status),
        session=SessionType.from_raw(page.session),
        flag=FlagType.from_raw(page.flag),
        penalty=Penalty.from_raw(page.penalty),
        car_coordinates=combine_car_info(page.car_coordinates, active_cars),
        car_id=combine_car_info(page.car_id, active_cars),
    )
    return Graphics(**values)


def static_from_page(page: PageFileStatic) -> StaticData:
    """Decode a raw static page."""
    values = {}
    for item in fields(StaticData):
        value = getattr(page, item.name)
        values[item.name] = extract_string(value) if item.name in _STATIC_TEXT else value
    return StaticData(**values)