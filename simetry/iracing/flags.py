"""Bit flags reported by iRacing."""

from __future__ import annotations

import enum


class CameraState(enum.IntFlag):
    """Description of the camera state."""

    IS_SESSION_SCREEN = 0x0001
    IS_SCENIC_ACTIVE = 0x0002
    CAM_TOOL_ACTIVE = 0x0004
    UI_HIDDEN = 0x0008
    USE_AUTO_SHOT_SELECTION = 0x0010
    USE_TEMPORARY_EDITS = 0x0020
    USE_KEY_ACCELERATION = 0x0040
    USE_KEY_10X_ACCELERATION = 0x0080
    USE_MOUSE_AIM_MODE = 0x0100


class GlobalFlags(enum.IntFlag):
    """Session-wide flags."""

    CHECKERED = 0x0000_0001
    WHITE = 0x0000_0002
    GREEN = 0x0000_0004
    YELLOW = 0x0000_0008
    RED = 0x0000_0010
    BLUE = 0x0000_0020
    DEBRIS = 0x0000_0040
    CROSSED = 0x0000_0080
    YELLOW_WAVING = 0x0000_0100
    ONE_LAP_TO_GREEN = 0x0000_0200
    GREEN_HELD = 0x0000_0400
    TEN_TO_GO = 0x0000_0800
    FIVE_TO_GO = 0x0000_1000
    RANDOM_WAVING = 0x0000_2000
    CAUTION = 0x0000_4000
    CAUTION_WAVING = 0x0000_8000


class DriverBlackFlags(enum.IntFlag):
    """Flags shown to a single driver."""

    BLACK = 0x0001_0000
    DISQUALIFY = 0x0002_0000
    SERVICEABLE = 0x0004_0000
    FURLED = 0x0008_0000
    REPAIR = 0x0010_0000


class StartFlags(enum.IntFlag):
    """Start lights."""

    HIDDEN = 0x1000_0000
    READY = 0x2000_0000
    SET = 0x4000_0000
    GO = 0x8000_0000