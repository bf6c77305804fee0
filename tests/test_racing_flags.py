import pytest

from simetry.racing_flags import RacingFlags

FLAG_NAMES = [
    "green",
    "yellow",
    "blue",
    "white",
    "red",
    "black",
    "checkered",
    "meatball",
    "black_and_white",
    "start_ready",
    "start_set",
    "start_go",
]


def test_default_has_no_flags_set():
    flags = RacingFlags()
    assert flags.to_dict() == {name: False for name in FLAG_NAMES}


def test_to_dict_keeps_field_order():
    assert list(RacingFlags().to_dict()) == FLAG_NAMES


def test_round_trip():
    flags = RacingFlags(yellow=True, checkered=True, start_go=True)
    assert RacingFlags.from_dict(flags.to_dict()) == flags


def test_from_dict_reads_values():
    data = {name: name in ("blue", "meatball") for name in FLAG_NAMES}
    flags = RacingFlags.from_dict(data)
    assert flags.blue is True
    assert flags.meatball is True
    assert flags.green is False


def test_from_dict_missing_field_raises():
    data = {name: False for name in FLAG_NAMES if name != "red"}
    with pytest.raises(ValueError, match="red"):
        RacingFlags.from_dict(data)


def test_from_dict_non_bool_raises():
    data = {name: False for name in FLAG_NAMES}
    data["green"] = 1
    with pytest.raises(ValueError):
        RacingFlags.from_dict(data)


def test_from_dict_non_mapping_raises():
    with pytest.raises(ValueError):
        RacingFlags.from_dict([True, False])