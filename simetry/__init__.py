"""Telemetry from racing simulators behind one common interface."""

__version__ = "0.1.0"

__all__ = [
    "assetto_corsa",
    "connection",
    "dirt_rally_2",
    "generic_http",
    "iracing",
    "moment",
    "racing_flags",
]