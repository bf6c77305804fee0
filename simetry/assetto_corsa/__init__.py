"""Assetto Corsa telemetry read from the game's shared-memory pages."""

__all__ = ["conversions", "data", "layout", "sim", "util"]