"""Parsing of the YAML session info block."""

from __future__ import annotations

from typing import Any

import yaml


def parse_session_info(raw: bytes) -> Any:
    """Decode CP1252 session info and return its first YAML document."""
    try:
        text = bytes(raw).split(b"\0", 1)[0].decode("cp1252")
    except UnicodeDecodeError as exc:
        raise ValueError("CP1252 decode of session info failed") from exc
    try:
        documents = list(yaml.safe_load_all(text))
    except yaml.YAMLError as exc:
        raise ValueError(f"invalid session info YAML: {exc}") from exc
    if not documents:
        raise ValueError("Session info did not contain any items")
    return documents[0]