"""Configuration of the worker daemon."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Union


@dataclass
class Config:
    """Settings the worker daemon reads from its JSON configuration file."""

    gateway_url: str = ""
    key: str = ""
    zone: str = ""
    heartbeat_interval_seconds: float = 0


def _lookup(data: Mapping[str, Any], name: str) -> Any:
    """Look a JSON key up, exact match first, then ignoring case."""
    if name in data:
        return data[name]
    lowered = name.lower()
    for key, value in data.items():
        if isinstance(key, str) and key.lower() == lowered:
            return value
    return None


def _string(data: Mapping[str, Any], name: str) -> str:
    value = _lookup(data, name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"config field {name!r} must be a string")
    return value


def _integer(data: Mapping[str, Any], name: str) -> int:
    value = _lookup(data, name)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"config field {name!r} must be an integer")
    return value


def load_config(path: Union[str, "os.PathLike[str]"]) -> Config:
    """Read the daemon configuration from a JSON file.

    Raises OSError if the file cannot be read and ValueError if it is not
    valid configuration JSON.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if data is None:
        return Config()
    if not isinstance(data, dict):
        raise ValueError("configuration must be a JSON object")
    return Config(
        gateway_url=_string(data, "gateway_url"),
        key=_string(data, "key"),
        zone=_string(data, "zone"),
        heartbeat_interval_seconds=_integer(data, "heartbeat_interval_seconds"),
    )