"""
Environment-variable helpers.

Feature modules keep their own `xxx()` accessor functions (read on every call,
so tests can patch `os.environ`); these helpers only do the parsing.
"""

from __future__ import annotations

import json
import os


def env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, "").strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def env_list(name: str, default: list[str]) -> list[str]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return list(default)
    return [part.strip() for part in raw.split(",") if part.strip()]


def env_json_dict(name: str, default: dict[str, str]) -> dict[str, str]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return dict(default)
    try:
        data = json.loads(raw)
    except ValueError:
        return dict(default)
    if not isinstance(data, dict):
        return dict(default)
    return {str(k): str(v) for k, v in data.items()}
