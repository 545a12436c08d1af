"""Configuration and environment helpers for the project.

Provides small helpers to read typed environment variables and exposes
project-level configuration constants used across the codebase (e.g.
HTTP_VERIFY, FETCH_TIMEOUT, the named cache presets and LOG_LEVEL).
"""

from __future__ import annotations

import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


# Network / HTTP
HTTP_VERIFY = _env_bool("HTTP_VERIFY", True)
FETCH_TIMEOUT = _env_float("FETCH_TIMEOUT", 20.0)

# Cache behaviour shared by every named store
CACHE_SWEEP_INTERVAL = _env_float("CACHE_SWEEP_INTERVAL", 60.0)
CACHE_SINGLE_FLIGHT = _env_bool("CACHE_SINGLE_FLIGHT", False)

# Named cache presets (seconds / entries)
API_CACHE_TTL = _env_float("API_CACHE_TTL", 2 * 60.0)
API_CACHE_MAX_SIZE = _env_int("API_CACHE_MAX_SIZE", 50)

USER_DATA_CACHE_TTL = _env_float("USER_DATA_CACHE_TTL", 10 * 60.0)
USER_DATA_CACHE_MAX_SIZE = _env_int("USER_DATA_CACHE_MAX_SIZE", 20)

STATIC_CACHE_TTL = _env_float("STATIC_CACHE_TTL", 60 * 60.0)
STATIC_CACHE_MAX_SIZE = _env_int("STATIC_CACHE_MAX_SIZE", 30)

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
