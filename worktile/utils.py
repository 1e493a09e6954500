"""
Shared utility functions for parsing and data manipulation

Provides common helpers for:
- String parsing: Environment variable conversion (parse_bool, parse_int, parse_float, split_csv)
- Topic sanitization: Converting hostnames to MQTT-safe topic segments
- Data coercion: Clamping and safe type conversion with fallback defaults

These utilities are used throughout worktile for configuration parsing and store reads.
"""

from __future__ import annotations

import math
from typing import Any


def sanitize_hostname_for_topic(hostname: str) -> str:
    """Convert hostnames to MQTT topic-safe segments."""
    return hostname.lower().replace(".", "_").replace("/", "_").replace("#", "_").replace("+", "_")


def parse_bool(value: str | None, default: bool = False) -> bool:
    """Interpret env-style booleans."""
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def parse_int(value: str | None, default: int) -> int:
    """Best-effort int parser with fallback."""
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_float(value: str | None, default: float) -> float:
    """Best-effort float parser with fallback."""
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def split_csv(value: str | None) -> list[str]:
    """Split comma-separated strings into trimmed tokens."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def clamp(value: int, minimum: int, maximum: int) -> int:
    """Clamp an int into ``[minimum, maximum]``."""
    return max(minimum, min(maximum, value))


def coerce_int(value: Any, default: int) -> int:
    """Coerce a stored scalar to int; bools, non-finite floats and garbage fall back to ``default``."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, str):
        return parse_int(value.strip(), default)
    return default


def coerce_bool(value: Any, default: bool) -> bool:
    """Coerce a stored scalar to bool, accepting env-style strings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        return parse_bool(value, default)
    return default


def coerce_float(value: Any, default: float | None) -> float | None:
    """Coerce a stored scalar to a finite float."""
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip()
    elif not isinstance(value, int | float):
        return default
    try:
        result = float(value)
    except (OverflowError, ValueError):
        return default
    return result if math.isfinite(result) else default


def coerce_str(value: Any, default: str) -> str:
    """Coerce a stored scalar to a non-empty string."""
    if value is None or isinstance(value, bool):
        return default
    text = str(value).strip()
    return text or default
