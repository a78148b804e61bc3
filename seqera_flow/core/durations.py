"""Helpers turning configured poll frequencies into seconds."""
from __future__ import annotations

import re
from typing import Any

UNIT_MULTIPLIERS: dict[str, int] = {
    "seconds": 1,
    "minutes": 60,
    "hours": 3600,
    "days": 86400,
}

_DAYS_CLOCK = re.compile(r"^(\d+)-(\d{1,2}):(\d{1,2}):(\d{1,2})$")
_CLOCK = re.compile(r"^(\d{1,2}):(\d{1,2}):(\d{1,2})$")
_MINUTES = re.compile(r"^(\d{1,2}):(\d{1,2})$")


def interval_seconds(value: float, unit: str = "minutes") -> float:
    """Convert a ``value`` + ``unit`` pair into seconds."""

    try:
        multiplier = UNIT_MULTIPLIERS[unit]
    except KeyError:
        raise ValueError(f"unknown poll unit: {unit!r} (expected one of {list(UNIT_MULTIPLIERS)})") from None
    return value * multiplier


def coerce_seconds(value: Any, default: float) -> float:
    """Best-effort numeric parse of a poll interval; falls back to ``default``."""

    if isinstance(value, bool):
        return default
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return default
    if seconds != seconds or seconds <= 0:  # NaN or non-positive
        return default
    return seconds


def parse_duration(value: Any) -> float | None:
    """Parse ``DD-HH:MM:SS``, ``HH:MM:SS``, ``MM:SS`` or plain seconds.

    Returns ``None`` when the value cannot be interpreted.
    """

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if match := _DAYS_CLOCK.match(text):
        days, hours, minutes, seconds = (int(part) for part in match.groups())
        return float(days * 86400 + hours * 3600 + minutes * 60 + seconds)
    if match := _CLOCK.match(text):
        hours, minutes, seconds = (int(part) for part in match.groups())
        return float(hours * 3600 + minutes * 60 + seconds)
    if match := _MINUTES.match(text):
        minutes, seconds = (int(part) for part in match.groups())
        return float(minutes * 60 + seconds)
    if text.isdigit():
        return float(int(text))
    return None
