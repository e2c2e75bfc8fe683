"""Wall-clock arithmetic for sleep sessions."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal

from app.tracker.errors import InvalidFormat

MINUTES_PER_DAY = 24 * 60

_HH_MM = re.compile(r"([0-9]{1,2}):([0-9]{1,2})")


def minutes_since_midnight(value: str) -> int:
    """Parse ``HH:MM`` into minutes after midnight, 0–1439."""
    match = _HH_MM.fullmatch(value) if isinstance(value, str) else None
    if match is None:
        raise InvalidFormat(f"Invalid time: {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise InvalidFormat(f"Time out of range: {value!r}")
    return hours * 60 + minutes


def hour_of(value: str) -> int:
    return minutes_since_midnight(value) // 60


def duration_minutes(start_min: int, end_min: int) -> int:
    """Minutes from start to end; an end at or before start falls on the next day."""
    if end_min <= start_min:
        end_min += MINUTES_PER_DAY
    return end_min - start_min


def round_hours(minutes: int) -> float:
    """Minutes → hours at one decimal, halves rounded up (465 min → 7.8)."""
    hours = (Decimal(minutes) / Decimal(60)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return float(hours)


def sleep_duration_hours(sleep_start: str, sleep_end: str) -> float:
    start = minutes_since_midnight(sleep_start)
    end = minutes_since_midnight(sleep_end)
    return round_hours(duration_minutes(start, end))


def normalize(value: str) -> str:
    """Canonical zero-padded ``HH:MM`` ("7:5" → "07:05")."""
    minutes = minutes_since_midnight(value.strip())
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
