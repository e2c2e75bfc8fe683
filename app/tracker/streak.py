"""Consecutive-day logging streak ending today."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable
from zoneinfo import ZoneInfo


def local_today(tz_name: str) -> date:
    return datetime.now(ZoneInfo(tz_name)).date()


def current_streak(dates: Iterable[date], today: date) -> int:
    """Count unbroken days walking back from ``today``.

    Today itself is day 0, so a chain that starts yesterday counts as 0.
    Returns 0 for no dates.
    """
    streak = 0
    for day in sorted(dates, reverse=True):
        if (today - day).days != streak:
            break
        streak += 1
    return streak
