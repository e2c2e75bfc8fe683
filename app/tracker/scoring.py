"""Sleep quality score — pure, 1 (worst) to 10 (best)."""

from __future__ import annotations

from app.tracker.timecalc import hour_of

MIN_SCORE = 1
MAX_SCORE = 10
LATE_BEDTIME_HOURS = range(1, 6)  # asleep between 01:00 and 05:59
LATE_BEDTIME_PENALTY = 2
DEFAULT_SCORE = 5


def base_score(hours: float) -> int:
    """Score from duration alone. Bands are checked in order, first match wins."""
    if 7 <= hours <= 9:
        return 8
    if 6 <= hours < 7:
        return 6
    if 9 < hours <= 10:
        return 7
    if hours <= 5:
        return 3
    return DEFAULT_SCORE


def sleep_quality(hours: float, sleep_start: str | None = None) -> int:
    score = base_score(hours)
    if sleep_start and hour_of(sleep_start) in LATE_BEDTIME_HOURS:
        score = max(MIN_SCORE, score - LATE_BEDTIME_PENALTY)
    return min(MAX_SCORE, max(MIN_SCORE, score))
