"""Read-side assembly — recent logs, targets and the current streak."""

from __future__ import annotations

from datetime import date

from app.tracker.errors import UserNotFound
from app.tracker.models import Dashboard, SleepLog, Targets, WeightLog
from app.tracker.store import SLEEP_LOGS, WEIGHT_LOGS, LogStore, UserDirectory
from app.tracker.streak import current_streak as streak_from_dates

DEFAULT_LIMIT = 7


async def build_dashboard(
    users: UserDirectory,
    logs: LogStore,
    owner_id: int,
    limit: int = DEFAULT_LIMIT,
) -> Dashboard:
    """Newest-first sleep and weight windows of at most ``limit`` rows each."""
    user = await users.find_by_external_id(owner_id)
    if user is None:
        raise UserNotFound(f"user {owner_id} is not registered")

    sleep_rows = await logs.query_recent(SLEEP_LOGS, owner_id, limit)
    weight_rows = await logs.query_recent(WEIGHT_LOGS, owner_id, limit)

    return Dashboard(
        sleep=[SleepLog.model_validate(r) for r in sleep_rows],
        weight=[WeightLog.model_validate(r) for r in weight_rows],
        targets=Targets.model_validate(user),
    )


async def current_streak(logs: LogStore, owner_id: int, today: date) -> int:
    """Streak over every sleep log the owner has, not just the dashboard window."""
    rows = await logs.query_all(SLEEP_LOGS, owner_id)
    return streak_from_dates([SleepLog.model_validate(r).log_date for r in rows], today)
