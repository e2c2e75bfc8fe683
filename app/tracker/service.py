"""Log ingestion — validation, derived fields, upsert keyed by (owner, date).

The service owns no state; its user directory and log store are passed in.
Every write touches at most one row, and a resubmission for the same date
replaces the earlier values.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Any

import structlog

from app.tracker import scoring, timecalc
from app.tracker.errors import InvalidFormat, MissingFields, UserNotFound
from app.tracker.models import (
    DeleteSubmission,
    SettingsSubmission,
    SleepLog,
    SleepResult,
    SleepSubmission,
    User,
    WeightLog,
    WeightSubmission,
)
from app.tracker.store import SLEEP_LOGS, WEIGHT_LOGS, LogStore, UserDirectory

logger = structlog.get_logger(__name__)

# Upper bounds and precision follow the NUMERIC columns in schema.py
MAX_WEIGHT_KG = 500.0
WEIGHT_DECIMALS = 2
TARGET_LIMITS: dict[str, tuple[float, int]] = {
    "target_weight_kg": (MAX_WEIGHT_KG, 1),
    "target_sleep_hours": (24.0, 1),
}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require(submission: Any, *fields: str) -> None:
    """Raise MissingFields naming each absent field by its wire alias."""
    missing = [
        type(submission).model_fields[name].alias or name
        for name in fields
        if _is_blank(getattr(submission, name))
    ]
    if missing:
        raise MissingFields(missing)


def parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise InvalidFormat(f"Invalid date: {value!r}")


def coerce_weight(value: Any) -> float:
    """Numbers and numeric strings (comma decimals allowed) → weight in kg.

    The result is positive, at most MAX_WEIGHT_KG, and rounded to the two
    decimals the weight column keeps.
    """
    if isinstance(value, bool):
        raise InvalidFormat("Weight must be numeric")
    if isinstance(value, (int, float)):
        weight = float(value)
    elif isinstance(value, str):
        try:
            weight = float(value.strip().replace(",", "."))
        except ValueError:
            raise InvalidFormat(f"Weight must be numeric: {value!r}")
    else:
        raise InvalidFormat("Weight must be numeric")
    if not math.isfinite(weight) or not 0 < weight <= MAX_WEIGHT_KG:
        raise InvalidFormat(f"Weight out of range: {value!r}")
    return round(weight, WEIGHT_DECIMALS)


def coerce_target(name: str, value: float | None) -> float | None:
    """Settings target within its column range; None clears it."""
    if value is None:
        return None
    upper, decimals = TARGET_LIMITS[name]
    if not math.isfinite(value) or not 0 < value <= upper:
        raise InvalidFormat(f"{name} out of range: {value!r}")
    return round(value, decimals)


def _clean_note(note: str | None) -> str | None:
    if note is None:
        return None
    return note.strip() or None


class LogService:
    def __init__(self, users: UserDirectory, logs: LogStore) -> None:
        self.users = users
        self.logs = logs

    async def get_user(self, owner_id: int) -> User:
        row = await self.users.find_by_external_id(owner_id)
        if row is None:
            raise UserNotFound(f"user {owner_id} is not registered")
        return User.model_validate(row)

    async def register_user(self, owner_id: int, username: str | None = None) -> User:
        row = await self.users.find_by_external_id(owner_id)
        if row is None:
            row = await self.users.create(owner_id, username)
            logger.info("user registered", owner_id=owner_id)
        return User.model_validate(row)

    # -- sleep -------------------------------------------------------------

    async def log_sleep(self, submission: SleepSubmission) -> SleepResult:
        require(submission, "owner_id", "log_date", "sleep_start", "sleep_end")
        day = parse_date(submission.log_date)
        sleep_start = timecalc.normalize(submission.sleep_start)
        sleep_end = timecalc.normalize(submission.sleep_end)
        hours = timecalc.sleep_duration_hours(sleep_start, sleep_end)
        quality = scoring.sleep_quality(hours, sleep_start)

        await self.get_user(submission.owner_id)
        row = await self.logs.upsert(
            SLEEP_LOGS,
            submission.owner_id,
            day,
            {
                "sleep_start": sleep_start,
                "sleep_end": sleep_end,
                "hours": hours,
                "quality": quality,
                "note": _clean_note(submission.note),
            },
        )
        logger.info(
            "sleep logged",
            owner_id=submission.owner_id,
            date=day.isoformat(),
            hours=hours,
            quality=quality,
        )
        return SleepResult(record=SleepLog.model_validate(row), hours=hours, quality=quality)

    async def delete_sleep(self, submission: DeleteSubmission) -> None:
        await self._delete(SLEEP_LOGS, submission)

    # -- weight ------------------------------------------------------------

    async def log_weight(self, submission: WeightSubmission) -> WeightLog:
        require(submission, "owner_id", "log_date", "weight")
        day = parse_date(submission.log_date)
        weight = coerce_weight(submission.weight)

        await self.get_user(submission.owner_id)
        row = await self.logs.upsert(
            WEIGHT_LOGS,
            submission.owner_id,
            day,
            {"weight_kg": weight, "note": _clean_note(submission.note)},
        )
        logger.info("weight logged", owner_id=submission.owner_id, date=day.isoformat(), weight_kg=weight)
        return WeightLog.model_validate(row)

    async def delete_weight(self, submission: DeleteSubmission) -> None:
        await self._delete(WEIGHT_LOGS, submission)

    # -- settings ----------------------------------------------------------

    async def update_settings(self, submission: SettingsSubmission) -> User:
        """Apply only the targets present in the submission."""
        require(submission, "owner_id")
        fields = {
            name: coerce_target(name, getattr(submission, name))
            for name in TARGET_LIMITS
            if name in submission.model_fields_set
        }

        user = await self.get_user(submission.owner_id)
        if not fields:
            return user
        row = await self.users.update(submission.owner_id, fields)
        if row is None:
            raise UserNotFound(f"user {submission.owner_id} is not registered")
        logger.info("settings updated", owner_id=submission.owner_id, fields=sorted(fields))
        return User.model_validate(row)

    async def _delete(self, table: str, submission: DeleteSubmission) -> None:
        require(submission, "owner_id", "log_date")
        day = parse_date(submission.log_date)
        await self.logs.delete(table, submission.owner_id, day)
        logger.info("log deleted", table=table, owner_id=submission.owner_id, date=day.isoformat())
