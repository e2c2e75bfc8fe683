"""Submission and record models — Pydantic v2, camelCase on the wire."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Submissions — every field optional so the service can report MissingFields
# ---------------------------------------------------------------------------


class SleepSubmission(CamelModel):
    owner_id: int | None = None
    log_date: str | None = Field(default=None, alias="date")
    sleep_start: str | None = None
    sleep_end: str | None = None
    note: str | None = None


class WeightSubmission(CamelModel):
    owner_id: int | None = None
    log_date: str | None = Field(default=None, alias="date")
    weight: Any = None  # coerced by the service
    note: str | None = None


class DeleteSubmission(CamelModel):
    owner_id: int | None = None
    log_date: str | None = Field(default=None, alias="date")


class SettingsSubmission(CamelModel):
    """Only fields present in the payload are applied (see ``model_fields_set``)."""

    owner_id: int | None = None
    target_weight_kg: float | None = None
    target_sleep_hours: float | None = None


class UserRegistration(CamelModel):
    owner_id: int | None = None
    username: str | None = None


# ---------------------------------------------------------------------------
# Stored records
# ---------------------------------------------------------------------------


class User(CamelModel):
    id: int
    username: str | None = None
    target_weight_kg: float | None = None
    target_sleep_hours: float | None = None


class SleepLog(CamelModel):
    owner_id: int
    log_date: date = Field(alias="date")
    sleep_start: str
    sleep_end: str
    hours: float
    quality: int
    note: str | None = None


class WeightLog(CamelModel):
    owner_id: int
    log_date: date = Field(alias="date")
    weight_kg: float
    note: str | None = None


class SleepResult(BaseModel):
    record: SleepLog
    hours: float
    quality: int


class Targets(CamelModel):
    target_weight_kg: float | None = None
    target_sleep_hours: float | None = None


class Dashboard(CamelModel):
    sleep: list[SleepLog] = Field(default_factory=list)
    weight: list[WeightLog] = Field(default_factory=list)
    targets: Targets = Field(default_factory=Targets)
