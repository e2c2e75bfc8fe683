"""Shared fixtures for the test suite."""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from app.main import app
from app.tracker.bot import get_telegram_client
from app.tracker.deps import Stores, get_stores, get_tz_name
from app.tracker.errors import StorageUnavailable
from app.tracker.service import LogService
from app.tracker.store import SLEEP_LOGS, WEIGHT_LOGS, log_columns


# ---------------------------------------------------------------------------
# In-memory stores (no real Postgres needed)
# ---------------------------------------------------------------------------

class FakeUserDirectory:
    """Dict-backed stand-in for SqlUserDirectory."""

    def __init__(self) -> None:
        self.users: dict[int, dict[str, Any]] = {}

    async def find_by_external_id(self, owner_id: int) -> dict[str, Any] | None:
        user = self.users.get(owner_id)
        return dict(user) if user else None

    async def create(self, owner_id: int, username: str | None = None) -> dict[str, Any]:
        self.users.setdefault(
            owner_id,
            {"id": owner_id, "username": username, "target_weight_kg": None, "target_sleep_hours": None},
        )
        return dict(self.users[owner_id])

    async def update(self, owner_id: int, fields: dict[str, Any]) -> dict[str, Any] | None:
        if owner_id not in self.users:
            return None
        self.users[owner_id].update(fields)
        return dict(self.users[owner_id])


class FakeLogStore:
    """Keyed by (owner_id, log_date) per table, like the real primary keys."""

    def __init__(self) -> None:
        self.tables: dict[str, dict[tuple[int, date], dict[str, Any]]] = {
            SLEEP_LOGS: {},
            WEIGHT_LOGS: {},
        }

    async def upsert(self, table: str, owner_id: int, day: date, fields: dict[str, Any]) -> dict[str, Any]:
        row = {"owner_id": owner_id, "log_date": day}
        row.update({c: fields.get(c) for c in log_columns(table)})
        self.tables[table][(owner_id, day)] = row
        return dict(row)

    async def delete(self, table: str, owner_id: int, day: date) -> None:
        self.tables[table].pop((owner_id, day), None)

    async def query_recent(self, table: str, owner_id: int, limit: int) -> list[dict[str, Any]]:
        return (await self.query_all(table, owner_id))[:limit]

    async def query_all(self, table: str, owner_id: int) -> list[dict[str, Any]]:
        rows = [dict(r) for (owner, _), r in self.tables[table].items() if owner == owner_id]
        return sorted(rows, key=lambda r: r["log_date"], reverse=True)

    def rows(self, table: str, owner_id: int) -> list[dict[str, Any]]:
        return [r for (owner, _), r in self.tables[table].items() if owner == owner_id]


class BrokenStore:
    """Every call fails the way a lost database connection does."""

    def __getattr__(self, name: str):
        async def _fail(*args, **kwargs):
            raise StorageUnavailable("connection refused")

        return _fail


class FakeTelegramClient:
    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []

    async def send_message(self, chat_id: int, text: str, reply_markup: dict[str, Any] | None = None) -> None:
        self.sent.append({"chat_id": chat_id, "text": text, "reply_markup": reply_markup})

    @property
    def last_text(self) -> str:
        return self.sent[-1]["text"]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

OWNER_ID = 424242


@pytest.fixture()
def users() -> FakeUserDirectory:
    return FakeUserDirectory()


@pytest.fixture()
def logs() -> FakeLogStore:
    return FakeLogStore()


@pytest.fixture()
async def registered(users) -> int:
    """A registered owner id."""
    await users.create(OWNER_ID, "sleepy")
    return OWNER_ID


@pytest.fixture()
def service(users, logs) -> LogService:
    return LogService(users, logs)


@pytest.fixture()
def telegram() -> FakeTelegramClient:
    return FakeTelegramClient()


@pytest.fixture()
def override_stores(users, logs, telegram):
    """Override the FastAPI dependencies so no real DB or Bot API is needed."""
    async def _stores():
        return Stores(users=users, logs=logs)

    app.dependency_overrides[get_stores] = _stores
    app.dependency_overrides[get_telegram_client] = lambda: telegram
    app.dependency_overrides[get_tz_name] = lambda: "UTC"
    yield Stores(users=users, logs=logs)
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(override_stores):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def make_sleep_row(owner_id: int, day: date, hours: float = 8.0, quality: int = 8) -> dict[str, Any]:
    """Helper to build a stored sleep_logs row dict."""
    return {
        "owner_id": owner_id,
        "log_date": day,
        "sleep_start": "23:00",
        "sleep_end": "07:00",
        "hours": hours,
        "quality": quality,
        "note": None,
    }
