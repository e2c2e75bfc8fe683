"""Store collaborators — user directory and keyed log store.

The SQL implementations run raw statements on the request's AsyncSession.
Any SQLAlchemy failure, and any connection-level OSError or timeout the
driver raises unwrapped, is logged and re-raised as StorageUnavailable; no
retries here.
"""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Any, Protocol, Sequence

import structlog
from sqlalchemy import Date, bindparam, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.tracker.errors import StorageUnavailable

logger = structlog.get_logger(__name__)

SLEEP_LOGS = "sleep_logs"
WEIGHT_LOGS = "weight_logs"

# Writable columns per log table (besides the user_id/log_date key)
LOG_COLUMNS: dict[str, tuple[str, ...]] = {
    SLEEP_LOGS: ("sleep_start", "sleep_end", "hours", "quality", "note"),
    WEIGHT_LOGS: ("weight_kg", "note"),
}

USER_COLUMNS = ("id", "username", "target_weight_kg", "target_sleep_hours")
USER_SETTINGS_COLUMNS = ("target_weight_kg", "target_sleep_hours")

# asyncpg raises connect failures (ConnectionRefusedError, timeouts) unwrapped
STORE_ERRORS = (SQLAlchemyError, OSError, asyncio.TimeoutError)


class UserDirectory(Protocol):
    async def find_by_external_id(self, owner_id: int) -> dict[str, Any] | None: ...

    async def create(self, owner_id: int, username: str | None = None) -> dict[str, Any]: ...

    async def update(self, owner_id: int, fields: dict[str, Any]) -> dict[str, Any] | None: ...


class LogStore(Protocol):
    async def upsert(
        self, table: str, owner_id: int, day: date, fields: dict[str, Any]
    ) -> dict[str, Any]: ...

    async def delete(self, table: str, owner_id: int, day: date) -> None: ...

    async def query_recent(self, table: str, owner_id: int, limit: int) -> Sequence[dict[str, Any]]: ...

    async def query_all(self, table: str, owner_id: int) -> Sequence[dict[str, Any]]: ...


def log_columns(table: str) -> tuple[str, ...]:
    try:
        return LOG_COLUMNS[table]
    except KeyError:
        raise ValueError(f"Unknown log table: {table}")


def _select_list(table: str) -> str:
    return ", ".join(("user_id AS owner_id", "log_date") + log_columns(table))


class _SqlStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _execute(
        self, stmt, params: dict[str, Any], *, commit: bool = False
    ) -> list[dict[str, Any]]:
        """Run one statement; rows (if any) are read before committing."""
        try:
            result = await self._session.execute(stmt, params)
            rows: list[dict[str, Any]] = []
            if result.returns_rows:
                columns = result.keys()
                rows = [dict(zip(columns, r)) for r in result.fetchall()]
            if commit:
                await self._session.commit()
            return rows
        except STORE_ERRORS as exc:
            logger.error("store call failed", statement=str(stmt), exc_info=True)
            await self._rollback()
            raise StorageUnavailable(str(exc)) from exc

    async def _rollback(self) -> None:
        try:
            await self._session.rollback()
        except STORE_ERRORS:
            logger.warning("rollback failed", exc_info=True)


class SqlUserDirectory(_SqlStore):
    _returning = ", ".join(USER_COLUMNS)

    async def find_by_external_id(self, owner_id: int) -> dict[str, Any] | None:
        rows = await self._execute(
            text(f"SELECT {self._returning} FROM users WHERE id = :id"),
            {"id": owner_id},
        )
        return rows[0] if rows else None

    async def create(self, owner_id: int, username: str | None = None) -> dict[str, Any]:
        """Insert the user if absent; an existing row is returned unchanged."""
        await self._execute(
            text(
                "INSERT INTO users (id, username) VALUES (:id, :username) "
                "ON CONFLICT (id) DO NOTHING"
            ),
            {"id": owner_id, "username": username},
            commit=True,
        )
        user = await self.find_by_external_id(owner_id)
        if user is None:
            raise StorageUnavailable(f"user {owner_id} missing after insert")
        return user

    async def update(self, owner_id: int, fields: dict[str, Any]) -> dict[str, Any] | None:
        columns = [c for c in USER_SETTINGS_COLUMNS if c in fields]
        if not columns:
            return await self.find_by_external_id(owner_id)
        assignments = ", ".join(f"{c} = :{c}" for c in columns)
        params = {c: fields[c] for c in columns}
        params["id"] = owner_id
        rows = await self._execute(
            text(f"UPDATE users SET {assignments} WHERE id = :id RETURNING {self._returning}"),
            params,
            commit=True,
        )
        return rows[0] if rows else None


class SqlLogStore(_SqlStore):
    async def upsert(
        self, table: str, owner_id: int, day: date, fields: dict[str, Any]
    ) -> dict[str, Any]:
        columns = log_columns(table)
        insert_cols = ", ".join(("user_id", "log_date") + columns)
        values = ", ".join((":owner_id", ":day") + tuple(f":{c}" for c in columns))
        updates = ", ".join(f"{c} = EXCLUDED.{c}" for c in columns)
        stmt = text(
            f"INSERT INTO {table} ({insert_cols}) VALUES ({values}) "
            f"ON CONFLICT (user_id, log_date) DO UPDATE SET {updates}, "
            "updated_at = CURRENT_TIMESTAMP "
            f"RETURNING {_select_list(table)}"
        ).bindparams(bindparam("day", type_=Date))
        params: dict[str, Any] = {"owner_id": owner_id, "day": day}
        params.update({c: fields.get(c) for c in columns})

        rows = await self._execute(stmt, params, commit=True)
        return rows[0]

    async def delete(self, table: str, owner_id: int, day: date) -> None:
        log_columns(table)
        stmt = text(
            f"DELETE FROM {table} WHERE user_id = :owner_id AND log_date = :day"
        ).bindparams(bindparam("day", type_=Date))
        await self._execute(stmt, {"owner_id": owner_id, "day": day}, commit=True)

    async def query_recent(self, table: str, owner_id: int, limit: int) -> Sequence[dict[str, Any]]:
        return await self._execute(
            text(
                f"SELECT {_select_list(table)} FROM {table} "
                "WHERE user_id = :owner_id ORDER BY log_date DESC LIMIT :limit"
            ),
            {"owner_id": owner_id, "limit": limit},
        )

    async def query_all(self, table: str, owner_id: int) -> Sequence[dict[str, Any]]:
        return await self._execute(
            text(
                f"SELECT {_select_list(table)} FROM {table} "
                "WHERE user_id = :owner_id ORDER BY log_date DESC"
            ),
            {"owner_id": owner_id},
        )
