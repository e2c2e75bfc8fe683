"""FastAPI dependencies — build per-request collaborators from the session."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.db import get_session
from app.tracker.service import LogService
from app.tracker.store import LogStore, SqlLogStore, SqlUserDirectory, UserDirectory


@dataclass(frozen=True, slots=True)
class Stores:
    users: UserDirectory
    logs: LogStore


async def get_stores(session: AsyncSession = Depends(get_session)) -> Stores:
    return Stores(users=SqlUserDirectory(session), logs=SqlLogStore(session))


async def get_log_service(stores: Stores = Depends(get_stores)) -> LogService:
    return LogService(stores.users, stores.logs)


def get_tz_name() -> str:
    return settings.default_tz
