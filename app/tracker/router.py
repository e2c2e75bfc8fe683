"""Mini-app HTTP router — logs, settings, dashboard, streak."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.auth import verify_api_key
from app.config import settings
from app.tracker import dashboard
from app.tracker.deps import Stores, get_log_service, get_stores, get_tz_name
from app.tracker.models import (
    DeleteSubmission,
    SettingsSubmission,
    SleepSubmission,
    UserRegistration,
    WeightSubmission,
)
from app.tracker.service import LogService, require
from app.tracker.streak import local_today

router = APIRouter(prefix="/api", tags=["tracker"])


# ---------------------------------------------------------------------------
# /api/users
# ---------------------------------------------------------------------------


@router.post("/users")
async def register_user(
    body: UserRegistration,
    service: LogService = Depends(get_log_service),
    _: str = Depends(verify_api_key),
) -> dict:
    require(body, "owner_id")
    user = await service.register_user(body.owner_id, body.username)
    return {"ok": True, "data": user.to_json()}


# ---------------------------------------------------------------------------
# /api/sleep, /api/weight
# ---------------------------------------------------------------------------


@router.post("/sleep")
async def log_sleep(
    body: SleepSubmission,
    service: LogService = Depends(get_log_service),
    _: str = Depends(verify_api_key),
) -> dict:
    result = await service.log_sleep(body)
    return {
        "ok": True,
        "sleep": result.record.to_json(),
        "hours": result.hours,
        "quality": result.quality,
    }


@router.delete("/sleep/{owner_id}/{log_date}")
async def delete_sleep(
    owner_id: int,
    log_date: str,
    service: LogService = Depends(get_log_service),
    _: str = Depends(verify_api_key),
) -> dict:
    await service.delete_sleep(DeleteSubmission(owner_id=owner_id, log_date=log_date))
    return {"ok": True}


@router.post("/weight")
async def log_weight(
    body: WeightSubmission,
    service: LogService = Depends(get_log_service),
    _: str = Depends(verify_api_key),
) -> dict:
    record = await service.log_weight(body)
    return {"ok": True, "weight": record.to_json()}


@router.delete("/weight/{owner_id}/{log_date}")
async def delete_weight(
    owner_id: int,
    log_date: str,
    service: LogService = Depends(get_log_service),
    _: str = Depends(verify_api_key),
) -> dict:
    await service.delete_weight(DeleteSubmission(owner_id=owner_id, log_date=log_date))
    return {"ok": True}


# ---------------------------------------------------------------------------
# /api/settings
# ---------------------------------------------------------------------------


@router.post("/settings")
async def update_settings(
    body: SettingsSubmission,
    service: LogService = Depends(get_log_service),
    _: str = Depends(verify_api_key),
) -> dict:
    user = await service.update_settings(body)
    return {"ok": True, "data": user.to_json()}


# ---------------------------------------------------------------------------
# /api/dashboard, /api/streak
# ---------------------------------------------------------------------------


@router.get("/dashboard/{owner_id}")
async def get_dashboard(
    owner_id: int,
    stores: Stores = Depends(get_stores),
    _: str = Depends(verify_api_key),
) -> dict:
    data = await dashboard.build_dashboard(
        stores.users, stores.logs, owner_id, limit=settings.dashboard_limit
    )
    return {"ok": True, "data": data.to_json()}


@router.get("/streak/{owner_id}")
async def get_streak(
    owner_id: int,
    stores: Stores = Depends(get_stores),
    tz_name: str = Depends(get_tz_name),
    _: str = Depends(verify_api_key),
) -> dict:
    streak = await dashboard.current_streak(stores.logs, owner_id, local_today(tz_name))
    return {"ok": True, "streak": streak}
