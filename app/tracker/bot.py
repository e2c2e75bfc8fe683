"""Telegram bot — webhook intake and reply dispatch.

Updates arrive on ``POST /webhook``. ``/start`` registers the sender and
offers the mini-app button, ``/streak`` reports the current streak, and
``web_app_data`` messages carry a JSON payload whose ``action`` names the
service call. The sender's Telegram id is always the owner.
"""

from __future__ import annotations

import json
from typing import Any, Awaitable, Callable

import httpx
import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from app.auth import verify_webhook_secret
from app.config import settings
from app.tracker import dashboard
from app.tracker.deps import Stores, get_stores, get_tz_name
from app.tracker.errors import TrackerError
from app.tracker.models import (
    DeleteSubmission,
    SettingsSubmission,
    SleepSubmission,
    WeightSubmission,
)
from app.tracker.service import LogService
from app.tracker.streak import local_today

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["bot"])

ERROR_REPLIES: dict[str, str] = {
    "MissingFields": "Some required fields are missing. Please fill in the whole form.",
    "InvalidFormat": "Some values look wrong. Times are HH:MM, dates YYYY-MM-DD, weight a number.",
    "UserNotFound": "I don't know you yet. Send /start first.",
    "StorageUnavailable": "Storage is unavailable right now. Please try again later.",
}
GENERIC_ERROR_REPLY = "Something went wrong. Please try again later."


class TelegramClient:
    """Outbound Bot API calls over httpx."""

    def __init__(
        self,
        token: str | None,
        api_base: str = "https://api.telegram.org",
        timeout: float = 10.0,
    ) -> None:
        self._token = token
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout

    async def send_message(
        self,
        chat_id: int,
        text: str,
        reply_markup: dict[str, Any] | None = None,
    ) -> None:
        if not self._token:
            logger.warning("bot token not configured, reply dropped", chat_id=chat_id)
            return
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            resp = await client.post(f"{self._api_base}/bot{self._token}/sendMessage", json=payload)
            resp.raise_for_status()


def webapp_keyboard(url: str) -> dict[str, Any]:
    return {"inline_keyboard": [[{"text": "📱 Open the tracker", "web_app": {"url": url}}]]}


def _command(text: str) -> str:
    """``/start@MyBot arg`` → ``/start``; empty for plain text."""
    if not text.startswith("/"):
        return ""
    return text.split()[0].split("@")[0].lower()


class TrackerBot:
    def __init__(
        self,
        service: LogService,
        client: TelegramClient,
        webapp_url: str,
        tz_name: str = "UTC",
    ) -> None:
        self._service = service
        self._client = client
        self._webapp_url = webapp_url
        self._tz_name = tz_name
        self._actions: dict[str, Callable[[int, dict[str, Any]], Awaitable[str]]] = {
            "sleep": self._log_sleep,
            "weight": self._log_weight,
            "delete_sleep": self._delete_sleep,
            "delete_weight": self._delete_weight,
            "settings": self._update_settings,
        }

    async def handle_update(self, update: dict[str, Any]) -> None:
        message = update.get("message")
        if not isinstance(message, dict):
            return
        chat_id = (message.get("chat") or {}).get("id")
        sender = message.get("from") or {}
        owner_id = sender.get("id")
        if chat_id is None or owner_id is None:
            return

        web_app_data = message.get("web_app_data")
        if web_app_data:
            raw = web_app_data.get("data") if isinstance(web_app_data, dict) else None
            await self._on_web_app_data(chat_id, owner_id, raw if isinstance(raw, str) else "")
            return

        command = _command(message.get("text") or "")
        if command == "/start":
            await self._on_start(chat_id, owner_id, sender.get("username"))
        elif command == "/streak":
            await self._on_streak(chat_id, owner_id)

    async def _on_start(self, chat_id: int, owner_id: int, username: str | None) -> None:
        try:
            await self._service.register_user(owner_id, username)
        except TrackerError as exc:
            await self._client.send_message(chat_id, ERROR_REPLIES.get(exc.kind, GENERIC_ERROR_REPLY))
            return
        await self._client.send_message(
            chat_id,
            "Hi! Tap the button below to log your sleep and weight 👇",
            reply_markup=webapp_keyboard(self._webapp_url),
        )

    async def _on_streak(self, chat_id: int, owner_id: int) -> None:
        try:
            streak = await dashboard.current_streak(
                self._service.logs, owner_id, local_today(self._tz_name)
            )
        except TrackerError as exc:
            await self._client.send_message(chat_id, ERROR_REPLIES.get(exc.kind, GENERIC_ERROR_REPLY))
            return
        await self._client.send_message(chat_id, f"🔥 Current streak: {streak} day(s)")

    async def _on_web_app_data(self, chat_id: int, owner_id: int, raw: str) -> None:
        try:
            payload = json.loads(raw)
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            logger.warning("unreadable web_app_data", owner_id=owner_id)
            await self._client.send_message(chat_id, ERROR_REPLIES["InvalidFormat"])
            return

        payload.pop("owner_id", None)
        action = payload.pop("action", None)
        handler = self._actions.get(action) if isinstance(action, str) else None
        if handler is None:
            logger.warning("unknown web_app_data action", owner_id=owner_id, action=action)
            await self._client.send_message(chat_id, f"Unknown action: {action}")
            return

        try:
            reply = await handler(owner_id, payload)
        except ValidationError:
            reply = ERROR_REPLIES["InvalidFormat"]
        except TrackerError as exc:
            logger.info("web_app_data rejected", owner_id=owner_id, action=action, kind=exc.kind)
            reply = ERROR_REPLIES.get(exc.kind, GENERIC_ERROR_REPLY)
        await self._client.send_message(chat_id, reply)

    # -- actions -----------------------------------------------------------

    async def _log_sleep(self, owner_id: int, payload: dict[str, Any]) -> str:
        submission = SleepSubmission.model_validate({**payload, "ownerId": owner_id})
        result = await self._service.log_sleep(submission)
        record = result.record
        return (
            f"✅ Sleep for {record.log_date.isoformat()} saved: "
            f"{record.sleep_start}–{record.sleep_end}, {result.hours} h, quality {result.quality}/10"
        )

    async def _log_weight(self, owner_id: int, payload: dict[str, Any]) -> str:
        submission = WeightSubmission.model_validate({**payload, "ownerId": owner_id})
        record = await self._service.log_weight(submission)
        return f"✅ Weight for {record.log_date.isoformat()} saved: {record.weight_kg} kg"

    async def _delete_sleep(self, owner_id: int, payload: dict[str, Any]) -> str:
        submission = DeleteSubmission.model_validate({**payload, "ownerId": owner_id})
        await self._service.delete_sleep(submission)
        return f"🗑 Sleep entry for {submission.log_date} removed"

    async def _delete_weight(self, owner_id: int, payload: dict[str, Any]) -> str:
        submission = DeleteSubmission.model_validate({**payload, "ownerId": owner_id})
        await self._service.delete_weight(submission)
        return f"🗑 Weight entry for {submission.log_date} removed"

    async def _update_settings(self, owner_id: int, payload: dict[str, Any]) -> str:
        submission = SettingsSubmission.model_validate({**payload, "ownerId": owner_id})
        user = await self._service.update_settings(submission)
        return (
            "⚙️ Targets saved: "
            f"weight {user.target_weight_kg if user.target_weight_kg is not None else '—'} kg, "
            f"sleep {user.target_sleep_hours if user.target_sleep_hours is not None else '—'} h"
        )


# ---------------------------------------------------------------------------
# Dependencies & webhook
# ---------------------------------------------------------------------------


def get_telegram_client() -> TelegramClient:
    return TelegramClient(settings.bot_token, settings.telegram_api_base, settings.telegram_timeout_s)


async def get_tracker_bot(
    stores: Stores = Depends(get_stores),
    client: TelegramClient = Depends(get_telegram_client),
    tz_name: str = Depends(get_tz_name),
) -> TrackerBot:
    return TrackerBot(LogService(stores.users, stores.logs), client, settings.webapp_url, tz_name)


@router.post("/webhook")
async def webhook(
    request: Request,
    _: None = Depends(verify_webhook_secret),
    bot: TrackerBot = Depends(get_tracker_bot),
) -> PlainTextResponse:
    try:
        update = await request.json()
        await bot.handle_update(update)
    except Exception:
        logger.exception("webhook update failed")
        return PlainTextResponse("Error", status_code=500)
    return PlainTextResponse("ok")
