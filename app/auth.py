"""Shared-secret checks for the mini-app API and the Telegram webhook.

Both secrets are optional: when the setting is unset the check passes.
A mismatch raises Unauthorized, rendered as ``{"error": "Unauthorized"}``.
"""

import secrets

import structlog
from fastapi import Header

from app.config import settings
from app.tracker.errors import Unauthorized

logger = structlog.get_logger(__name__)


def _matches(presented: str | None, expected: str) -> bool:
    if presented is None:
        return False
    return secrets.compare_digest(presented.encode(), expected.encode())


async def verify_api_key(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    authorization: str | None = Header(default=None),
) -> str:
    """Mini-app key via X-API-Key or Authorization: Bearer (TRACKER_API_KEY)."""
    if settings.tracker_api_key is None:
        return ""

    key = x_api_key
    if key is None and authorization and authorization.startswith("Bearer "):
        key = authorization[7:].strip()

    if not _matches(key, settings.tracker_api_key):
        logger.warning("api key rejected", presented=key is not None)
        raise Unauthorized("invalid or missing API key")
    return key


async def verify_webhook_secret(
    secret_token: str | None = Header(default=None, alias="X-Telegram-Bot-Api-Secret-Token"),
) -> None:
    # Telegram echoes the secret_token given to setWebhook in this header
    if settings.webhook_secret is None:
        return
    if not _matches(secret_token, settings.webhook_secret):
        logger.warning("webhook secret rejected", presented=secret_token is not None)
        raise Unauthorized("invalid webhook secret")
