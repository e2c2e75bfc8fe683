"""Error kinds surfaced at the request boundary.

Each subclass carries the ``kind`` string returned to callers as
``{"error": kind}`` and the HTTP status it maps to. Detail text stays in the
logs.
"""

from __future__ import annotations


class TrackerError(Exception):
    kind = "ServerError"
    status_code = 500

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail or self.kind)
        self.detail = detail


class MissingFields(TrackerError):
    kind = "MissingFields"
    status_code = 400

    def __init__(self, fields: list[str]) -> None:
        super().__init__(f"missing: {', '.join(fields)}")
        self.fields = fields


class InvalidFormat(TrackerError):
    kind = "InvalidFormat"
    status_code = 400


class UserNotFound(TrackerError):
    kind = "UserNotFound"
    status_code = 404


class StorageUnavailable(TrackerError):
    kind = "StorageUnavailable"
    status_code = 500


class Unauthorized(TrackerError):
    kind = "Unauthorized"
    status_code = 401
