"""Browser-session state for the server-rendered pages: sign-in, CSRF and flashes."""

from __future__ import annotations

import hmac
import secrets
from typing import Any, MutableMapping, TypedDict

from beanie import PydanticObjectId

Session = MutableMapping[str, Any]

USER_KEY = "user_id"
CSRF_KEY = "csrf_token"
FLASH_KEY = "flash_messages"
FLASH_CATEGORIES = frozenset({"success", "error", "info"})


class FlashMessage(TypedDict):
    category: str
    message: str


def get_session_user_id(session: Session) -> PydanticObjectId | None:
    raw = session.get(USER_KEY)
    if not isinstance(raw, str) or not PydanticObjectId.is_valid(raw):
        return None
    return PydanticObjectId(raw)


def login_user(session: Session, user_id: PydanticObjectId) -> None:
    session[USER_KEY] = str(user_id)


def logout_user(session: Session) -> None:
    for key in (USER_KEY, CSRF_KEY, FLASH_KEY):
        session.pop(key, None)


def ensure_csrf_token(session: Session) -> str:
    """Return the session's CSRF token, minting one on first use."""

    token = session.get(CSRF_KEY)
    if not isinstance(token, str) or not token:
        token = secrets.token_urlsafe(32)
        session[CSRF_KEY] = token
    return token


def validate_csrf_token(session: Session, provided: object) -> bool:
    """Compare a submitted form token with the one stored in the session."""

    expected = session.get(CSRF_KEY)
    if not isinstance(expected, str) or not expected or not isinstance(provided, str):
        return False
    return hmac.compare_digest(expected, provided)


def flash(session: Session, category: str, message: str) -> None:
    """Queue ``message`` for the next rendered page.

    Unknown categories are shown as ``info``.
    """

    if category not in FLASH_CATEGORIES:
        category = "info"
    queued = session.get(FLASH_KEY)
    if not isinstance(queued, list):
        queued = []
    session[FLASH_KEY] = [*queued, {"category": category, "message": message}]


def consume_flashes(session: Session) -> list[FlashMessage]:
    """Return and forget every queued flash message."""

    queued = session.pop(FLASH_KEY, None)
    if not isinstance(queued, list):
        return []
    return [
        FlashMessage(category=str(item.get("category", "info")), message=str(item["message"]))
        for item in queued
        if isinstance(item, dict) and item.get("message")
    ]


__all__ = [
    "CSRF_KEY",
    "FLASH_CATEGORIES",
    "FLASH_KEY",
    "FlashMessage",
    "USER_KEY",
    "consume_flashes",
    "ensure_csrf_token",
    "flash",
    "get_session_user_id",
    "login_user",
    "logout_user",
    "validate_csrf_token",
]
