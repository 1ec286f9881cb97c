"""Per-request values that log records pick up automatically."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

REQUEST_ID_HEADER = "X-Request-ID"
UNSET = "-"

_request_id: ContextVar[str] = ContextVar("taskboard_request_id", default=UNSET)
_user_id: ContextVar[str] = ContextVar("taskboard_user_id", default=UNSET)


@contextmanager
def request_scope(request_id: str) -> Iterator[str]:
    """Bind ``request_id`` for the duration of the block.

    The acting user starts out unset and is filled in by the authentication
    dependencies once the caller is known.
    """

    request_token = _request_id.set(request_id)
    user_token = _user_id.set(UNSET)
    try:
        yield request_id
    finally:
        _user_id.reset(user_token)
        _request_id.reset(request_token)


def bind_user_id(user_id: object) -> None:
    """Record the authenticated user for the rest of the current request."""

    _user_id.set(str(user_id))


def context_snapshot() -> dict[str, str]:
    return {"request_id": _request_id.get(), "user_id": _user_id.get()}


__all__ = [
    "REQUEST_ID_HEADER",
    "UNSET",
    "bind_user_id",
    "context_snapshot",
    "request_scope",
]
