"""Jinja2 rendering for the server-rendered pages and their HTMX fragments."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.templating import Jinja2Templates

from .session import consume_flashes, ensure_csrf_token

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
HTMX_VERSION = "1.9.12"

_TIME_UNITS = (("day", 86400), ("hour", 3600), ("minute", 60))

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def time_ago(value: datetime | None, *, now: datetime | None = None) -> str:
    """Render a coarse relative timestamp such as ``3 hours ago``."""

    if value is None:
        return ""
    if value.tzinfo is None:
        # naive values are UTC
        value = value.replace(tzinfo=timezone.utc)
    elapsed = max(int(((now or datetime.now(timezone.utc)) - value).total_seconds()), 0)
    for unit, seconds in _TIME_UNITS:
        amount = elapsed // seconds
        if amount:
            return f"{amount} {unit}{'s' if amount > 1 else ''} ago"
    return "Just now"


templates.env.globals["htmx_version"] = HTMX_VERSION
templates.env.filters["time_ago"] = time_ago


def is_htmx_request(request: Request) -> bool:
    return request.headers.get("HX-Request", "").lower() == "true"


def _render(
    request: Request,
    template_name: str,
    context: dict[str, Any] | None,
    *,
    status_code: int,
    with_flashes: bool,
) -> Any:
    session = request.session
    payload: dict[str, Any] = {
        "settings": getattr(request.app.state, "settings", None),
        "current_user": None,
        **(context or {}),
        "csrf_token": ensure_csrf_token(session),
        "is_htmx": is_htmx_request(request),
        "messages": consume_flashes(session) if with_flashes else [],
    }
    return templates.TemplateResponse(request, template_name, payload, status_code=status_code)


def template_response(
    request: Request,
    template_name: str,
    context: dict[str, Any] | None = None,
    *,
    status_code: int = 200,
) -> Any:
    """Render a full page and drain queued flash messages into it."""

    return _render(request, template_name, context, status_code=status_code, with_flashes=True)


def partial_response(
    request: Request,
    template_name: str,
    context: dict[str, Any] | None = None,
    *,
    status_code: int = 200,
) -> Any:
    """Render an HTMX fragment; queued flash messages wait for the next full page."""

    return _render(request, template_name, context, status_code=status_code, with_flashes=False)


__all__ = [
    "HTMX_VERSION",
    "TEMPLATES_DIR",
    "is_htmx_request",
    "partial_response",
    "template_response",
    "time_ago",
]
