"""Server-rendered pages. They call the same services as the JSON API."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request, status
from starlette.responses import RedirectResponse

from ..core.templates import template_response
from ..deps import AuthenticatedSessionUserDependency, SessionUserDependency
from ..schemas.user import UserPublic
from . import auth, tasks

router = APIRouter()


@router.get("/", name="pages:home", tags=["web"])
async def home(request: Request, current_user: SessionUserDependency) -> Any:
    if current_user is not None:
        return RedirectResponse(request.url_for("tasks:list"), status_code=status.HTTP_303_SEE_OTHER)
    return template_response(request, "pages/home.html", {"title": "Welcome"})


@router.get("/profile", name="pages:profile", tags=["web"])
async def profile(request: Request, current_user: AuthenticatedSessionUserDependency) -> Any:
    return template_response(
        request,
        "pages/profile.html",
        {"title": "Profile", "current_user": current_user, "profile": UserPublic.model_validate(current_user)},
    )


router.include_router(auth.router, prefix="/auth")
router.include_router(tasks.router, prefix="/tasks")

__all__ = ["router"]
