"""Reusable FastAPI dependencies."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .core.config import Settings, get_settings
from .core.context import bind_user_id
from .core.security import TokenType
from .core.session import get_session_user_id, logout_user
from .errors import AuthenticationError, LoginRequired
from .models import User
from .schemas.auth import TokenPayload
from .services import AuthService, CommentService, TaskService, UserService

SettingsDependency = Annotated[Settings, Depends(get_settings)]

_bearer_scheme = HTTPBearer(auto_error=False, description="JWT access token")


def get_auth_service(settings: SettingsDependency) -> AuthService:
    return AuthService(settings)


def get_user_service() -> UserService:
    return UserService()


def get_task_service() -> TaskService:
    return TaskService()


def get_comment_service() -> CommentService:
    return CommentService()


AuthServiceDependency = Annotated[AuthService, Depends(get_auth_service)]
UserServiceDependency = Annotated[UserService, Depends(get_user_service)]
TaskServiceDependency = Annotated[TaskService, Depends(get_task_service)]
CommentServiceDependency = Annotated[CommentService, Depends(get_comment_service)]


async def get_access_token_payload(
    service: AuthServiceDependency,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> TokenPayload:
    """Verify the bearer token presented with the request."""

    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access denied. No token provided.", code="missing_token")
    return service.decode(credentials.credentials, TokenType.ACCESS)


AccessTokenDependency = Annotated[TokenPayload, Depends(get_access_token_payload)]


async def get_current_user(service: AuthServiceDependency, payload: AccessTokenDependency) -> User:
    """Resolve the authenticated API user from their access token."""

    user = await service.resolve_user(payload)
    bind_user_id(user.id)
    return user


CurrentUserDependency = Annotated[User, Depends(get_current_user)]


async def get_session_user(request: Request, users: UserServiceDependency) -> User | None:
    """Return the user signed in through the cookie session, if any."""

    user_id = get_session_user_id(request.session)
    if user_id is None:
        return None
    user = await users.get_user(user_id)
    if user is None:
        logout_user(request.session)
    else:
        bind_user_id(user.id)
    return user


SessionUserDependency = Annotated[User | None, Depends(get_session_user)]


async def require_session_user(user: SessionUserDependency) -> User:
    if user is None:
        raise LoginRequired()
    return user


AuthenticatedSessionUserDependency = Annotated[User, Depends(require_session_user)]


__all__ = [
    "AccessTokenDependency",
    "AuthServiceDependency",
    "AuthenticatedSessionUserDependency",
    "CommentServiceDependency",
    "CurrentUserDependency",
    "SessionUserDependency",
    "SettingsDependency",
    "TaskServiceDependency",
    "UserServiceDependency",
    "get_current_user",
    "get_session_user",
]
