"""Pydantic schemas exposed by the JSON API."""

from __future__ import annotations

from .auth import (
    AuthResponse,
    AuthTokens,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenPayload,
    TokenValidation,
)
from .comment import CommentCount, CommentCreate, CommentRead, CommentUpdate
from .envelope import ApiResponse, MessageResponse
from .system import ErrorResponse, HealthStatus, ServiceMetadata
from .task import (
    SubtaskCreate,
    TaskCreate,
    TaskDeletionRead,
    TaskDetailRead,
    TaskRead,
    TaskStatusUpdate,
    TaskUpdate,
)
from .user import UserPublic

__all__ = [
    "ApiResponse",
    "AuthResponse",
    "AuthTokens",
    "CommentCount",
    "CommentCreate",
    "CommentRead",
    "CommentUpdate",
    "ErrorResponse",
    "HealthStatus",
    "LoginRequest",
    "MessageResponse",
    "RefreshRequest",
    "RegisterRequest",
    "ServiceMetadata",
    "SubtaskCreate",
    "TaskCreate",
    "TaskDeletionRead",
    "TaskDetailRead",
    "TaskRead",
    "TaskStatusUpdate",
    "TaskUpdate",
    "TokenPayload",
    "TokenValidation",
    "UserPublic",
]
