"""Schemas describing authentication payloads."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from ..core.security import TokenType
from .user import UserPublic

_NAME_PATTERN = re.compile(r"^[A-Za-z\s]+$")


def check_password_strength(value: str) -> str:
    """Require a lower-case letter, an upper-case letter and a digit."""

    if not re.search(r"[a-z]", value) or not re.search(r"[A-Z]", value) or not re.search(r"\d", value):
        raise ValueError(
            "Password must contain at least one lowercase letter, one uppercase letter, and one number."
        )
    return value


def check_display_name(value: str) -> str:
    if not _NAME_PATTERN.match(value):
        raise ValueError("Name can only contain letters and spaces.")
    return value


class RegisterRequest(BaseModel):
    """Incoming payload for registering a new user."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {"name": "Ada Lovelace", "email": "ada@example.com", "password": "Secret123"}
        },
    )

    name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=100)

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        return check_display_name(value)

    @field_validator("password")
    @classmethod
    def _validate_password(cls, value: str) -> str:
        return check_password_strength(value)


class LoginRequest(BaseModel):
    """Credentials submitted to the JSON login endpoint."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    password: str = Field(min_length=1)


class RefreshRequest(BaseModel):
    """Request payload for refreshing JWT tokens."""

    refresh_token: str


class AuthTokens(BaseModel):
    """Access and refresh tokens returned to clients."""

    access_token: str
    refresh_token: str
    token_type: str = Field(default="bearer", frozen=True)
    expires_in: int
    refresh_expires_in: int


class AuthResponse(BaseModel):
    """Authentication response containing issued tokens and user metadata."""

    user: UserPublic
    tokens: AuthTokens


class TokenValidation(BaseModel):
    valid: bool = True
    user: UserPublic


class TokenPayload(BaseModel):
    """Validated JWT payload."""

    model_config = ConfigDict(extra="ignore")

    sub: str
    exp: datetime
    iat: datetime
    jti: str
    type: TokenType


__all__ = [
    "AuthResponse",
    "AuthTokens",
    "LoginRequest",
    "RefreshRequest",
    "RegisterRequest",
    "TokenPayload",
    "TokenValidation",
    "check_display_name",
    "check_password_strength",
]
