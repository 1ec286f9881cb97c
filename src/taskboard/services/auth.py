"""Authentication service encapsulating user registration and token flows."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from beanie import PydanticObjectId
from bson.errors import InvalidId
from pydantic import ValidationError as PydanticValidationError

from ..core.config import Settings
from ..core.security import (
    ExpiredSignatureError,
    IssuedToken,
    JWTError,
    TokenType,
    issue_token,
    read_token,
    revoked_tokens,
    verify_password,
)
from ..errors import AuthenticationError, ValidationError
from ..models import User
from ..schemas.auth import TokenPayload
from .users import UserService

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Access denied. Invalid token."
EXPIRED_TOKEN_MESSAGE = "Access denied. Token has expired."
MISSING_USER_MESSAGE = "Access denied. User no longer exists."


@dataclass(slots=True)
class TokenPair:
    """Container for access and refresh tokens."""

    access: IssuedToken
    refresh: IssuedToken


class AuthService:
    """High-level authentication workflows."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._user_service = UserService()

    async def register_user(self, *, name: str, email: str, password: str) -> User:
        existing = await self._user_service.get_user_by_email(email)
        if existing is not None:
            raise ValidationError("Email is already registered.", code="email_taken")
        user = await self._user_service.create_user(name=name, email=email, password=password)
        logger.info("User registered", extra={"user_id": str(user.id)})
        return user

    async def authenticate_user(self, email: str, password: str) -> User | None:
        user = await self._user_service.get_user_by_email(email)
        if user is None:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user

    def build_token_pair(self, user: User) -> TokenPair:
        if user.id is None:
            raise ValueError("User must be persisted before issuing tokens.")
        return TokenPair(
            access=issue_token(user.id, TokenType.ACCESS, self._settings),
            refresh=issue_token(user.id, TokenType.REFRESH, self._settings),
        )

    def decode(self, token: str, token_type: TokenType) -> TokenPayload:
        """Verify ``token`` and return its payload, rejecting revoked tokens."""

        try:
            raw = read_token(token, token_type, self._settings)
        except ExpiredSignatureError as exc:
            raise AuthenticationError(EXPIRED_TOKEN_MESSAGE, code="token_expired") from exc
        except JWTError as exc:
            raise AuthenticationError(INVALID_TOKEN_MESSAGE, code="invalid_token") from exc

        try:
            payload = TokenPayload.model_validate(raw)
        except PydanticValidationError as exc:
            raise AuthenticationError(INVALID_TOKEN_MESSAGE, code="invalid_token") from exc

        if payload.type is not token_type:
            raise AuthenticationError(INVALID_TOKEN_MESSAGE, code="invalid_token")
        if payload.jti in revoked_tokens:
            raise AuthenticationError("Access denied. Token has been revoked.", code="token_revoked")
        return payload

    async def resolve_user(self, payload: TokenPayload) -> User:
        """Load the user a verified token was issued to."""

        try:
            user_id = PydanticObjectId(payload.sub)
        except InvalidId as exc:
            raise AuthenticationError(INVALID_TOKEN_MESSAGE, code="invalid_token") from exc
        user = await self._user_service.get_user(user_id)
        if user is None:
            raise AuthenticationError(MISSING_USER_MESSAGE, code="user_not_found")
        return user

    async def refresh_from_token(self, refresh_token: str) -> tuple[User, TokenPair]:
        payload = self.decode(refresh_token, TokenType.REFRESH)
        user = await self.resolve_user(payload)
        self.revoke_token(payload)
        return user, self.build_token_pair(user)

    def revoke_token(self, payload: TokenPayload) -> None:
        revoked_tokens.revoke(payload.jti, payload.exp)


__all__ = [
    "AuthService",
    "EXPIRED_TOKEN_MESSAGE",
    "INVALID_TOKEN_MESSAGE",
    "MISSING_USER_MESSAGE",
    "TokenPair",
]
