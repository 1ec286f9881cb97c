"""Password hashing and the JWT credentials handed to API clients."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from threading import Lock
from typing import Any
from uuid import uuid4

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from .config import Settings

password_hasher = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenType(str, Enum):
    """The two kinds of bearer token, each signed with its own secret."""

    ACCESS = "access"
    REFRESH = "refresh"

    def secret(self, settings: Settings) -> str:
        if self is TokenType.ACCESS:
            return settings.jwt_secret_key
        return settings.jwt_refresh_secret_key

    def lifetime(self, settings: Settings) -> timedelta:
        if self is TokenType.ACCESS:
            return timedelta(minutes=settings.access_token_expire_minutes)
        return timedelta(minutes=settings.refresh_token_expire_minutes)


@dataclass(slots=True, frozen=True)
class IssuedToken:
    """A signed token plus the claims the server needs to track it."""

    token: str
    token_type: TokenType
    jti: str
    expires_at: datetime


def hash_password(password: str) -> str:
    return password_hasher.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    return password_hasher.verify(password, hashed_password)


def issue_token(
    user_id: object,
    token_type: TokenType,
    settings: Settings,
    *,
    lifetime: timedelta | None = None,
) -> IssuedToken:
    """Sign a token for ``user_id``; ``lifetime`` overrides the configured expiry."""

    issued_at = datetime.now(timezone.utc)
    expires_at = issued_at + (lifetime if lifetime is not None else token_type.lifetime(settings))
    jti = uuid4().hex
    claims: dict[str, Any] = {
        "sub": str(user_id),
        "type": token_type.value,
        "jti": jti,
        "iat": issued_at,
        "exp": expires_at,
    }
    token = jwt.encode(claims, token_type.secret(settings), algorithm=settings.jwt_algorithm)
    return IssuedToken(token=token, token_type=token_type, jti=jti, expires_at=expires_at)


def read_token(token: str, token_type: TokenType, settings: Settings) -> dict[str, Any]:
    """Check the signature and expiry of ``token`` and return its claims.

    python-jose's ``ExpiredSignatureError`` and ``JWTError`` propagate to the
    caller, which decides how each is reported.
    """

    return jwt.decode(token, token_type.secret(settings), algorithms=[settings.jwt_algorithm])


class RevokedTokens:
    """Token ids that must be refused until they would have expired anyway.

    Filled by logout and by refresh-token rotation. Entries live in process
    memory only.
    """

    def __init__(self) -> None:
        self._entries: dict[str, datetime] = {}
        self._lock = Lock()

    def revoke(self, jti: str, expires_at: datetime) -> None:
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        with self._lock:
            self._prune()
            self._entries[jti] = expires_at

    def __contains__(self, jti: object) -> bool:
        with self._lock:
            self._prune()
            return jti in self._entries

    def __len__(self) -> int:
        with self._lock:
            self._prune()
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _prune(self) -> None:
        now = datetime.now(timezone.utc)
        self._entries = {jti: expiry for jti, expiry in self._entries.items() if expiry > now}


revoked_tokens = RevokedTokens()


__all__ = [
    "ExpiredSignatureError",
    "IssuedToken",
    "JWTError",
    "RevokedTokens",
    "TokenType",
    "hash_password",
    "issue_token",
    "read_token",
    "revoked_tokens",
    "verify_password",
]
