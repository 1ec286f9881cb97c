"""Service layer orchestrating user-related repository operations."""

from __future__ import annotations

from typing import Sequence

from beanie import PydanticObjectId

from ..core.security import hash_password
from ..models import User
from ..repositories import UserRepository


class UserService:
    """High-level business operations for ``User`` documents."""

    def __init__(self) -> None:
        self._repository = UserRepository()

    async def create_user(self, *, name: str, email: str, password: str) -> User:
        """Create and persist a new user record."""
        user = User(
            name=name,
            email=email,
            hashed_password=hash_password(password),
        )
        return await self._repository.add(user)

    async def get_user(self, user_id: PydanticObjectId) -> User | None:
        """Fetch a user by identifier."""
        return await self._repository.get(user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        """Fetch a user by their email address, ignoring case."""
        return await self._repository.get_by_email(email)

    async def list_users_by_ids(self, ids: Sequence[PydanticObjectId]) -> list[User]:
        """Retrieve users whose identifiers match the provided sequence."""
        return await self._repository.list_by_ids(ids)


__all__ = ["UserService"]
