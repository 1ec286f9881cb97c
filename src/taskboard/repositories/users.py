"""Repository for interacting with user documents."""

from __future__ import annotations

from typing import Sequence

from beanie import PydanticObjectId
from beanie.operators import In

from ..models import User
from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Concrete repository for CRUD operations on ``User`` documents."""

    def __init__(self) -> None:
        super().__init__(User)

    async def get_by_email(self, email: str) -> User | None:
        """Return a user matching the supplied (normalised) email if it exists."""
        return await User.find_one(User.email == email.strip().lower())

    async def list_by_ids(self, ids: Sequence[PydanticObjectId]) -> list[User]:
        """Fetch all users whose IDs are contained in the provided sequence."""
        if not ids:
            return []
        return await User.find(In(User.id, list(ids))).to_list()
