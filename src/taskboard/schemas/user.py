"""User-facing Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from beanie import PydanticObjectId
from pydantic import BaseModel, ConfigDict, EmailStr


class UserPublic(BaseModel):
    """Minimal public representation of a user."""

    model_config = ConfigDict(from_attributes=True)

    id: PydanticObjectId
    name: str
    email: EmailStr
    created_at: datetime


__all__ = ["UserPublic"]
