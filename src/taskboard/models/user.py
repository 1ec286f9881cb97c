"""User document stored in MongoDB."""

from __future__ import annotations

from beanie import Document
from pydantic import ConfigDict, Field, field_validator
from pymongo import ASCENDING, IndexModel

from .common import TimestampMixin


class User(TimestampMixin, Document):
    """Registered account that owns tasks and comments."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=2, max_length=50)
    email: str = Field(max_length=320)
    hashed_password: str

    @field_validator("email", mode="before")
    @classmethod
    def _normalise_email(cls, value: object) -> str:
        return str(value or "").strip().lower()

    class Settings:
        name = "users"
        indexes = [
            IndexModel([("email", ASCENDING)], name="users_email_unique", unique=True),
        ]


__all__ = ["User"]
