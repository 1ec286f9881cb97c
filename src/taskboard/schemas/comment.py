"""Comment-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from beanie import PydanticObjectId
from pydantic import BaseModel, ConfigDict, Field

from ..models.comment import CONTENT_MAX_LENGTH


class CommentCreate(BaseModel):
    """Payload for adding a comment to a task."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={"example": {"content": "Check the corner shop first."}},
    )

    content: str = Field(min_length=1, max_length=CONTENT_MAX_LENGTH)


class CommentUpdate(CommentCreate):
    """Payload for replacing a comment's content."""


class CommentRead(BaseModel):
    """Public representation of a comment annotated with its author."""

    model_config = ConfigDict(from_attributes=True)

    id: PydanticObjectId
    content: str
    task_id: PydanticObjectId
    user_id: PydanticObjectId
    author_name: str | None = None
    author_email: str | None = None
    created_at: datetime
    updated_at: datetime


class CommentCount(BaseModel):
    task_id: PydanticObjectId
    count: int = Field(ge=0)


__all__ = ["CommentCount", "CommentCreate", "CommentRead", "CommentUpdate"]
