"""Comment document attached to a single task."""

from __future__ import annotations

from beanie import Document, PydanticObjectId
from pydantic import ConfigDict, Field
from pymongo import ASCENDING, DESCENDING, IndexModel

from .common import TimestampMixin

CONTENT_MAX_LENGTH = 300


class Comment(TimestampMixin, Document):
    """Note written by a task's owner on that task."""

    model_config = ConfigDict(str_strip_whitespace=True)

    content: str = Field(min_length=1, max_length=CONTENT_MAX_LENGTH)
    task_id: PydanticObjectId
    user_id: PydanticObjectId

    class Settings:
        name = "comments"
        indexes = [
            IndexModel(
                [("task_id", ASCENDING), ("created_at", DESCENDING)],
                name="comments_task_created_at",
            ),
            IndexModel([("user_id", ASCENDING)], name="comments_user"),
        ]


__all__ = ["CONTENT_MAX_LENGTH", "Comment"]
