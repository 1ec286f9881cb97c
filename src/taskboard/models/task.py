"""Task document and status enumeration."""

from __future__ import annotations

from enum import Enum

from beanie import Document, PydanticObjectId
from pydantic import ConfigDict, Field
from pymongo import ASCENDING, DESCENDING, IndexModel

from .common import TimestampMixin

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


class TaskStatus(str, Enum):
    """Lifecycle states a task can be in."""

    PENDING = "pending"
    COMPLETED = "completed"

    @property
    def opposite(self) -> "TaskStatus":
        if self is TaskStatus.PENDING:
            return TaskStatus.COMPLETED
        return TaskStatus.PENDING


class Task(TimestampMixin, Document):
    """A to-do item, optionally nested one level under a parent task."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str = Field(default="", max_length=DESCRIPTION_MAX_LENGTH)
    status: TaskStatus = TaskStatus.PENDING
    user_id: PydanticObjectId
    parent_task_id: PydanticObjectId | None = None

    @property
    def is_subtask(self) -> bool:
        return self.parent_task_id is not None

    class Settings:
        name = "tasks"
        indexes = [
            IndexModel(
                [("user_id", ASCENDING), ("status", ASCENDING)],
                name="tasks_user_status",
            ),
            IndexModel([("parent_task_id", ASCENDING)], name="tasks_parent"),
            IndexModel(
                [("user_id", ASCENDING), ("created_at", DESCENDING)],
                name="tasks_user_created_at",
            ),
        ]


__all__ = ["DESCRIPTION_MAX_LENGTH", "TITLE_MAX_LENGTH", "Task", "TaskStatus"]
