"""Task-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from beanie import PydanticObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models.task import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH, TaskStatus

TASK_READ_EXAMPLE = {
    "id": "665f1c2ab0d1c7a1e4f0a001",
    "title": "Buy milk",
    "description": "",
    "status": TaskStatus.PENDING.value,
    "user_id": "665f1c2ab0d1c7a1e4f0a000",
    "parent_task_id": None,
    "is_subtask": False,
    "subtask_count": 1,
    "pending_subtasks": 1,
    "created_at": "2024-06-04T12:00:00Z",
    "updated_at": "2024-06-04T12:00:00Z",
}


class TaskCreate(BaseModel):
    """Payload for creating a new task or subtask."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "title": "Buy milk",
                "description": "Semi-skimmed, two litres.",
                "parent_task_id": None,
            }
        },
    )

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str = Field(default="", max_length=DESCRIPTION_MAX_LENGTH)
    parent_task_id: PydanticObjectId | None = Field(default=None)

    @field_validator("description", mode="before")
    @classmethod
    def _null_description_is_blank(cls, value: object) -> object:
        return "" if value is None else value


class SubtaskCreate(BaseModel):
    """Payload for creating a subtask under a path-addressed parent."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str = Field(default="", max_length=DESCRIPTION_MAX_LENGTH)

    @field_validator("description", mode="before")
    @classmethod
    def _null_description_is_blank(cls, value: object) -> object:
        return "" if value is None else value


class TaskUpdate(BaseModel):
    """Payload for partially updating an existing task."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={"example": {"title": "Buy oat milk"}},
    )

    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)

    @model_validator(mode="after")
    def _ensure_payload_not_empty(self) -> "TaskUpdate":
        if not self.model_dump(exclude_unset=True, exclude_none=True):
            raise ValueError("At least one field must be provided for update.")
        return self


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskRead(BaseModel):
    """Public representation of a task with its derived counters."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={"example": TASK_READ_EXAMPLE},
    )

    id: PydanticObjectId
    title: str
    description: str = ""
    status: TaskStatus
    user_id: PydanticObjectId
    parent_task_id: PydanticObjectId | None = None
    is_subtask: bool = False
    subtask_count: int | None = Field(default=None, ge=0)
    pending_subtasks: int | None = Field(default=None, ge=0)
    created_at: datetime
    updated_at: datetime


class TaskDetailRead(TaskRead):
    """Task representation that embeds the task's subtasks."""

    subtasks: list[TaskRead] = Field(default_factory=list)


class TaskDeletionRead(BaseModel):
    """Outcome of a cascading task deletion."""

    model_config = ConfigDict(from_attributes=True)

    task_id: PydanticObjectId
    is_subtask: bool
    subtasks_deleted: int = Field(ge=0)
    comments_deleted: int = Field(ge=0)


__all__ = [
    "SubtaskCreate",
    "TaskCreate",
    "TaskDeletionRead",
    "TaskDetailRead",
    "TaskRead",
    "TaskStatusUpdate",
    "TaskUpdate",
]
