"""Service layer enforcing the task hierarchy and completion rules."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from beanie import PydanticObjectId

from ..errors import InvariantViolationError, NotFoundError, ValidationError
from ..models import Task, TaskStatus
from ..models.task import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH
from ..repositories import CommentRepository, TaskRepository

logger = logging.getLogger(__name__)

TASK_NOT_FOUND = "Task not found."
PARENT_NOT_FOUND = "Parent task not found."
INVALID_NESTING = "Cannot create subtask of a subtask. Only main tasks can have subtasks."
PENDING_SUBTASKS = "Cannot complete task with pending subtasks. Complete all subtasks first."


@dataclass(slots=True)
class TaskSummary:
    """A task together with the counters derived from its subtasks.

    Counters are only computed for top-level tasks; for subtasks they stay
    ``None``.
    """

    task: Task
    subtask_count: int | None = None
    pending_subtasks: int | None = None

    @property
    def is_subtask(self) -> bool:
        return self.task.is_subtask


@dataclass(slots=True)
class TaskDetail:
    summary: TaskSummary
    subtasks: list[TaskSummary] = field(default_factory=list)


@dataclass(slots=True)
class TaskDeletion:
    """What a cascading delete removed."""

    task_id: PydanticObjectId
    is_subtask: bool
    subtasks_deleted: int
    comments_deleted: int


def clean_title(value: str) -> str:
    title = (value or "").strip()
    if not title:
        raise ValidationError("Task title is required.", details={"field": "title"})
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(
            f"Task title cannot exceed {TITLE_MAX_LENGTH} characters.",
            details={"field": "title"},
        )
    return title


def clean_description(value: str | None) -> str:
    description = (value or "").strip()
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(
            f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters.",
            details={"field": "description"},
        )
    return description


class TaskService:
    """High-level business orchestration for ``Task`` documents.

    Every operation takes the acting user's id first and treats tasks owned
    by anyone else exactly like tasks that do not exist.
    """

    def __init__(self) -> None:
        self._repository = TaskRepository()
        self._comments = CommentRepository()

    async def _summarise(self, task: Task) -> TaskSummary:
        if task.is_subtask or task.id is None:
            return TaskSummary(task=task)
        return TaskSummary(
            task=task,
            subtask_count=await self._repository.count_subtasks(task.id),
            pending_subtasks=await self._repository.count_pending_subtasks(task.id),
        )

    async def list_tasks(
        self,
        user_id: PydanticObjectId,
        *,
        status: TaskStatus | None = None,
        include_subtasks: bool = False,
    ) -> list[TaskSummary]:
        """Return the user's tasks newest first, top-level only unless asked."""
        tasks = await self._repository.list_for_owner(
            user_id,
            status=status,
            include_subtasks=include_subtasks,
        )
        return [await self._summarise(task) for task in tasks]

    async def get_task(self, user_id: PydanticObjectId, task_id: PydanticObjectId) -> Task:
        task = await self._repository.get_for_owner(task_id, user_id)
        if task is None:
            raise NotFoundError(TASK_NOT_FOUND)
        return task

    async def get_task_summary(self, user_id: PydanticObjectId, task_id: PydanticObjectId) -> TaskSummary:
        return await self._summarise(await self.get_task(user_id, task_id))

    async def get_task_detail(self, user_id: PydanticObjectId, task_id: PydanticObjectId) -> TaskDetail:
        task = await self.get_task(user_id, task_id)
        summary = await self._summarise(task)
        if task.is_subtask or task.id is None:
            return TaskDetail(summary=summary)
        subtasks = await self._repository.list_subtasks(task.id)
        return TaskDetail(summary=summary, subtasks=[TaskSummary(task=subtask) for subtask in subtasks])

    async def list_subtasks(self, user_id: PydanticObjectId, task_id: PydanticObjectId) -> list[TaskSummary]:
        task = await self.get_task(user_id, task_id)
        if task.id is None or task.is_subtask:
            return []
        subtasks = await self._repository.list_subtasks(task.id)
        return [TaskSummary(task=subtask) for subtask in subtasks]

    async def create_task(
        self,
        user_id: PydanticObjectId,
        *,
        title: str,
        description: str | None = "",
        parent_task_id: PydanticObjectId | None = None,
    ) -> TaskSummary:
        """Create a task, or a subtask when ``parent_task_id`` is given."""
        cleaned_title = clean_title(title)
        cleaned_description = clean_description(description)

        if parent_task_id is not None:
            parent = await self._repository.get_for_owner(parent_task_id, user_id)
            if parent is None:
                raise NotFoundError(PARENT_NOT_FOUND, code="parent_not_found")
            if parent.is_subtask:
                logger.info(
                    "Rejected nested subtask",
                    extra={"user_id": str(user_id), "parent_task_id": str(parent_task_id)},
                )
                raise InvariantViolationError(INVALID_NESTING, code="invalid_nesting")

        task = Task(
            title=cleaned_title,
            description=cleaned_description,
            status=TaskStatus.PENDING,
            user_id=user_id,
            parent_task_id=parent_task_id,
        )
        await self._repository.add(task)
        logger.info(
            "Task created",
            extra={
                "user_id": str(user_id),
                "task_id": str(task.id),
                "parent_task_id": str(parent_task_id) if parent_task_id else None,
            },
        )
        return await self._summarise(task)

    async def update_task(
        self,
        user_id: PydanticObjectId,
        task_id: PydanticObjectId,
        *,
        title: str | None = None,
        description: str | None = None,
    ) -> TaskSummary:
        """Apply a partial title/description update."""
        if title is None and description is None:
            raise ValidationError("At least one field must be provided for update.")
        task = await self.get_task(user_id, task_id)
        if title is not None:
            task.title = clean_title(title)
        if description is not None:
            task.description = clean_description(description)
        await self._repository.save(task)
        return await self._summarise(task)

    async def set_status(
        self,
        user_id: PydanticObjectId,
        task_id: PydanticObjectId,
        status: TaskStatus,
    ) -> TaskSummary:
        """Move a task to ``status``.

        A top-level task cannot be completed while any of its subtasks is
        still pending. The pending count is read fresh on every attempt.
        """
        task = await self.get_task(user_id, task_id)
        if status is TaskStatus.COMPLETED and not task.is_subtask and task.id is not None:
            pending = await self._repository.count_pending_subtasks(task.id)
            if pending > 0:
                logger.info(
                    "Rejected completion with pending subtasks",
                    extra={"user_id": str(user_id), "task_id": str(task_id), "pending_subtasks": pending},
                )
                raise InvariantViolationError(
                    PENDING_SUBTASKS,
                    code="pending_subtasks",
                    details={"pending_subtasks": pending},
                )
        task.status = status
        await self._repository.save(task)
        return await self._summarise(task)

    async def toggle_status(self, user_id: PydanticObjectId, task_id: PydanticObjectId) -> TaskSummary:
        task = await self.get_task(user_id, task_id)
        return await self.set_status(user_id, task_id, task.status.opposite)

    async def delete_task(self, user_id: PydanticObjectId, task_id: PydanticObjectId) -> TaskDeletion:
        """Delete a task together with its subtasks and every related comment.

        Runs as separate steps (subtask comments, subtasks, task comments,
        task), so a failed run can simply be repeated.
        """
        task = await self.get_task(user_id, task_id)
        subtask_ids: list[PydanticObjectId] = []
        if not task.is_subtask:
            subtask_ids = await self._repository.subtask_ids(task_id)

        comments_deleted = await self._comments.delete_for_tasks(subtask_ids)
        subtasks_deleted = await self._repository.delete_by_ids(subtask_ids)
        comments_deleted += await self._comments.delete_for_tasks([task_id])
        await self._repository.delete(task)

        logger.info(
            "Task deleted",
            extra={
                "user_id": str(user_id),
                "task_id": str(task_id),
                "subtasks_deleted": subtasks_deleted,
                "comments_deleted": comments_deleted,
            },
        )
        return TaskDeletion(
            task_id=task_id,
            is_subtask=task.is_subtask,
            subtasks_deleted=subtasks_deleted,
            comments_deleted=comments_deleted,
        )


__all__ = [
    "INVALID_NESTING",
    "PARENT_NOT_FOUND",
    "PENDING_SUBTASKS",
    "TASK_NOT_FOUND",
    "TaskDeletion",
    "TaskDetail",
    "TaskService",
    "TaskSummary",
    "clean_description",
    "clean_title",
]
