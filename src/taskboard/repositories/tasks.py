"""Repository for task documents and their parent/child links."""

from __future__ import annotations

from typing import Any, Sequence

from beanie import PydanticObjectId

from ..models import Task, TaskStatus
from .base import NEWEST_FIRST, BaseRepository


class TaskRepository(BaseRepository[Task]):
    """Owner-scoped queries over the ``tasks`` collection."""

    def __init__(self) -> None:
        super().__init__(Task)

    async def get_for_owner(self, task_id: PydanticObjectId, user_id: PydanticObjectId) -> Task | None:
        """Return the task only when ``user_id`` owns it."""
        return await Task.find_one(Task.id == task_id, Task.user_id == user_id)

    async def list_for_owner(
        self,
        user_id: PydanticObjectId,
        *,
        status: TaskStatus | None = None,
        include_subtasks: bool = False,
    ) -> list[Task]:
        criteria: dict[str, Any] = {"user_id": user_id}
        if status is not None:
            criteria["status"] = status.value
        if not include_subtasks:
            criteria["parent_task_id"] = None
        return await Task.find(criteria).sort(*NEWEST_FIRST).to_list()

    async def list_subtasks(self, parent_id: PydanticObjectId) -> list[Task]:
        return await Task.find(Task.parent_task_id == parent_id).sort(*NEWEST_FIRST).to_list()

    async def subtask_ids(self, parent_id: PydanticObjectId) -> list[PydanticObjectId]:
        subtasks = await Task.find(Task.parent_task_id == parent_id).to_list()
        return [subtask.id for subtask in subtasks if subtask.id is not None]

    async def count_subtasks(self, parent_id: PydanticObjectId) -> int:
        return await self.count({"parent_task_id": parent_id})

    async def count_pending_subtasks(self, parent_id: PydanticObjectId) -> int:
        return await self.count({"parent_task_id": parent_id, "status": TaskStatus.PENDING.value})

    async def delete_by_ids(self, task_ids: Sequence[PydanticObjectId]) -> int:
        if not task_ids:
            return 0
        return await self.delete_many({"_id": {"$in": list(task_ids)}})
