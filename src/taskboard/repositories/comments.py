"""Repository for comment documents."""

from __future__ import annotations

from typing import Sequence

from beanie import PydanticObjectId

from ..models import Comment
from .base import NEWEST_FIRST, BaseRepository


class CommentRepository(BaseRepository[Comment]):
    """Queries over the ``comments`` collection."""

    def __init__(self) -> None:
        super().__init__(Comment)

    async def get_for_author(self, comment_id: PydanticObjectId, user_id: PydanticObjectId) -> Comment | None:
        """Return the comment only when ``user_id`` wrote it."""
        return await Comment.find_one(Comment.id == comment_id, Comment.user_id == user_id)

    async def list_for_task(self, task_id: PydanticObjectId) -> list[Comment]:
        return await Comment.find(Comment.task_id == task_id).sort(*NEWEST_FIRST).to_list()

    async def count_for_task(self, task_id: PydanticObjectId) -> int:
        return await self.count({"task_id": task_id})

    async def delete_for_tasks(self, task_ids: Sequence[PydanticObjectId]) -> int:
        """Remove every comment attached to any of ``task_ids``."""
        if not task_ids:
            return 0
        return await self.delete_many({"task_id": {"$in": list(task_ids)}})
