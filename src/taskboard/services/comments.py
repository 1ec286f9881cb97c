"""Service layer for comments attached to a user's own tasks."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from beanie import PydanticObjectId

from ..errors import NotFoundError, ValidationError
from ..models import Comment, User
from ..models.comment import CONTENT_MAX_LENGTH
from ..repositories import CommentRepository, TaskRepository
from .tasks import TASK_NOT_FOUND
from .users import UserService

logger = logging.getLogger(__name__)

COMMENT_NOT_FOUND = "Comment not found."


@dataclass(slots=True)
class CommentView:
    """A comment annotated with its author's name and email."""

    comment: Comment
    author_name: str | None = None
    author_email: str | None = None

    @classmethod
    def build(cls, comment: Comment, author: User | None) -> "CommentView":
        if author is None:
            return cls(comment=comment)
        return cls(comment=comment, author_name=author.name, author_email=author.email)


def clean_content(value: str) -> str:
    content = (value or "").strip()
    if not content:
        raise ValidationError("Comment content is required.", details={"field": "content"})
    if len(content) > CONTENT_MAX_LENGTH:
        raise ValidationError(
            f"Comment cannot exceed {CONTENT_MAX_LENGTH} characters.",
            details={"field": "content"},
        )
    return content


class CommentService:
    """Comment operations scoped to the acting user.

    Comments can only be written on tasks the user owns, and only their
    author may read, change or remove them individually.
    """

    def __init__(self) -> None:
        self._repository = CommentRepository()
        self._tasks = TaskRepository()
        self._users = UserService()

    async def _require_task(self, user_id: PydanticObjectId, task_id: PydanticObjectId) -> None:
        if await self._tasks.get_for_owner(task_id, user_id) is None:
            raise NotFoundError(TASK_NOT_FOUND)

    async def _require_comment(self, user_id: PydanticObjectId, comment_id: PydanticObjectId) -> Comment:
        comment = await self._repository.get_for_author(comment_id, user_id)
        if comment is None:
            raise NotFoundError(COMMENT_NOT_FOUND)
        return comment

    async def _view(self, comment: Comment) -> CommentView:
        return CommentView.build(comment, await self._users.get_user(comment.user_id))

    async def list_comments(self, user_id: PydanticObjectId, task_id: PydanticObjectId) -> list[CommentView]:
        """Return the task's comments newest first with author details."""
        await self._require_task(user_id, task_id)
        comments = await self._repository.list_for_task(task_id)
        author_ids = list({comment.user_id for comment in comments})
        authors = {author.id: author for author in await self._users.list_users_by_ids(author_ids)}
        return [CommentView.build(comment, authors.get(comment.user_id)) for comment in comments]

    async def count_comments(self, user_id: PydanticObjectId, task_id: PydanticObjectId) -> int:
        await self._require_task(user_id, task_id)
        return await self._repository.count_for_task(task_id)

    async def create_comment(
        self,
        user_id: PydanticObjectId,
        task_id: PydanticObjectId,
        content: str,
    ) -> CommentView:
        await self._require_task(user_id, task_id)
        comment = Comment(content=clean_content(content), task_id=task_id, user_id=user_id)
        await self._repository.add(comment)
        logger.info(
            "Comment created",
            extra={"user_id": str(user_id), "task_id": str(task_id), "comment_id": str(comment.id)},
        )
        return await self._view(comment)

    async def get_comment(self, user_id: PydanticObjectId, comment_id: PydanticObjectId) -> CommentView:
        return await self._view(await self._require_comment(user_id, comment_id))

    async def update_comment(
        self,
        user_id: PydanticObjectId,
        comment_id: PydanticObjectId,
        content: str,
    ) -> CommentView:
        cleaned = clean_content(content)
        comment = await self._require_comment(user_id, comment_id)
        comment.content = cleaned
        await self._repository.save(comment)
        return await self._view(comment)

    async def delete_comment(self, user_id: PydanticObjectId, comment_id: PydanticObjectId) -> Comment:
        comment = await self._require_comment(user_id, comment_id)
        await self._repository.delete(comment)
        logger.info(
            "Comment deleted",
            extra={"user_id": str(user_id), "comment_id": str(comment_id)},
        )
        return comment


__all__ = ["COMMENT_NOT_FOUND", "CommentService", "CommentView", "clean_content"]
