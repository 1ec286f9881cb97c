from __future__ import annotations

import pytest
from beanie import PydanticObjectId

from taskboard.errors import NotFoundError, ValidationError
from taskboard.models import User
from taskboard.services import CommentService, TaskService

pytestmark = pytest.mark.asyncio


@pytest.fixture()
def comments() -> CommentService:
    return CommentService()


@pytest.fixture()
def tasks() -> TaskService:
    return TaskService()


async def test_comments_are_listed_newest_first_with_author(
    comments: CommentService,
    tasks: TaskService,
    owner: User,
) -> None:
    task = await tasks.create_task(owner.id, title="Buy milk")
    await comments.create_comment(owner.id, task.task.id, "first")
    await comments.create_comment(owner.id, task.task.id, "  second  ")

    views = await comments.list_comments(owner.id, task.task.id)

    assert [view.comment.content for view in views] == ["second", "first"]
    assert {view.author_name for view in views} == {"Owner"}
    assert {view.author_email for view in views} == {"owner@example.com"}
    assert await comments.count_comments(owner.id, task.task.id) == 2


async def test_comment_requires_an_owned_task(
    comments: CommentService,
    tasks: TaskService,
    owner: User,
    stranger: User,
) -> None:
    task = await tasks.create_task(owner.id, title="Private")

    with pytest.raises(NotFoundError) as excinfo:
        await comments.create_comment(stranger.id, task.task.id, "hello")
    assert excinfo.value.message == "Task not found."

    with pytest.raises(NotFoundError):
        await comments.create_comment(owner.id, PydanticObjectId(), "hello")
    with pytest.raises(NotFoundError):
        await comments.list_comments(stranger.id, task.task.id)
    with pytest.raises(NotFoundError):
        await comments.count_comments(stranger.id, task.task.id)


@pytest.mark.parametrize("content", ["", "   ", "x" * 301])
async def test_comment_content_length_is_enforced(
    comments: CommentService,
    tasks: TaskService,
    owner: User,
    content: str,
) -> None:
    task = await tasks.create_task(owner.id, title="Task")

    with pytest.raises(ValidationError):
        await comments.create_comment(owner.id, task.task.id, content)


async def test_only_the_author_can_update_or_delete(
    comments: CommentService,
    tasks: TaskService,
    owner: User,
    stranger: User,
) -> None:
    task = await tasks.create_task(owner.id, title="Task")
    view = await comments.create_comment(owner.id, task.task.id, "original")
    comment_id = view.comment.id

    with pytest.raises(NotFoundError):
        await comments.update_comment(stranger.id, comment_id, "changed")
    with pytest.raises(NotFoundError):
        await comments.delete_comment(stranger.id, comment_id)
    with pytest.raises(NotFoundError):
        await comments.get_comment(stranger.id, comment_id)

    unchanged = await comments.get_comment(owner.id, comment_id)
    assert unchanged.comment.content == "original"

    updated = await comments.update_comment(owner.id, comment_id, "edited")
    assert updated.comment.content == "edited"

    await comments.delete_comment(owner.id, comment_id)
    with pytest.raises(NotFoundError):
        await comments.get_comment(owner.id, comment_id)
    assert await comments.count_comments(owner.id, task.task.id) == 0
