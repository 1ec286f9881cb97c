from __future__ import annotations

import pytest

from taskboard import __version__
from taskboard.db import get_database
from taskboard.main import normalise_prefix
from taskboard.models import Comment, Task, User

pytestmark = pytest.mark.asyncio


async def test_indexes_are_declared_on_each_collection(document_store: None) -> None:
    users = await User.get_motor_collection().index_information()
    tasks = await Task.get_motor_collection().index_information()
    comments = await Comment.get_motor_collection().index_information()

    assert users["users_email_unique"]["unique"] is True
    assert {"tasks_user_status", "tasks_parent", "tasks_user_created_at"} <= set(tasks)
    assert {"comments_task_created_at", "comments_user"} <= set(comments)


async def test_database_is_available_after_initialisation(document_store: None) -> None:
    database = get_database()

    assert database.name.startswith("taskboard_test_")
    assert set(await database.list_collection_names()) >= {"users", "tasks", "comments"}


async def test_health_and_metadata_endpoints(client) -> None:
    health = await client.get("/healthz")
    assert health.json() == {"status": "ok"}

    metadata = await client.get("/api/metadata")
    assert metadata.status_code == 200
    assert metadata.json() == {
        "name": "Taskboard",
        "environment": "test",
        "version": __version__,
        "api_prefix": "/api",
    }


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("/api", "/api"), ("api/", "/api"), (" /v1/tasks/ ", "/v1/tasks"), ("/", ""), ("", "")],
)
def test_api_prefix_normalisation(raw: str, expected: str) -> None:
    assert normalise_prefix(raw) == expected
