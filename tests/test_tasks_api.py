from __future__ import annotations

import pytest
from beanie import PydanticObjectId
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_task_lifecycle_through_the_api(client: AsyncClient, register_user) -> None:
    account = await register_user(email="tasks@example.com")
    headers = account.headers

    created = await client.post("/api/tasks", json={"title": "Buy milk"}, headers=headers)
    assert created.status_code == 201
    body = created.json()
    assert body["success"] is True
    assert body["message"] == "Task created successfully"
    parent = body["data"]
    assert parent["status"] == "pending"
    assert parent["parent_task_id"] is None
    assert parent["is_subtask"] is False
    assert parent["description"] == ""
    assert parent["user_id"] == account.user["id"]

    subtask_response = await client.post(
        f"/api/tasks/{parent['id']}/subtasks",
        json={"title": "Pick 2%"},
        headers=headers,
    )
    assert subtask_response.status_code == 201
    assert subtask_response.json()["message"] == "Subtask created successfully"
    subtask = subtask_response.json()["data"]
    assert subtask["parent_task_id"] == parent["id"]
    assert subtask["is_subtask"] is True

    listing = await client.get("/api/tasks", headers=headers)
    assert listing.status_code == 200
    listing_json = listing.json()
    assert listing_json["count"] == 1
    assert listing_json["data"][0]["subtask_count"] == 1
    assert listing_json["data"][0]["pending_subtasks"] == 1

    with_subtasks = await client.get("/api/tasks", params={"include_subtasks": "true"}, headers=headers)
    assert with_subtasks.json()["count"] == 2

    blocked = await client.put(
        f"/api/tasks/{parent['id']}/status",
        json={"status": "completed"},
        headers=headers,
    )
    assert blocked.status_code == 400
    assert blocked.json()["code"] == "pending_subtasks"
    assert blocked.json()["success"] is False

    done = await client.put(
        f"/api/tasks/{subtask['id']}/status",
        json={"status": "completed"},
        headers=headers,
    )
    assert done.status_code == 200
    assert done.json()["message"] == "Task marked as completed"

    completed = await client.put(
        f"/api/tasks/{parent['id']}/status",
        json={"status": "completed"},
        headers=headers,
    )
    assert completed.status_code == 200
    assert completed.json()["data"]["pending_subtasks"] == 0

    detail = await client.get(f"/api/tasks/{parent['id']}", headers=headers)
    assert detail.status_code == 200
    assert [item["id"] for item in detail.json()["data"]["subtasks"]] == [subtask["id"]]

    filtered = await client.get("/api/tasks", params={"status": "pending"}, headers=headers)
    assert filtered.json()["count"] == 0

    updated = await client.patch(
        f"/api/tasks/{parent['id']}",
        json={"description": "Two litres"},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["description"] == "Two litres"
    assert updated.json()["data"]["title"] == "Buy milk"

    deleted = await client.delete(f"/api/tasks/{parent['id']}", headers=headers)
    assert deleted.status_code == 200
    assert deleted.json()["message"] == "Task and all subtasks deleted successfully"
    assert deleted.json()["data"]["subtasks_deleted"] == 1

    for task_id in (parent["id"], subtask["id"]):
        missing = await client.get(f"/api/tasks/{task_id}", headers=headers)
        assert missing.status_code == 404
        assert missing.json()["message"] == "Task not found."


async def test_nested_subtasks_are_rejected(client: AsyncClient, register_user) -> None:
    account = await register_user(email="nesting@example.com")
    parent = (await client.post("/api/tasks", json={"title": "Parent"}, headers=account.headers)).json()["data"]
    child = (
        await client.post(
            "/api/tasks",
            json={"title": "Child", "parent_task_id": parent["id"]},
            headers=account.headers,
        )
    ).json()["data"]

    response = await client.post(
        f"/api/tasks/{child['id']}/subtasks",
        json={"title": "Grandchild"},
        headers=account.headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_nesting"

    missing_parent = await client.post(
        "/api/tasks",
        json={"title": "Orphan", "parent_task_id": str(PydanticObjectId())},
        headers=account.headers,
    )
    assert missing_parent.status_code == 404
    assert missing_parent.json()["code"] == "parent_not_found"


async def test_tasks_are_private_to_their_owner(client: AsyncClient, register_user) -> None:
    owner = await register_user(email="owner-api@example.com")
    other = await register_user(email="other-api@example.com")
    task = (await client.post("/api/tasks", json={"title": "Mine"}, headers=owner.headers)).json()["data"]

    for method, path, payload in (
        ("GET", f"/api/tasks/{task['id']}", None),
        ("PATCH", f"/api/tasks/{task['id']}", {"title": "Yours"}),
        ("PUT", f"/api/tasks/{task['id']}/status", {"status": "completed"}),
        ("DELETE", f"/api/tasks/{task['id']}", None),
        ("GET", f"/api/tasks/{task['id']}/subtasks", None),
    ):
        response = await client.request(method, path, json=payload, headers=other.headers)
        assert response.status_code == 404, (method, path)

    listing = await client.get("/api/tasks", headers=other.headers)
    assert listing.json()["data"] == []


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"title": ""},
        {"title": "x" * 101},
        {"title": "ok", "description": "y" * 501},
    ],
)
async def test_invalid_task_payloads_return_400(client: AsyncClient, register_user, payload: dict) -> None:
    account = await register_user(email="invalid@example.com")

    response = await client.post("/api/tasks", json=payload, headers=account.headers)

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "validation_error"
    assert body["details"]["errors"]


async def test_invalid_status_and_empty_update_are_rejected(client: AsyncClient, register_user) -> None:
    account = await register_user(email="status@example.com")
    task = (await client.post("/api/tasks", json={"title": "Task"}, headers=account.headers)).json()["data"]

    bad_status = await client.put(
        f"/api/tasks/{task['id']}/status",
        json={"status": "archived"},
        headers=account.headers,
    )
    assert bad_status.status_code == 400

    empty_update = await client.patch(f"/api/tasks/{task['id']}", json={}, headers=account.headers)
    assert empty_update.status_code == 400


async def test_tasks_require_authentication(client: AsyncClient) -> None:
    response = await client.get("/api/tasks")

    assert response.status_code == 401
    assert response.json()["message"] == "Access denied. No token provided."
    assert response.headers["WWW-Authenticate"] == "Bearer"


async def test_put_updates_a_task_like_patch(client: AsyncClient, register_user) -> None:
    account = await register_user(email="put@example.com")
    task = (await client.post("/api/tasks", json={"title": "A"}, headers=account.headers)).json()["data"]

    response = await client.put(f"/api/tasks/{task['id']}", json={"title": "B"}, headers=account.headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Task updated successfully"
    assert response.json()["data"]["title"] == "B"
    assert response.json()["data"]["description"] == ""


async def test_null_description_is_stored_as_empty(client: AsyncClient, register_user) -> None:
    account = await register_user(email="nulldesc@example.com")

    created = await client.post(
        "/api/tasks",
        json={"title": "C", "description": None},
        headers=account.headers,
    )
    assert created.status_code == 201
    assert created.json()["data"]["description"] == ""

    subtask = await client.post(
        f"/api/tasks/{created.json()['data']['id']}/subtasks",
        json={"title": "C.1", "description": None},
        headers=account.headers,
    )
    assert subtask.status_code == 201
    assert subtask.json()["data"]["description"] == ""
