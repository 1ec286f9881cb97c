from __future__ import annotations

import re

import pytest
from httpx import AsyncClient

from taskboard.models import Comment, Task, TaskStatus, User

pytestmark = pytest.mark.asyncio

_CSRF_PATTERN = re.compile(r'name="csrf_token" value="([^"]+)"')


async def _csrf_token(client: AsyncClient, path: str) -> str:
    response = await client.get(path)
    match = _CSRF_PATTERN.search(response.text)
    assert match is not None, f"No CSRF token rendered on {path}"
    return match.group(1)


async def _sign_up(client: AsyncClient, *, email: str = "web@example.com") -> str:
    token = await _csrf_token(client, "/auth/register")
    response = await client.post(
        "/auth/register",
        data={"csrf_token": token, "name": "Web User", "email": email, "password": "Secret123"},
    )
    assert response.status_code == 303
    assert response.headers["location"].endswith("/tasks")
    return token


async def test_home_page_and_login_redirect(client: AsyncClient) -> None:
    home = await client.get("/")
    assert home.status_code == 200
    assert "Keep track of what matters" in home.text

    protected = await client.get("/tasks")
    assert protected.status_code == 303
    assert protected.headers["location"].endswith("/auth/login")


async def test_register_form_reports_field_errors(client: AsyncClient) -> None:
    token = await _csrf_token(client, "/auth/register")

    response = await client.post(
        "/auth/register",
        data={"csrf_token": token, "name": "Web User", "email": "weak@example.com", "password": "lowercase1"},
    )

    assert response.status_code == 400
    assert "Password must contain at least one lowercase letter" in response.text


async def test_forms_reject_missing_csrf_token(client: AsyncClient) -> None:
    response = await client.post(
        "/auth/login",
        data={"email": "someone@example.com", "password": "Secret123"},
    )

    assert response.status_code == 400
    assert "The form has expired" in response.text


async def test_login_logout_round_trip(client: AsyncClient) -> None:
    token = await _sign_up(client, email="roundtrip@example.com")
    await client.post("/auth/logout", data={"csrf_token": token})
    assert (await client.get("/tasks")).status_code == 303

    token = await _csrf_token(client, "/auth/login")
    failed = await client.post(
        "/auth/login",
        data={"csrf_token": token, "email": "roundtrip@example.com", "password": "Wrong1234"},
    )
    assert failed.status_code == 400
    assert "Invalid email or password." in failed.text

    signed_in = await client.post(
        "/auth/login",
        data={"csrf_token": token, "email": "roundtrip@example.com", "password": "Secret123"},
    )
    assert signed_in.status_code == 303
    page = await client.get("/tasks")
    assert page.status_code == 200
    assert "Welcome back, Web User!" in page.text


async def test_task_pages_cover_the_full_workflow(client: AsyncClient) -> None:
    token = await _sign_up(client)

    created = await client.post("/tasks", data={"csrf_token": token, "title": "Buy milk", "description": ""})
    assert created.status_code == 303
    listing = await client.get("/tasks")
    assert "Buy milk" in listing.text
    assert "Task created successfully." in listing.text

    parent = await Task.find_one(Task.title == "Buy milk")
    assert parent is not None

    subtask = await client.post(
        f"/tasks/{parent.id}/subtasks",
        data={"csrf_token": token, "title": "Pick 2%", "description": ""},
    )
    assert subtask.status_code == 303
    child = await Task.find_one(Task.title == "Pick 2%")
    assert child is not None and child.parent_task_id == parent.id

    blocked = await client.post(
        f"/tasks/{parent.id}/toggle",
        data={"csrf_token": token},
        headers={"HX-Request": "true"},
    )
    assert blocked.status_code == 200
    assert "Cannot complete task with pending subtasks" in blocked.text
    assert (await Task.get(parent.id)).status is TaskStatus.PENDING

    toggled = await client.post(
        f"/tasks/{child.id}/toggle",
        data={"csrf_token": token},
        headers={"HX-Request": "true"},
    )
    assert toggled.status_code == 200
    assert f'id="task-{child.id}"' in toggled.text
    assert (await Task.get(child.id)).status is TaskStatus.COMPLETED

    commented = await client.post(
        f"/tasks/{parent.id}/comments",
        data={"csrf_token": token, "content": "Corner shop first"},
    )
    assert commented.status_code == 303
    detail = await client.get(f"/tasks/{parent.id}")
    assert detail.status_code == 200
    assert "Corner shop first" in detail.text
    assert "Pick 2%" in detail.text

    comment = await Comment.find_one(Comment.task_id == parent.id)
    assert comment is not None
    await client.post(
        f"/tasks/{parent.id}/comments/{comment.id}/edit",
        data={"csrf_token": token, "content": "Supermarket instead"},
    )
    assert (await Comment.get(comment.id)).content == "Supermarket instead"

    edited = await client.post(
        f"/tasks/{parent.id}/edit",
        data={"csrf_token": token, "title": "Buy oat milk", "description": "Two cartons"},
    )
    assert edited.status_code == 303
    assert (await Task.get(parent.id)).title == "Buy oat milk"

    deleted = await client.post(f"/tasks/{parent.id}/delete", data={"csrf_token": token})
    assert deleted.status_code == 303
    assert await Task.find_all().count() == 0
    assert await Comment.find_all().count() == 0


async def test_task_list_filters(client: AsyncClient) -> None:
    token = await _sign_up(client, email="filters@example.com")
    await client.post("/tasks", data={"csrf_token": token, "title": "Open item"})
    await client.post("/tasks", data={"csrf_token": token, "title": "Closed item"})
    closed = await Task.find_one(Task.title == "Closed item")
    await client.post(f"/tasks/{closed.id}/toggle", data={"csrf_token": token})

    completed_only = await client.get("/tasks", params={"status": "completed"})

    assert "Closed item" in completed_only.text
    assert "Open item" not in completed_only.text


async def test_create_task_form_shows_validation_error(client: AsyncClient) -> None:
    token = await _sign_up(client, email="validation@example.com")

    response = await client.post("/tasks", data={"csrf_token": token, "title": "x" * 101})

    assert response.status_code == 400
    assert "Task title cannot exceed 100 characters." in response.text


async def test_profile_page_shows_account_details(client: AsyncClient) -> None:
    anonymous = await client.get("/profile")
    assert anonymous.status_code == 303
    assert anonymous.headers["location"].endswith("/auth/login")

    await _sign_up(client, email="profile@example.com")
    user = await User.find_one(User.email == "profile@example.com")
    assert user is not None

    listing = await client.get("/tasks")
    assert "/profile" in listing.text

    response = await client.get("/profile")

    assert response.status_code == 200
    assert "Web User" in response.text
    assert "profile@example.com" in response.text
    assert str(user.id) in response.text
    assert "Member since" in response.text
    assert user.created_at.strftime("%B %d, %Y") in response.text
    assert "hashed_password" not in response.text


async def test_htmx_toggle_with_expired_form(client: AsyncClient) -> None:
    token = await _sign_up(client, email="expired@example.com")
    await client.post("/tasks", data={"csrf_token": token, "title": "Stale tab"})
    task = await Task.find_one(Task.title == "Stale tab")
    assert task is not None

    kept = await client.post(
        f"/tasks/{task.id}/toggle",
        data={"csrf_token": "bogus"},
        headers={"HX-Request": "true"},
    )
    assert kept.status_code == 200
    assert f'id="task-{task.id}"' in kept.text
    assert "The form has expired" in kept.text
    assert (await Task.get(task.id)).status is TaskStatus.PENDING

    missing = await client.post(
        "/tasks/665f1c2ab0d1c7a1e4f0a001/toggle",
        data={"csrf_token": "bogus"},
        headers={"HX-Request": "true"},
    )
    assert missing.status_code == 200
    assert missing.headers["HX-Redirect"].endswith("/tasks")
    assert "application/json" not in missing.headers.get("content-type", "")
    assert "Task not found." in (await client.get("/tasks")).text


async def test_htmx_toggle_of_missing_task_redirects(client: AsyncClient) -> None:
    token = await _sign_up(client, email="gone@example.com")

    response = await client.post(
        "/tasks/665f1c2ab0d1c7a1e4f0a001/toggle",
        data={"csrf_token": token},
        headers={"HX-Request": "true"},
    )

    assert response.status_code == 200
    assert response.headers["HX-Redirect"].endswith("/tasks")
