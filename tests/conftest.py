from __future__ import annotations

import os
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from typing import Any
from uuid import uuid4

os.environ.setdefault("TASKBOARD_ENVIRONMENT", "test")

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from taskboard.core.security import revoked_tokens
from taskboard.db import close_document_store, init_document_store
from taskboard.main import create_app
from taskboard.models import User
from taskboard.services import UserService

DEFAULT_PASSWORD = "Secret123"

UserFactory = Callable[..., Awaitable[User]]


@dataclass(slots=True)
class ApiUser:
    user: dict[str, Any]
    tokens: dict[str, Any]

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.tokens['access_token']}"}


@pytest.fixture(autouse=True)
def _reset_revoked_tokens() -> None:
    revoked_tokens.clear()


@pytest_asyncio.fixture
async def document_store() -> AsyncIterator[None]:
    client = AsyncMongoMockClient()
    await init_document_store(
        client=client,
        database_name=f"taskboard_test_{uuid4().hex}",
        force=True,
    )
    try:
        yield
    finally:
        await close_document_store()


@pytest_asyncio.fixture
async def make_user(document_store: None) -> UserFactory:
    service = UserService()

    async def _factory(
        *,
        name: str = "Test User",
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
    ) -> User:
        return await service.create_user(
            name=name,
            email=email or f"user-{uuid4().hex[:8]}@example.com",
            password=password,
        )

    return _factory


@pytest_asyncio.fixture
async def owner(make_user: UserFactory) -> User:
    return await make_user(name="Owner", email="owner@example.com")


@pytest_asyncio.fixture
async def stranger(make_user: UserFactory) -> User:
    return await make_user(name="Stranger", email="stranger@example.com")


@pytest.fixture()
def app() -> FastAPI:
    return create_app()


@pytest_asyncio.fixture
async def client(app: FastAPI, document_store: None) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client


@pytest_asyncio.fixture
async def register_user(client: AsyncClient) -> Callable[..., Awaitable[ApiUser]]:
    async def _register(
        *,
        email: str,
        name: str = "Api User",
        password: str = DEFAULT_PASSWORD,
    ) -> ApiUser:
        response = await client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return ApiUser(user=data["user"], tokens=data["tokens"])

    return _register
