"""MongoDB connection lifecycle for the beanie document store."""

from __future__ import annotations

import asyncio
import logging

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from ..core.config import get_settings
from ..models import DOCUMENT_MODELS

logger = logging.getLogger(__name__)

_client: AsyncIOMotorClient | None = None
_database: AsyncIOMotorDatabase | None = None
_initialized = False
_lock = asyncio.Lock()


def set_document_client(client: AsyncIOMotorClient | None) -> None:
    """Inject a custom motor client instance (primarily for tests)."""

    global _client, _database, _initialized
    _client = client
    _database = None
    _initialized = False


async def init_document_store(
    *,
    client: AsyncIOMotorClient | None = None,
    database_name: str | None = None,
    force: bool = False,
) -> None:
    """Initialise beanie for every document model and build their indexes."""

    global _client, _database, _initialized

    async with _lock:
        if client is not None:
            set_document_client(client)

        if _initialized and not force:
            return

        settings = get_settings()
        if _client is None:
            _client = AsyncIOMotorClient(settings.mongo_url, tz_aware=True, uuidRepresentation="standard")
        _database = _client[database_name or settings.mongo_database]

        await init_beanie(
            database=_database,
            document_models=list(DOCUMENT_MODELS),
            allow_index_dropping=True,
        )
        _initialized = True
        logger.info(
            "Document store initialised",
            extra={"database": _database.name, "models": [model.__name__ for model in DOCUMENT_MODELS]},
        )


async def close_document_store() -> None:
    """Dispose the MongoDB client."""

    global _client, _database, _initialized
    client = _client
    if client is not None:
        client.close()
    _client = None
    _database = None
    _initialized = False


def get_database() -> AsyncIOMotorDatabase:
    """Return the active database, failing loudly before initialisation."""

    if _database is None:
        raise RuntimeError("Document store has not been initialised.")
    return _database


__all__ = [
    "close_document_store",
    "get_database",
    "init_document_store",
    "set_document_client",
]
