"""Base repository implementation on top of beanie documents."""

from __future__ import annotations

from typing import Any, Generic, Mapping, TypeVar

from beanie import Document, PydanticObjectId

from ..models.common import TimestampMixin

ModelType = TypeVar("ModelType", bound=Document)

NEWEST_FIRST = ("-created_at", "-_id")


class BaseRepository(Generic[ModelType]):
    """Provide shared persistence helpers for repositories."""

    def __init__(self, model_type: type[ModelType]) -> None:
        self._model_type = model_type

    async def get(self, entity_id: PydanticObjectId) -> ModelType | None:
        """Retrieve a document by its identifier."""
        return await self._model_type.get(entity_id)

    async def add(self, instance: ModelType) -> ModelType:
        """Insert a new document."""
        await instance.insert()
        return instance

    async def save(self, instance: ModelType) -> ModelType:
        """Persist changes to an existing document, bumping ``updated_at``."""
        if isinstance(instance, TimestampMixin):
            instance.touch()
        await instance.save()
        return instance

    async def delete(self, instance: ModelType) -> None:
        """Delete a single document."""
        await instance.delete()

    async def count(self, criteria: Mapping[str, Any]) -> int:
        """Count documents matching ``criteria`` without loading them."""
        return await self._model_type.find(dict(criteria)).count()

    async def delete_many(self, criteria: Mapping[str, Any]) -> int:
        """Delete all documents matching ``criteria`` and return how many went."""
        result = await self._model_type.find(dict(criteria)).delete()
        if result is None:
            return 0
        return int(result.deleted_count)
