"""Success envelope shared by every JSON endpoint."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """Wraps a payload as ``{success, message?, data, count?}``."""

    success: bool = Field(default=True)
    message: str | None = Field(default=None)
    data: DataT
    count: int | None = Field(default=None, ge=0)


class MessageResponse(BaseModel):
    """Envelope for operations that only report an outcome."""

    success: bool = Field(default=True)
    message: str


__all__ = ["ApiResponse", "DataT", "MessageResponse"]
