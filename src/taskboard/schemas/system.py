"""Service-level payloads: metadata, liveness and the error envelope."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class ServiceMetadata(BaseModel):
    name: str
    environment: str
    version: str
    api_prefix: str = Field(description="Path prefix every JSON endpoint lives under")


class HealthStatus(BaseModel):
    status: Literal["ok"] = "ok"


class ErrorResponse(BaseModel):
    """Body of every failed API call.

    ``details`` always carries the ``request_id`` of the failing request, plus
    whatever structured context the error supplied (field errors, pending
    subtask counts and so on).
    """

    success: Literal[False] = False
    code: str = Field(description="Stable machine-readable identifier, e.g. ``pending_subtasks``")
    message: str
    details: dict[str, Any] | None = None
