"""Liveness probe."""

from __future__ import annotations

from fastapi import APIRouter

from ...schemas import HealthStatus

router = APIRouter(tags=["health"])


@router.get("/healthz", response_model=HealthStatus, summary="Service liveness probe")
async def healthcheck() -> HealthStatus:
    return HealthStatus()
