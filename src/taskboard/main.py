"""Application factory wiring the JSON API and the server-rendered pages together."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from .api.routers import api_router, health_router
from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .core.middleware import CorrelationIdMiddleware
from .db import close_document_store, init_document_store
from .errors import register_exception_handlers
from .schemas.system import ServiceMetadata
from .views import router as views_router

STATIC_DIR = Path(__file__).resolve().parent / "static"


def normalise_prefix(raw: str) -> str:
    """Turn ``api``, ``/api/`` or ``/`` into ``/api``, ``/api`` and ``""``."""

    prefix = "/" + raw.strip().strip("/")
    return "" if prefix == "/" else prefix


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    await init_document_store()
    try:
        yield
    finally:
        await close_document_store()


def _install_middleware(application: FastAPI, settings: Settings) -> None:
    # Starlette runs the last one added first.
    application.add_middleware(CorrelationIdMiddleware)
    application.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret_key,
        session_cookie=settings.session_cookie_name,
        max_age=settings.session_max_age,
        https_only=settings.session_https_only,
        same_site=settings.session_same_site,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )


def _install_routes(application: FastAPI, settings: Settings, api_prefix: str) -> None:
    if STATIC_DIR.exists():
        application.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    application.include_router(views_router)
    application.include_router(api_router, prefix=api_prefix)
    application.include_router(health_router)

    @application.get(
        f"{api_prefix}/metadata",
        response_model=ServiceMetadata,
        summary="Service metadata",
        tags=["health"],
    )
    async def read_metadata() -> ServiceMetadata:
        return ServiceMetadata(
            name=settings.project_name,
            environment=settings.environment,
            version=settings.version,
            api_prefix=api_prefix,
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the ASGI application; ``settings`` defaults to the cached environment settings."""

    settings = settings or get_settings()
    configure_logging(settings)
    api_prefix = normalise_prefix(settings.api_prefix)

    application = FastAPI(
        title=settings.project_name,
        version=settings.version,
        summary="Personal task lists with subtasks and comments, as a JSON API and server-rendered pages.",
        openapi_url=f"{api_prefix}/openapi.json",
        lifespan=lifespan,
    )
    application.state.settings = settings

    _install_middleware(application, settings)
    _install_routes(application, settings, api_prefix)
    register_exception_handlers(application)
    return application


app = create_app()


def run() -> None:
    """Console-script entry point (``taskboard``)."""

    settings = get_settings()
    uvicorn.run(
        "taskboard.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.reload,
        log_config=None,
    )
