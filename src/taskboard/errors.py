"""Domain errors and the handlers that turn them into the API error envelope."""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager, nullcontext
from http import HTTPStatus
from typing import Any, Mapping

from fastapi import FastAPI, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import RedirectResponse

from .core.context import REQUEST_ID_HEADER, request_scope
from .schemas.system import ErrorResponse

logger = logging.getLogger(__name__)


class ApplicationError(Exception):
    """Base class for failures reported to clients through the error envelope.

    Subclasses pick the HTTP status and a default ``code``; callers may still
    override both, and attach ``details`` that end up verbatim in the body.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_code: str = "application_error"
    default_message: str = "The request could not be completed."

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        self.code = code or self.default_code
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class NotFoundError(ApplicationError):
    """Missing resources, including resources owned by someone else."""

    status_code = status.HTTP_404_NOT_FOUND
    default_code = "not_found"
    default_message = "Resource not found."


class ValidationError(ApplicationError):
    """Malformed input rejected by the domain layer."""

    default_code = "validation_error"
    default_message = "Validation failed."


class InvariantViolationError(ApplicationError):
    """Well-formed request that breaks a task hierarchy rule."""

    default_code = "invariant_violation"
    default_message = "The request breaks a task rule."


class AuthenticationError(ApplicationError):
    """Missing, invalid, expired or revoked credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "unauthorized"
    default_message = "Could not validate credentials."


class LoginRequired(Exception):
    """Raised by page dependencies when no user is signed in."""


_HTTP_ERROR_CODES: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_409_CONFLICT: "conflict",
}

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}
_LOCATION_PREFIXES = ("body", "query", "path", "header", "cookie")


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _request_context(request: Request) -> AbstractContextManager[object]:
    request_id = _request_id(request)
    return request_scope(request_id) if request_id else nullcontext()


def _details_for(request: Request, details: Any) -> dict[str, Any] | None:
    if details is None:
        merged: dict[str, Any] = {}
    elif isinstance(details, dict):
        merged = dict(details)
    elif isinstance(details, list):
        merged = {"errors": details}
    else:
        merged = {"detail": details}
    request_id = _request_id(request)
    if request_id:
        merged.setdefault("request_id", request_id)
    return merged or None


def _envelope(
    request: Request,
    *,
    status_code: int,
    code: str,
    message: str,
    details: Any = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(code=code, message=message, details=_details_for(request, details))
    response = JSONResponse(jsonable_encoder(body), status_code=status_code, headers=dict(headers or {}))
    request_id = _request_id(request)
    if request_id:
        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
    return response


def _log_failure(request: Request, status_code: int, message: str, **fields: Any) -> None:
    level = logging.ERROR if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logging.WARNING
    logger.log(level, message, extra={"status_code": status_code, "path": request.url.path, **fields})


def _field_errors(errors: list[Any]) -> list[dict[str, Any]]:
    cleaned: list[dict[str, Any]] = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part not in _LOCATION_PREFIXES]
        cleaned.append(
            {
                "field": ".".join(location) or None,
                "message": str(error.get("msg", "Invalid value.")),
                "type": error.get("type"),
            }
        )
    return cleaned


def register_exception_handlers(app: FastAPI) -> None:
    """Install every handler that maps failures onto the error envelope."""

    @app.exception_handler(ApplicationError)
    async def _handle_application_error(request: Request, exc: ApplicationError) -> JSONResponse:
        with _request_context(request):
            _log_failure(request, exc.status_code, "Request rejected", code=exc.code)
            return _envelope(
                request,
                status_code=exc.status_code,
                code=exc.code,
                message=exc.message,
                details=exc.details,
                headers=_BEARER_CHALLENGE if exc.status_code == status.HTTP_401_UNAUTHORIZED else None,
            )

    @app.exception_handler(LoginRequired)
    async def _handle_login_required(request: Request, exc: LoginRequired) -> RedirectResponse:
        return RedirectResponse(request.url_for("auth:login"), status_code=status.HTTP_303_SEE_OTHER)

    @app.exception_handler(RequestValidationError)
    async def _handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        with _request_context(request):
            errors = _field_errors(list(exc.errors()))
            _log_failure(request, status.HTTP_400_BAD_REQUEST, "Request validation failed", errors=errors)
            return _envelope(
                request,
                status_code=status.HTTP_400_BAD_REQUEST,
                code="validation_error",
                message="Request validation failed.",
                details={"errors": errors},
            )

    @app.exception_handler(DuplicateKeyError)
    async def _handle_duplicate_key(request: Request, exc: DuplicateKeyError) -> JSONResponse:
        with _request_context(request):
            logger.error("Unique index rejected a write", exc_info=exc)
            return _envelope(
                request,
                status_code=status.HTTP_409_CONFLICT,
                code="db_integrity_error",
                message="Database integrity violation.",
            )

    @app.exception_handler(StarletteHTTPException)
    async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        with _request_context(request):
            code = _HTTP_ERROR_CODES.get(exc.status_code, "http_error")
            if isinstance(exc.detail, str):
                message, details = exc.detail, None
            else:
                try:
                    message = HTTPStatus(exc.status_code).phrase
                except ValueError:
                    message = "Error"
                details = exc.detail
            _log_failure(request, exc.status_code, "HTTP error", code=code)
            return _envelope(
                request,
                status_code=exc.status_code,
                code=code,
                message=message,
                details=details,
                headers=exc.headers,
            )

    @app.exception_handler(Exception)
    async def _handle_unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
        with _request_context(request):
            logger.exception("Unhandled application error")
            return _envelope(
                request,
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                code="server_error",
                message="Internal server error.",
            )


__all__ = [
    "ApplicationError",
    "AuthenticationError",
    "InvariantViolationError",
    "LoginRequired",
    "NotFoundError",
    "ValidationError",
    "register_exception_handlers",
]
