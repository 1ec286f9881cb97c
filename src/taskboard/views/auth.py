from __future__ import annotations

from typing import Any, TypeVar

from fastapi import APIRouter, Request, status
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import FormData
from starlette.responses import RedirectResponse

from ..core.session import flash, login_user, logout_user, validate_csrf_token
from ..core.templates import template_response
from ..deps import AuthenticatedSessionUserDependency, AuthServiceDependency, SessionUserDependency
from ..errors import ApplicationError
from ..schemas.auth import LoginRequest, RegisterRequest

router = APIRouter(tags=["auth"])

FormModel = TypeVar("FormModel", bound=BaseModel)

FORM_EXPIRED = "The form has expired. Please try again."
REQUIRED = "This field is required."


def _form_values(form: FormData, *fields: str) -> dict[str, str]:
    values = {name: str(form.get(name) or "").strip() for name in fields}
    if "email" in values:
        values["email"] = values["email"].lower()
    return values


def _validate(model: type[FormModel], values: dict[str, str]) -> tuple[FormModel | None, dict[str, str]]:
    """Validate submitted values, returning one message per offending field."""

    try:
        return model.model_validate(values), {}
    except PydanticValidationError as exc:
        errors: dict[str, str] = {}
        for error in exc.errors():
            field = str((error.get("loc") or ("form",))[0])
            if error.get("input") == "":
                message = REQUIRED
            else:
                message = str(error.get("msg", "Invalid value.")).removeprefix("Value error, ")
            errors.setdefault(field, message)
        return None, errors


def _render_form(
    request: Request,
    template: str,
    title: str,
    values: dict[str, str],
    errors: dict[str, str] | None = None,
    *,
    status_code: int = status.HTTP_200_OK,
) -> Any:
    form = {key: value for key, value in values.items() if key != "password"}
    return template_response(
        request,
        template,
        {"title": title, "form": form, "errors": errors or {}},
        status_code=status_code,
    )


def _redirect_to_tasks(request: Request) -> RedirectResponse:
    return RedirectResponse(request.url_for("tasks:list"), status_code=status.HTTP_303_SEE_OTHER)


@router.get("/login", name="auth:login")
async def login_form(request: Request, current_user: SessionUserDependency) -> Any:
    if current_user is not None:
        return _redirect_to_tasks(request)
    return _render_form(request, "auth/login.html", "Sign in", {"email": ""})


@router.post("/login", name="auth:login:submit")
async def login_submit(request: Request, auth_service: AuthServiceDependency) -> Any:
    """Sign a user in from the login form."""

    form = await request.form()
    values = _form_values(form, "email", "password")
    if not validate_csrf_token(request.session, form.get("csrf_token")):
        flash(request.session, "error", FORM_EXPIRED)
        return _render_form(request, "auth/login.html", "Sign in", values, status_code=status.HTTP_400_BAD_REQUEST)

    credentials, errors = _validate(LoginRequest, values)
    user = None
    if credentials is not None:
        user = await auth_service.authenticate_user(credentials.email, credentials.password)
        if user is None:
            errors["email"] = "Invalid email or password."

    if user is None:
        return _render_form(
            request,
            "auth/login.html",
            "Sign in",
            values,
            errors,
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    login_user(request.session, user.id)
    flash(request.session, "success", f"Welcome back, {user.name}!")
    return _redirect_to_tasks(request)


@router.get("/register", name="auth:register")
async def register_form(request: Request, current_user: SessionUserDependency) -> Any:
    if current_user is not None:
        return _redirect_to_tasks(request)
    return _render_form(request, "auth/register.html", "Create an account", {"name": "", "email": ""})


@router.post("/register", name="auth:register:submit")
async def register_submit(request: Request, auth_service: AuthServiceDependency) -> Any:
    """Create an account from the registration form and sign it in."""

    form = await request.form()
    values = _form_values(form, "name", "email", "password")
    if not validate_csrf_token(request.session, form.get("csrf_token")):
        flash(request.session, "error", FORM_EXPIRED)
        return _render_form(
            request,
            "auth/register.html",
            "Create an account",
            values,
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    registration, errors = _validate(RegisterRequest, values)
    user = None
    if registration is not None:
        try:
            user = await auth_service.register_user(
                name=registration.name,
                email=registration.email,
                password=registration.password,
            )
        except ApplicationError as exc:
            errors["email"] = exc.message

    if user is None:
        return _render_form(
            request,
            "auth/register.html",
            "Create an account",
            values,
            errors,
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    login_user(request.session, user.id)
    flash(request.session, "success", "Your account has been created.")
    return _redirect_to_tasks(request)


@router.post("/logout", name="auth:logout")
async def logout(request: Request, _: AuthenticatedSessionUserDependency) -> RedirectResponse:
    form = await request.form()
    if not validate_csrf_token(request.session, form.get("csrf_token")):
        flash(request.session, "error", "Invalid sign out request.")
        return _redirect_to_tasks(request)

    logout_user(request.session)
    flash(request.session, "info", "You have been signed out.")
    return RedirectResponse(request.url_for("pages:home"), status_code=status.HTTP_303_SEE_OTHER)
