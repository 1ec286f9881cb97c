from __future__ import annotations

from typing import Annotated, Any

from beanie import PydanticObjectId
from fastapi import APIRouter, Query, Request, status
from starlette.datastructures import FormData
from starlette.responses import RedirectResponse, Response

from ..core.session import flash, validate_csrf_token
from ..core.templates import is_htmx_request, partial_response, template_response
from ..deps import AuthenticatedSessionUserDependency, CommentServiceDependency, TaskServiceDependency
from ..errors import ApplicationError, NotFoundError
from ..models import TaskStatus, User
from ..services import CommentService, TaskService

router = APIRouter(tags=["tasks"])

FORM_EXPIRED = "The form has expired. Please try again."


def _clean_text(raw: object) -> str:
    return str(raw or "").strip()


def _redirect(request: Request, name: str, **params: Any) -> RedirectResponse:
    return RedirectResponse(request.url_for(name, **params), status_code=303)


def _redirect_to_detail(request: Request, task_id: PydanticObjectId) -> RedirectResponse:
    return _redirect(request, "tasks:detail", task_id=str(task_id))


def _htmx_redirect(request: Request, name: str) -> Response:
    """Ask HTMX for a full page load instead of swapping a fragment."""

    return Response(headers={"HX-Redirect": str(request.url_for(name))})


def _csrf_ok(request: Request, form: FormData) -> bool:
    if validate_csrf_token(request.session, form.get("csrf_token")):
        return True
    flash(request.session, "error", FORM_EXPIRED)
    return False


def _parse_status(raw: str | None) -> TaskStatus | None:
    try:
        return TaskStatus(raw) if raw else None
    except ValueError:
        return None


async def _render_list(
    request: Request,
    current_user: User,
    service: TaskService,
    *,
    status_filter: TaskStatus | None = None,
    include_subtasks: bool = False,
    form: dict[str, str] | None = None,
    errors: dict[str, str] | None = None,
    status_code: int = status.HTTP_200_OK,
) -> object:
    items = await service.list_tasks(
        current_user.id,
        status=status_filter,
        include_subtasks=include_subtasks,
    )
    return template_response(
        request,
        "tasks/index.html",
        {
            "title": "My tasks",
            "items": items,
            "status_filter": status_filter.value if status_filter else "",
            "include_subtasks": include_subtasks,
            "statuses": list(TaskStatus),
            "form": form or {"title": "", "description": ""},
            "errors": errors or {},
            "current_user": current_user,
        },
        status_code=status_code,
    )


async def _render_detail(
    request: Request,
    current_user: User,
    tasks: TaskService,
    comments: CommentService,
    task_id: PydanticObjectId,
    *,
    subtask_form: dict[str, str] | None = None,
    comment_form: dict[str, str] | None = None,
    errors: dict[str, str] | None = None,
    status_code: int = status.HTTP_200_OK,
) -> object:
    detail = await tasks.get_task_detail(current_user.id, task_id)
    task_comments = await comments.list_comments(current_user.id, task_id)
    return template_response(
        request,
        "tasks/detail.html",
        {
            "title": detail.summary.task.title,
            "item": detail.summary,
            "subtasks": detail.subtasks,
            "comments": task_comments,
            "subtask_form": subtask_form or {"title": "", "description": ""},
            "comment_form": comment_form or {"content": ""},
            "errors": errors or {},
            "current_user": current_user,
        },
        status_code=status_code,
    )


@router.get("", name="tasks:list")
async def list_tasks(
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    service: TaskServiceDependency,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
    include_subtasks: bool = False,
) -> object:
    """Render the signed-in user's tasks."""

    return await _render_list(
        request,
        current_user,
        service,
        status_filter=_parse_status(status_filter),
        include_subtasks=include_subtasks,
    )


@router.post("", name="tasks:create")
async def create_task(
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    service: TaskServiceDependency,
) -> object:
    form = await request.form()
    if not _csrf_ok(request, form):
        return _redirect(request, "tasks:list")

    title = _clean_text(form.get("title"))
    description = _clean_text(form.get("description"))
    try:
        await service.create_task(current_user.id, title=title, description=description)
    except ApplicationError as exc:
        field = exc.details.get("field", "title") if isinstance(exc.details, dict) else "title"
        return await _render_list(
            request,
            current_user,
            service,
            form={"title": title, "description": description},
            errors={field: exc.message},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    flash(request.session, "success", "Task created successfully.")
    return _redirect(request, "tasks:list")


@router.get("/{task_id}", name="tasks:detail")
async def task_detail(
    task_id: PydanticObjectId,
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    tasks: TaskServiceDependency,
    comments: CommentServiceDependency,
) -> object:
    """Render a task with its subtasks and comments."""

    try:
        return await _render_detail(request, current_user, tasks, comments, task_id)
    except NotFoundError as exc:
        flash(request.session, "error", exc.message)
        return _redirect(request, "tasks:list")


@router.post("/{task_id}/subtasks", name="tasks:create_subtask")
async def create_subtask(
    task_id: PydanticObjectId,
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    tasks: TaskServiceDependency,
    comments: CommentServiceDependency,
) -> object:
    form = await request.form()
    if not _csrf_ok(request, form):
        return _redirect_to_detail(request, task_id)

    title = _clean_text(form.get("title"))
    description = _clean_text(form.get("description"))
    try:
        await tasks.create_task(
            current_user.id,
            title=title,
            description=description,
            parent_task_id=task_id,
        )
    except NotFoundError as exc:
        flash(request.session, "error", exc.message)
        return _redirect(request, "tasks:list")
    except ApplicationError as exc:
        return await _render_detail(
            request,
            current_user,
            tasks,
            comments,
            task_id,
            subtask_form={"title": title, "description": description},
            errors={"subtask": exc.message},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    flash(request.session, "success", "Subtask created successfully.")
    return _redirect_to_detail(request, task_id)


@router.post("/{task_id}/toggle", name="tasks:toggle")
async def toggle_status(
    task_id: PydanticObjectId,
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    service: TaskServiceDependency,
) -> object:
    """Flip a task between pending and completed."""

    form = await request.form()
    htmx = is_htmx_request(request)
    if not validate_csrf_token(request.session, form.get("csrf_token")):
        if htmx:
            try:
                item = await service.get_task_summary(current_user.id, task_id)
            except NotFoundError as exc:
                flash(request.session, "error", exc.message)
                return _htmx_redirect(request, "tasks:list")
            return partial_response(
                request,
                "tasks/_task_item.html",
                {"item": item, "error": FORM_EXPIRED, "current_user": current_user},
            )
        flash(request.session, "error", FORM_EXPIRED)
        return _redirect(request, "tasks:list")

    error: str | None = None
    try:
        item = await service.toggle_status(current_user.id, task_id)
    except NotFoundError as exc:
        flash(request.session, "error", exc.message)
        if htmx:
            return _htmx_redirect(request, "tasks:list")
        return _redirect(request, "tasks:list")
    except ApplicationError as exc:
        error = exc.message
        item = await service.get_task_summary(current_user.id, task_id)

    if htmx:
        return partial_response(
            request,
            "tasks/_task_item.html",
            {"item": item, "error": error, "current_user": current_user},
        )

    if error:
        flash(request.session, "error", error)
    else:
        flash(request.session, "success", f"Task marked as {item.task.status.value}.")
    if item.is_subtask and item.task.parent_task_id is not None:
        return _redirect_to_detail(request, item.task.parent_task_id)
    return _redirect(request, "tasks:list")


@router.get("/{task_id}/edit", name="tasks:edit")
async def edit_form(
    task_id: PydanticObjectId,
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    service: TaskServiceDependency,
) -> object:
    try:
        task = await service.get_task(current_user.id, task_id)
    except NotFoundError as exc:
        flash(request.session, "error", exc.message)
        return _redirect(request, "tasks:list")
    return template_response(
        request,
        "tasks/edit.html",
        {
            "title": "Edit task",
            "task": task,
            "form": {"title": task.title, "description": task.description},
            "errors": {},
            "current_user": current_user,
        },
    )


@router.post("/{task_id}/edit", name="tasks:update")
async def update_task(
    task_id: PydanticObjectId,
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    service: TaskServiceDependency,
) -> object:
    form = await request.form()
    if not _csrf_ok(request, form):
        return _redirect(request, "tasks:edit", task_id=str(task_id))

    title = _clean_text(form.get("title"))
    description = _clean_text(form.get("description"))
    try:
        await service.update_task(current_user.id, task_id, title=title, description=description)
    except NotFoundError as exc:
        flash(request.session, "error", exc.message)
        return _redirect(request, "tasks:list")
    except ApplicationError as exc:
        field = exc.details.get("field", "title") if isinstance(exc.details, dict) else "title"
        return template_response(
            request,
            "tasks/edit.html",
            {
                "title": "Edit task",
                "task": await service.get_task(current_user.id, task_id),
                "form": {"title": title, "description": description},
                "errors": {field: exc.message},
                "current_user": current_user,
            },
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    flash(request.session, "success", "Task updated successfully.")
    return _redirect_to_detail(request, task_id)


@router.post("/{task_id}/delete", name="tasks:delete")
async def delete_task(
    task_id: PydanticObjectId,
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    service: TaskServiceDependency,
) -> object:
    form = await request.form()
    if not _csrf_ok(request, form):
        return _redirect(request, "tasks:list")

    try:
        task = await service.get_task(current_user.id, task_id)
        deletion = await service.delete_task(current_user.id, task_id)
    except NotFoundError as exc:
        flash(request.session, "error", exc.message)
        return _redirect(request, "tasks:list")

    if deletion.is_subtask and task.parent_task_id is not None:
        flash(request.session, "success", "Subtask deleted successfully.")
        return _redirect_to_detail(request, task.parent_task_id)
    flash(request.session, "success", "Task and all subtasks deleted successfully.")
    return _redirect(request, "tasks:list")


@router.post("/{task_id}/comments", name="tasks:add_comment")
async def add_comment(
    task_id: PydanticObjectId,
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    tasks: TaskServiceDependency,
    comments: CommentServiceDependency,
) -> object:
    form = await request.form()
    if not _csrf_ok(request, form):
        return _redirect_to_detail(request, task_id)

    content = _clean_text(form.get("content"))
    try:
        await comments.create_comment(current_user.id, task_id, content)
    except NotFoundError as exc:
        flash(request.session, "error", exc.message)
        return _redirect(request, "tasks:list")
    except ApplicationError as exc:
        return await _render_detail(
            request,
            current_user,
            tasks,
            comments,
            task_id,
            comment_form={"content": content},
            errors={"content": exc.message},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    flash(request.session, "success", "Comment added.")
    return _redirect_to_detail(request, task_id)


@router.post("/{task_id}/comments/{comment_id}/edit", name="tasks:update_comment")
async def update_comment(
    task_id: PydanticObjectId,
    comment_id: PydanticObjectId,
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    comments: CommentServiceDependency,
) -> object:
    form = await request.form()
    if _csrf_ok(request, form):
        try:
            await comments.update_comment(current_user.id, comment_id, _clean_text(form.get("content")))
        except ApplicationError as exc:
            flash(request.session, "error", exc.message)
        else:
            flash(request.session, "success", "Comment updated.")
    return _redirect_to_detail(request, task_id)


@router.post("/{task_id}/comments/{comment_id}/delete", name="tasks:delete_comment")
async def delete_comment(
    task_id: PydanticObjectId,
    comment_id: PydanticObjectId,
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    comments: CommentServiceDependency,
) -> object:
    form = await request.form()
    if _csrf_ok(request, form):
        try:
            await comments.delete_comment(current_user.id, comment_id)
        except NotFoundError as exc:
            flash(request.session, "error", exc.message)
        else:
            flash(request.session, "success", "Comment deleted.")
    return _redirect_to_detail(request, task_id)
