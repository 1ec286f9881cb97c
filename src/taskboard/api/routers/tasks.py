"""Routes handling tasks and their subtasks."""

from __future__ import annotations

from typing import Annotated

from beanie import PydanticObjectId
from fastapi import APIRouter, Query, status

from ...deps import CurrentUserDependency, TaskServiceDependency
from ...models import TaskStatus
from ...schemas import (
    ApiResponse,
    SubtaskCreate,
    TaskCreate,
    TaskDeletionRead,
    TaskDetailRead,
    TaskRead,
    TaskStatusUpdate,
    TaskUpdate,
)
from ...services import TaskDetail, TaskSummary

router = APIRouter(prefix="/tasks", tags=["tasks"])

StatusQuery = Annotated[
    TaskStatus | None,
    Query(description="Filter results to tasks matching the supplied status."),
]
IncludeSubtasksQuery = Annotated[
    bool,
    Query(description="Include subtasks alongside top-level tasks."),
]


def map_task(summary: TaskSummary) -> TaskRead:
    return TaskRead.model_validate(
        {
            **summary.task.model_dump(),
            "is_subtask": summary.is_subtask,
            "subtask_count": summary.subtask_count,
            "pending_subtasks": summary.pending_subtasks,
        }
    )


def map_task_detail(detail: TaskDetail) -> TaskDetailRead:
    base = map_task(detail.summary)
    return TaskDetailRead(
        **base.model_dump(),
        subtasks=[map_task(subtask) for subtask in detail.subtasks],
    )


def _created_message(summary: TaskSummary) -> str:
    return "Subtask created successfully" if summary.is_subtask else "Task created successfully"


@router.get(
    "",
    response_model=ApiResponse[list[TaskRead]],
    summary="List the current user's tasks",
)
async def list_tasks(
    current_user: CurrentUserDependency,
    service: TaskServiceDependency,
    status: StatusQuery = None,
    include_subtasks: IncludeSubtasksQuery = False,
) -> ApiResponse[list[TaskRead]]:
    summaries = await service.list_tasks(
        current_user.id,
        status=status,
        include_subtasks=include_subtasks,
    )
    tasks = [map_task(summary) for summary in summaries]
    return ApiResponse[list[TaskRead]](data=tasks, count=len(tasks))


@router.post(
    "",
    response_model=ApiResponse[TaskRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create a task or, with parent_task_id, a subtask",
)
async def create_task(
    payload: TaskCreate,
    current_user: CurrentUserDependency,
    service: TaskServiceDependency,
) -> ApiResponse[TaskRead]:
    summary = await service.create_task(
        current_user.id,
        title=payload.title,
        description=payload.description,
        parent_task_id=payload.parent_task_id,
    )
    return ApiResponse[TaskRead](message=_created_message(summary), data=map_task(summary))


@router.get(
    "/{task_id}",
    response_model=ApiResponse[TaskDetailRead],
    summary="Retrieve a task with its subtasks",
)
async def get_task(
    task_id: PydanticObjectId,
    current_user: CurrentUserDependency,
    service: TaskServiceDependency,
) -> ApiResponse[TaskDetailRead]:
    detail = await service.get_task_detail(current_user.id, task_id)
    return ApiResponse[TaskDetailRead](data=map_task_detail(detail))


@router.put(
    "/{task_id}",
    response_model=ApiResponse[TaskRead],
    summary="Update a task's title or description",
)
@router.patch(
    "/{task_id}",
    response_model=ApiResponse[TaskRead],
    summary="Update a task's title or description",
)
async def update_task(
    task_id: PydanticObjectId,
    payload: TaskUpdate,
    current_user: CurrentUserDependency,
    service: TaskServiceDependency,
) -> ApiResponse[TaskRead]:
    summary = await service.update_task(
        current_user.id,
        task_id,
        title=payload.title,
        description=payload.description,
    )
    return ApiResponse[TaskRead](message="Task updated successfully", data=map_task(summary))


@router.put(
    "/{task_id}/status",
    response_model=ApiResponse[TaskRead],
    summary="Mark a task as pending or completed",
)
async def set_task_status(
    task_id: PydanticObjectId,
    payload: TaskStatusUpdate,
    current_user: CurrentUserDependency,
    service: TaskServiceDependency,
) -> ApiResponse[TaskRead]:
    summary = await service.set_status(current_user.id, task_id, payload.status)
    return ApiResponse[TaskRead](
        message=f"Task marked as {payload.status.value}",
        data=map_task(summary),
    )


@router.delete(
    "/{task_id}",
    response_model=ApiResponse[TaskDeletionRead],
    summary="Delete a task, its subtasks and their comments",
)
async def delete_task(
    task_id: PydanticObjectId,
    current_user: CurrentUserDependency,
    service: TaskServiceDependency,
) -> ApiResponse[TaskDeletionRead]:
    deletion = await service.delete_task(current_user.id, task_id)
    message = (
        "Subtask deleted successfully"
        if deletion.is_subtask
        else "Task and all subtasks deleted successfully"
    )
    return ApiResponse[TaskDeletionRead](
        message=message,
        data=TaskDeletionRead.model_validate(deletion),
    )


@router.get(
    "/{task_id}/subtasks",
    response_model=ApiResponse[list[TaskRead]],
    summary="List the subtasks of a task",
)
async def list_subtasks(
    task_id: PydanticObjectId,
    current_user: CurrentUserDependency,
    service: TaskServiceDependency,
) -> ApiResponse[list[TaskRead]]:
    subtasks = [map_task(summary) for summary in await service.list_subtasks(current_user.id, task_id)]
    return ApiResponse[list[TaskRead]](data=subtasks, count=len(subtasks))


@router.post(
    "/{task_id}/subtasks",
    response_model=ApiResponse[TaskRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create a subtask under a task",
)
async def create_subtask(
    task_id: PydanticObjectId,
    payload: SubtaskCreate,
    current_user: CurrentUserDependency,
    service: TaskServiceDependency,
) -> ApiResponse[TaskRead]:
    summary = await service.create_task(
        current_user.id,
        title=payload.title,
        description=payload.description,
        parent_task_id=task_id,
    )
    return ApiResponse[TaskRead](message=_created_message(summary), data=map_task(summary))
