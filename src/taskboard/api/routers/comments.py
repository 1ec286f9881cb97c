"""Routes handling comments on tasks."""

from __future__ import annotations

from beanie import PydanticObjectId
from fastapi import APIRouter, status

from ...deps import CommentServiceDependency, CurrentUserDependency
from ...schemas import ApiResponse, CommentCount, CommentCreate, CommentRead, CommentUpdate, MessageResponse
from ...services import CommentView

router = APIRouter(tags=["comments"])


def map_comment(view: CommentView) -> CommentRead:
    return CommentRead.model_validate(
        {
            **view.comment.model_dump(),
            "author_name": view.author_name,
            "author_email": view.author_email,
        }
    )


@router.get(
    "/tasks/{task_id}/comments",
    response_model=ApiResponse[list[CommentRead]],
    summary="List comments on a task, newest first",
)
async def list_comments(
    task_id: PydanticObjectId,
    current_user: CurrentUserDependency,
    service: CommentServiceDependency,
) -> ApiResponse[list[CommentRead]]:
    comments = [map_comment(view) for view in await service.list_comments(current_user.id, task_id)]
    return ApiResponse[list[CommentRead]](data=comments, count=len(comments))


@router.post(
    "/tasks/{task_id}/comments",
    response_model=ApiResponse[CommentRead],
    status_code=status.HTTP_201_CREATED,
    summary="Add a comment to a task",
)
async def create_comment(
    task_id: PydanticObjectId,
    payload: CommentCreate,
    current_user: CurrentUserDependency,
    service: CommentServiceDependency,
) -> ApiResponse[CommentRead]:
    view = await service.create_comment(current_user.id, task_id, payload.content)
    return ApiResponse[CommentRead](message="Comment created successfully", data=map_comment(view))


@router.get(
    "/tasks/{task_id}/comments/count",
    response_model=ApiResponse[CommentCount],
    summary="Count the comments on a task",
)
async def count_comments(
    task_id: PydanticObjectId,
    current_user: CurrentUserDependency,
    service: CommentServiceDependency,
) -> ApiResponse[CommentCount]:
    total = await service.count_comments(current_user.id, task_id)
    return ApiResponse[CommentCount](data=CommentCount(task_id=task_id, count=total))


@router.get(
    "/comments/{comment_id}",
    response_model=ApiResponse[CommentRead],
    summary="Retrieve one of your comments",
)
async def get_comment(
    comment_id: PydanticObjectId,
    current_user: CurrentUserDependency,
    service: CommentServiceDependency,
) -> ApiResponse[CommentRead]:
    view = await service.get_comment(current_user.id, comment_id)
    return ApiResponse[CommentRead](data=map_comment(view))


@router.put(
    "/comments/{comment_id}",
    response_model=ApiResponse[CommentRead],
    summary="Edit one of your comments",
)
async def update_comment(
    comment_id: PydanticObjectId,
    payload: CommentUpdate,
    current_user: CurrentUserDependency,
    service: CommentServiceDependency,
) -> ApiResponse[CommentRead]:
    view = await service.update_comment(current_user.id, comment_id, payload.content)
    return ApiResponse[CommentRead](message="Comment updated successfully", data=map_comment(view))


@router.delete(
    "/comments/{comment_id}",
    response_model=MessageResponse,
    summary="Delete one of your comments",
)
async def delete_comment(
    comment_id: PydanticObjectId,
    current_user: CurrentUserDependency,
    service: CommentServiceDependency,
) -> MessageResponse:
    await service.delete_comment(current_user.id, comment_id)
    return MessageResponse(message="Comment deleted successfully")
