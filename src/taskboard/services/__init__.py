"""Service layer exports."""

from .auth import AuthService, TokenPair
from .comments import CommentService, CommentView
from .tasks import TaskDeletion, TaskDetail, TaskService, TaskSummary
from .users import UserService

__all__ = [
    "AuthService",
    "CommentService",
    "CommentView",
    "TaskDeletion",
    "TaskDetail",
    "TaskService",
    "TaskSummary",
    "TokenPair",
    "UserService",
]
