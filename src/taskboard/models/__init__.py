"""Document models persisted in MongoDB."""

from __future__ import annotations

from .comment import Comment
from .common import TimestampMixin, utcnow
from .task import Task, TaskStatus
from .user import User

DOCUMENT_MODELS = [User, Task, Comment]

__all__ = [
    "Comment",
    "DOCUMENT_MODELS",
    "Task",
    "TaskStatus",
    "TimestampMixin",
    "User",
    "utcnow",
]
