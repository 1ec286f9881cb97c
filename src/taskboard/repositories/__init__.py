"""Repository layer exposing data access helpers."""

from .base import BaseRepository
from .comments import CommentRepository
from .tasks import TaskRepository
from .users import UserRepository

__all__ = ["BaseRepository", "CommentRepository", "TaskRepository", "UserRepository"]
