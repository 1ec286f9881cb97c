"""Seed script for populating development data."""

from __future__ import annotations

import asyncio
import logging

from ..core.config import get_settings
from ..core.logging import configure_logging
from ..models import TaskStatus
from ..services import CommentService, TaskService, UserService
from .connection import close_document_store, init_document_store

logger = logging.getLogger(__name__)

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "Demo1234"


async def seed() -> None:
    """Populate the database with a small set of development fixtures."""
    await init_document_store()
    try:
        user_service = UserService()
        task_service = TaskService()
        comment_service = CommentService()

        user = await user_service.get_user_by_email(DEMO_EMAIL)
        if user is None:
            user = await user_service.create_user(
                name="Demo User",
                email=DEMO_EMAIL,
                password=DEMO_PASSWORD,
            )

        if await task_service.list_tasks(user.id, include_subtasks=True):
            logger.info("Seed data already present", extra={"user_id": str(user.id)})
            return

        groceries = await task_service.create_task(
            user.id,
            title="Buy groceries",
            description="Weekly shop for the house.",
        )
        parent_id = groceries.task.id
        milk = await task_service.create_task(user.id, title="Pick 2% milk", parent_task_id=parent_id)
        await task_service.create_task(user.id, title="Fresh bread", parent_task_id=parent_id)
        await task_service.set_status(user.id, milk.task.id, TaskStatus.COMPLETED)
        await comment_service.create_comment(user.id, parent_id, "Check the corner shop first.")

        await task_service.create_task(
            user.id,
            title="Set up local environment",
            description="Install dependencies and run the application.",
        )
        logger.info("Seed data created", extra={"user_id": str(user.id)})
    finally:
        await close_document_store()


def main() -> None:
    """Entry-point hook for the ``taskboard-seed`` console script."""
    configure_logging(get_settings())
    asyncio.run(seed())


if __name__ == "__main__":  # pragma: no cover - manual execution entry-point
    main()
