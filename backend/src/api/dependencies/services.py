"""
Service Dependencies

FastAPI dependencies for service injection.

These dependencies create service instances with proper database session injection.
Services are created per-request, which is fine because:
- Services are stateless (only hold db session reference)
- Each request gets its own db session
- No shared state between requests

The background task runner is the exception: one per process, created by
the application lifespan and read from app.state.

Usage:
======
    from src.api.dependencies.services import get_feed_service

    @router.get("/discover")
    async def discover(service: FeedService = Depends(get_feed_service)):
        return await service.get_discover_feed(None)
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.database import get_db
from src.shared.core.exceptions import ServiceUnavailableError
from src.shared.services.anchor_follow_service import FollowVersionTracker
from src.shared.services.anchor_service import AnchorService
from src.shared.services.feed_service import FeedService
from src.shared.services.like_service import LikeService
from src.worker.task_runner import BackgroundTaskRunner


def get_task_runner(request: Request) -> BackgroundTaskRunner:
    """
    Dependency to get the process-wide BackgroundTaskRunner.

    Raises:
        ServiceUnavailableError: If the application started without one
    """
    runner = getattr(request.app.state, "task_runner", None)
    if runner is None:
        raise ServiceUnavailableError("Background task runner is not available")
    return runner


TaskRunner = Annotated[BackgroundTaskRunner, Depends(get_task_runner)]


async def get_feed_service(
    db: AsyncSession = Depends(get_db),
) -> FeedService:
    """
    Dependency to get FeedService instance.

    Creates a new service instance per request with the request's db session.
    """
    return FeedService(db)


async def get_follow_tracker(
    runner: TaskRunner,
    db: AsyncSession = Depends(get_db),
) -> FollowVersionTracker:
    """
    Dependency to get FollowVersionTracker instance.
    """
    return FollowVersionTracker(db, runner)


async def get_like_service(
    runner: TaskRunner,
    db: AsyncSession = Depends(get_db),
) -> LikeService:
    """
    Dependency to get LikeService instance.
    """
    return LikeService(db, runner)


async def get_anchor_service(
    runner: TaskRunner,
    db: AsyncSession = Depends(get_db),
) -> AnchorService:
    """
    Dependency to get AnchorService instance.
    """
    return AnchorService(db, runner)
