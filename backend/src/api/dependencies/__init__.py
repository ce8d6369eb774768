"""
API Dependencies

FastAPI dependencies for injection into route handlers.

Dependencies:
=============
- Database: get_db(), DbSession
- Authentication: get_current_user_id(), CurrentUser, OptionalUser
- Services: get_*_service() functions, TaskRunner
- Feed queries: FollowingQuery, DiscoverQuery, TagQuery

Type Aliases:
=============
Type aliases provide cleaner route signatures:

    # Instead of this:
    async def handler(
        db: AsyncSession = Depends(get_db),
        user_id: UUID = Depends(get_current_user_id)
    ):

    # Write this:
    async def handler(db: DbSession, user_id: CurrentUser):

Usage:
======
    from src.api.dependencies import CurrentUser, FollowingQuery

    @router.get("/following")
    async def following(user_id: CurrentUser, query: FollowingQuery):
        ...
"""

from src.api.dependencies.database import (
    get_db,
    DbSession,
)
from src.api.dependencies.auth import (
    get_current_user_id,
    get_optional_user_id,
    CurrentUser,
    OptionalUser,
)
from src.api.dependencies.services import (
    get_task_runner,
    TaskRunner,
)
from src.api.dependencies.feed_queries import (
    FollowingQuery,
    DiscoverQuery,
    TagQuery,
)

__all__ = [
    # Database
    "get_db",
    "DbSession",
    # Authentication
    "get_current_user_id",
    "get_optional_user_id",
    "CurrentUser",
    "OptionalUser",
    # Services
    "get_task_runner",
    "TaskRunner",
    # Feed queries
    "FollowingQuery",
    "DiscoverQuery",
    "TagQuery",
]
