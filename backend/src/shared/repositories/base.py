"""
Base Repository

This module provides a generic base repository with the lookups every
entity repository needs. Entity repositories add their own feed-specific
range scans and counter updates on top.

What This Provides:
===================
- get(id)        → Fetch single record by UUID
- get_by_ids()   → Fetch multiple records by UUIDs (one IN query)
- get_map()      → Same, keyed by id, for batched enrichment
- create()       → Insert a new record and flush

Generic Type Pattern:
=====================
    class UserRepository(BaseRepository[User]):
        def __init__(self, session: AsyncSession) -> None:
            super().__init__(User, session)

    repo = UserRepository(db)
    user = await repo.get(id)  # Returns User, not Any!

flush() vs commit():
====================
Repositories only flush. The owner of the session commits: get_db() at the
end of a request, session_scope() at the end of a background job.

Counter Updates:
================
Counters (version, like_count, follower_count, engagement_score) are
changed with single UPDATE ... SET col = col + n statements, never with a
read-modify-write on a loaded object. Those statements bypass the identity
map (synchronize_session=False), so callers re-read the column when they
need the new value.
"""

from typing import Any, Generic, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.shared.models.base import Base


# TypeVar bound to Base ensures we only work with SQLAlchemy models
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository providing common lookups.

    Attributes:
        model: The SQLAlchemy model class
        session: The async database session
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession) -> None:
        self.model = model
        self.session = session

    # ═══════════════════════════════════════════════════════════════════════════
    # READ OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    async def get(self, record_id: UUID) -> Optional[ModelType]:
        """
        Get a single record by its UUID.

        SQL Generated:
            SELECT * FROM anchors WHERE id = '7c9e6679-...'
        """
        result = await self.session.execute(select(self.model).where(self.model.id == record_id))
        return result.scalar_one_or_none()

    async def get_by_ids(self, ids: list[UUID]) -> list[ModelType]:
        """
        Get multiple records by their UUIDs in one query.

        Returns:
            Matching records in no particular order (missing ids are skipped)

        SQL Generated:
            SELECT * FROM users WHERE id IN ('uuid1', 'uuid2', 'uuid3')
        """
        if not ids:
            return []

        result = await self.session.execute(select(self.model).where(self.model.id.in_(ids)))
        return list(result.scalars().all())

    async def get_map(self, ids: list[UUID]) -> dict[UUID, ModelType]:
        """
        Batch lookup keyed by id.

        Example:
            authors = await user_repo.get_map([a.user_id for a in anchors])
            author = authors.get(anchor.user_id)  # None if the user is gone
        """
        return {record.id: record for record in await self.get_by_ids(list(set(ids)))}

    # ═══════════════════════════════════════════════════════════════════════════
    # CREATE OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    async def create(self, **kwargs: Any) -> ModelType:
        """
        Create a new record.

        Adds the instance, flushes the INSERT and refreshes it so defaults
        (id, created_at, ...) are populated.
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance
