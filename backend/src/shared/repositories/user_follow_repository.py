"""
UserFollow Repository

User → user follow lookups: the full followed set (feed author set and
discovery exclusion set) and the followed subset of a candidate list
(like-summary prioritization).
"""

from typing import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.shared.models.user_follow import UserFollow
from src.shared.repositories.base import BaseRepository


class UserFollowRepository(BaseRepository[UserFollow]):
    """Repository for user → user follows."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(UserFollow, session)

    async def get_following_ids(self, user_id: UUID) -> list[UUID]:
        """Every user ``user_id`` follows."""
        result = await self.session.execute(
            select(UserFollow.following_id).where(UserFollow.follower_id == user_id)
        )
        return list(result.scalars().all())

    async def get_followed_subset(self, user_id: UUID, candidate_ids: Iterable[UUID]) -> set[UUID]:
        """
        Which of ``candidate_ids`` the user follows (one query).

        SQL Generated:
            SELECT following_id FROM user_follows
            WHERE follower_id = :user_id AND following_id IN (:candidates)
        """
        candidates = list(set(candidate_ids))
        if not candidates:
            return set()

        result = await self.session.execute(
            select(UserFollow.following_id).where(
                UserFollow.follower_id == user_id,
                UserFollow.following_id.in_(candidates),
            )
        )
        return set(result.scalars().all())
