"""
UserBlock Repository

Blocked-set lookup used to keep blocked users out of both feeds.
"""

from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.shared.models.user_block import UserBlock
from src.shared.repositories.base import BaseRepository


class UserBlockRepository(BaseRepository[UserBlock]):
    """Repository for user blocks."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(UserBlock, session)

    async def get_blocked_user_ids(self, user_id: UUID) -> set[UUID]:
        """
        Users hidden from ``user_id``: those they blocked and those who blocked them.

        SQL Generated:
            SELECT blocker_id, blocked_id FROM user_blocks
            WHERE blocker_id = :user_id OR blocked_id = :user_id
        """
        result = await self.session.execute(
            select(UserBlock.blocker_id, UserBlock.blocked_id).where(
                or_(UserBlock.blocker_id == user_id, UserBlock.blocked_id == user_id)
            )
        )

        hidden: set[UUID] = set()
        for row in result.all():
            hidden.add(row.blocked_id if row.blocker_id == user_id else row.blocker_id)
        return hidden
