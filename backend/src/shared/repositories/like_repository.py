"""
Like Repository

Like rows: idempotent create/remove, the viewer's liked set for a page,
and the most recent likers of each anchor on a page.

Recent Likers Query:
====================
    SELECT anchor_id, user_id FROM (
        SELECT anchor_id, user_id,
               row_number() OVER (PARTITION BY anchor_id
                                  ORDER BY created_at DESC, id DESC) AS rn
        FROM likes WHERE anchor_id IN (:anchor_ids)
    ) ranked
    WHERE rn <= 20
    ORDER BY anchor_id, rn
"""

from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.shared.models.like import Like
from src.shared.repositories.base import BaseRepository


class LikeRepository(BaseRepository[Like]):
    """Repository for likes."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Like, session)

    # ═══════════════════════════════════════════════════════════════════════════
    # WRITES
    # ═══════════════════════════════════════════════════════════════════════════

    async def add_like(self, anchor_id: UUID, user_id: UUID) -> bool:
        """
        Like an anchor.

        Returns:
            True if a row was inserted, False if the like already existed

        Two concurrent first likes by the same user race on
        uq_likes_anchor_user; the loser's request fails with IntegrityError
        and a retry is a no-op.
        """
        if await self.has_liked(anchor_id, user_id):
            return False

        self.session.add(Like(anchor_id=anchor_id, user_id=user_id))
        await self.session.flush()
        return True

    async def remove_like(self, anchor_id: UUID, user_id: UUID) -> bool:
        """
        Remove a like.

        Returns:
            True if a row was deleted, False if there was nothing to remove
        """
        result = await self.session.execute(
            delete(Like).where(Like.anchor_id == anchor_id, Like.user_id == user_id)
        )
        return result.rowcount > 0

    # ═══════════════════════════════════════════════════════════════════════════
    # READS
    # ═══════════════════════════════════════════════════════════════════════════

    async def has_liked(self, anchor_id: UUID, user_id: UUID) -> bool:
        result = await self.session.execute(
            select(Like.id).where(Like.anchor_id == anchor_id, Like.user_id == user_id)
        )
        return result.first() is not None

    async def get_liked_anchor_ids(self, user_id: UUID, anchor_ids: list[UUID]) -> set[UUID]:
        """Which of ``anchor_ids`` the user has liked (one query)."""
        if not anchor_ids:
            return set()

        result = await self.session.execute(
            select(Like.anchor_id).where(Like.user_id == user_id, Like.anchor_id.in_(anchor_ids))
        )
        return set(result.scalars().all())

    async def get_recent_liker_ids(
        self,
        anchor_ids: list[UUID],
        per_anchor: int,
    ) -> dict[UUID, list[UUID]]:
        """
        Most recent likers of each anchor, newest first.

        Returns:
            anchor_id → up to ``per_anchor`` user ids; anchors with no
            likes are absent from the mapping
        """
        if not anchor_ids:
            return {}

        ranked = (
            select(
                Like.anchor_id,
                Like.user_id,
                func.row_number()
                .over(
                    partition_by=Like.anchor_id,
                    order_by=(Like.created_at.desc(), Like.id.desc()),
                )
                .label("rn"),
            )
            .where(Like.anchor_id.in_(anchor_ids))
            .subquery()
        )

        result = await self.session.execute(
            select(ranked.c.anchor_id, ranked.c.user_id)
            .where(ranked.c.rn <= per_anchor)
            .order_by(ranked.c.anchor_id, ranked.c.rn)
        )

        likers: dict[UUID, list[UUID]] = {}
        for row in result.all():
            likers.setdefault(row.anchor_id, []).append(row.user_id)
        return likers
