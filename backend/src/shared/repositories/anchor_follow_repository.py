"""
AnchorFollow Repository

Database operations for user → anchor follows and their last seen versions.

Common Operations:
==================
- get_follow()                   → The (user, anchor) follow, if any
- create_follow()                → Insert, or return the row a concurrent request won with
- raise_last_seen_version()      → Monotonic "viewer has seen version N"
- get_notification_recipients()  → Followers with notify_on_update
- list_followed_anchors()        → "Anchors I follow" page with sorting
- count_followed_anchors()       → Totals for that page

Monotonic Last Seen Version:
============================
    UPDATE anchor_follows SET last_seen_version = :v
    WHERE user_id = :u AND anchor_id = :a AND last_seen_version < :v

The guard makes the write idempotent and safe to retry or to apply out of
order: a late job carrying an older version changes nothing.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import Select, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.shared.models.anchor import Anchor
from src.shared.models.anchor_follow import AnchorFollow
from src.shared.models.base import utc_now
from src.shared.models.enums import FollowingSort, Visibility
from src.shared.repositories.base import BaseRepository


class AnchorFollowRepository(BaseRepository[AnchorFollow]):
    """Repository for anchor follows."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(AnchorFollow, session)

    # ═══════════════════════════════════════════════════════════════════════════
    # SINGLE FOLLOW
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_follow(self, user_id: UUID, anchor_id: UUID) -> Optional[AnchorFollow]:
        """The follow record for (user, anchor), or None."""
        result = await self.session.execute(
            select(AnchorFollow).where(
                AnchorFollow.user_id == user_id,
                AnchorFollow.anchor_id == anchor_id,
            )
        )
        return result.scalar_one_or_none()

    async def create_follow(
        self,
        user_id: UUID,
        anchor_id: UUID,
        notify_on_update: bool,
        last_seen_version: int,
    ) -> tuple[AnchorFollow, bool]:
        """
        Insert the follow inside a savepoint.

        Two concurrent first follows race on uq_anchor_follows_pair.
        The loser rolls back only its savepoint and gets the winner's row.

        Returns:
            (follow, created); created is False when the row already existed
        """
        follow = AnchorFollow(
            user_id=user_id,
            anchor_id=anchor_id,
            notify_on_update=notify_on_update,
            last_seen_version=last_seen_version,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(follow)
        except IntegrityError:
            existing = await self.get_follow(user_id, anchor_id)
            if existing is None:
                raise
            return existing, False

        await self.session.refresh(follow)
        return follow, True

    async def delete_follow(self, user_id: UUID, anchor_id: UUID) -> bool:
        """
        Remove the follow.

        Returns:
            True if a row was deleted
        """
        result = await self.session.execute(
            delete(AnchorFollow).where(
                AnchorFollow.user_id == user_id,
                AnchorFollow.anchor_id == anchor_id,
            )
        )
        return result.rowcount > 0

    async def set_notify_on_update(self, follow: AnchorFollow, notify_on_update: bool) -> AnchorFollow:
        """Toggle update notifications on a loaded follow."""
        follow.notify_on_update = notify_on_update
        await self.session.flush()
        await self.session.refresh(follow)
        return follow

    async def raise_last_seen_version(self, user_id: UUID, anchor_id: UUID, version: int) -> bool:
        """
        Record that the follower has seen ``version``.

        Returns:
            True if the stored version moved forward; False when there is
            no follow or it already records ``version`` or later
        """
        result = await self.session.execute(
            update(AnchorFollow)
            .where(
                AnchorFollow.user_id == user_id,
                AnchorFollow.anchor_id == anchor_id,
                AnchorFollow.last_seen_version < version,
            )
            .values(last_seen_version=version, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    # ═══════════════════════════════════════════════════════════════════════════
    # FOLLOWERS OF AN ANCHOR
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_notification_recipients(
        self,
        anchor_id: UUID,
        exclude_user_id: Optional[UUID] = None,
    ) -> list[UUID]:
        """Followers of the anchor who asked to be notified of updates."""
        query = select(AnchorFollow.user_id).where(
            AnchorFollow.anchor_id == anchor_id,
            AnchorFollow.notify_on_update.is_(True),
        )
        if exclude_user_id is not None:
            query = query.where(AnchorFollow.user_id != exclude_user_id)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    # ═══════════════════════════════════════════════════════════════════════════
    # ANCHORS A USER FOLLOWS
    # ═══════════════════════════════════════════════════════════════════════════

    def _followed_anchors_query(self, query: Select, user_id: UUID, only_with_updates: bool) -> Select:
        query = query.join(Anchor, Anchor.id == AnchorFollow.anchor_id).where(
            AnchorFollow.user_id == user_id,
            Anchor.deleted_at.is_(None),
            Anchor.visibility != Visibility.PRIVATE,
        )
        if only_with_updates:
            query = query.where(Anchor.version > AnchorFollow.last_seen_version)
        return query

    async def list_followed_anchors(
        self,
        user_id: UUID,
        *,
        sort: FollowingSort = FollowingSort.STALE,
        offset: int = 0,
        limit: int = 20,
        only_with_updates: bool = False,
    ) -> list[tuple[AnchorFollow, Anchor]]:
        """
        One page of the anchors ``user_id`` follows.

        Sorts:
            STALE         last_seen_version ASC (most out-of-date first)
            RECENT        followed most recently first
            UPDATED       anchor content changed most recently first
            ALPHABETICAL  anchor title, case-insensitive
        """
        query = self._followed_anchors_query(select(AnchorFollow, Anchor), user_id, only_with_updates)

        if sort == FollowingSort.RECENT:
            query = query.order_by(AnchorFollow.created_at.desc(), AnchorFollow.id.desc())
        elif sort == FollowingSort.UPDATED:
            query = query.order_by(Anchor.last_item_added_at.desc(), Anchor.id.desc())
        elif sort == FollowingSort.ALPHABETICAL:
            query = query.order_by(func.lower(Anchor.title), Anchor.id)
        else:
            query = query.order_by(
                AnchorFollow.last_seen_version.asc(),
                AnchorFollow.created_at.desc(),
                AnchorFollow.id.desc(),
            )

        result = await self.session.execute(query.offset(offset).limit(limit))
        return [(row[0], row[1]) for row in result.all()]

    async def count_followed_anchors(self, user_id: UUID, *, only_with_updates: bool = False) -> int:
        """Number of visible anchors the user follows."""
        query = self._followed_anchors_query(
            select(func.count()).select_from(AnchorFollow), user_id, only_with_updates
        )
        result = await self.session.execute(query)
        return result.scalar() or 0
