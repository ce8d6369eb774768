"""
Anchor Repository

Range scans behind both feeds, plus the atomic counter updates that run
as background side effects.

Feed Range Scans:
=================
┌─────────────────────────────────────────────────────────────────────────────┐
│ FOLLOWING FEED                                                              │
│   WHERE user_id IN (:authors)                                               │
│     AND visibility IN ('PUBLIC', 'UNLISTED') AND deleted_at IS NULL         │
│     AND (last_item_added_at, id) < (:t, :i)            ← cursor, if any     │
│   ORDER BY last_item_added_at DESC, id DESC                                 │
│   LIMIT :limit + 1                                                          │
├─────────────────────────────────────────────────────────────────────────────┤
│ DISCOVER (trending / popular)                                               │
│   WHERE visibility = 'PUBLIC' AND deleted_at IS NULL                        │
│     AND user_id NOT IN (:excluded)                                          │
│     AND created_at >= :window_start                    ← trending only      │
│     AND EXISTS (tag = :tag)                            ← tag filter only    │
│     AND (engagement_score, created_at, id) < (:s, :c, :i)                   │
│   ORDER BY engagement_score DESC, created_at DESC, id DESC                  │
├─────────────────────────────────────────────────────────────────────────────┤
│ DISCOVER (recent)                                                           │
│   same filters, ORDER BY created_at DESC, id DESC                           │
└─────────────────────────────────────────────────────────────────────────────┘

Row-value comparisons are spelled out as OR/AND chains so the same query
works on every backend. The id column is the final tie-break, which makes
every ordering strict: a keyset cursor can neither repeat nor skip a row
of a static dataset.
"""

from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import and_, case, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.shared.models.anchor import Anchor, CLONE_WEIGHT, COMMENT_WEIGHT, LIKE_WEIGHT
from src.shared.models.anchor_tag import AnchorTag
from src.shared.models.enums import FeedCategory, Visibility
from src.shared.repositories.base import BaseRepository
from src.shared.utils.cursor import DiscoverCursor, FollowingCursor


# Unlisted anchors reach followers but are never discoverable
FOLLOWING_FEED_VISIBILITIES = (Visibility.PUBLIC, Visibility.UNLISTED)


class AnchorRepository(BaseRepository[Anchor]):
    """Repository for anchor reads and derived-counter writes."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Anchor, session)

    async def get_active(self, anchor_id: UUID) -> Optional[Anchor]:
        """Get an anchor unless it is soft-deleted."""
        result = await self.session.execute(
            select(Anchor).where(Anchor.id == anchor_id, Anchor.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    # ═══════════════════════════════════════════════════════════════════════════
    # FEED RANGE SCANS
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_following_feed_page(
        self,
        author_ids: Iterable[UUID],
        cursor: Optional[FollowingCursor],
        limit: int,
    ) -> list[Anchor]:
        """
        Anchors by any of ``author_ids``, newest content first.

        Args:
            author_ids: Followed users, plus the viewer when includeOwn
            cursor: Exclusive lower bound from the previous page
            limit: Rows to fetch (callers pass page size + 1)
        """
        query = select(Anchor).where(
            Anchor.user_id.in_(list(author_ids)),
            Anchor.visibility.in_(FOLLOWING_FEED_VISIBILITIES),
            Anchor.deleted_at.is_(None),
        )

        if cursor is not None:
            query = query.where(
                or_(
                    Anchor.last_item_added_at < cursor.timestamp,
                    and_(
                        Anchor.last_item_added_at == cursor.timestamp,
                        Anchor.id < cursor.anchor_id,
                    ),
                )
            )

        query = query.order_by(Anchor.last_item_added_at.desc(), Anchor.id.desc()).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_discover_page(
        self,
        *,
        category: FeedCategory,
        cursor: Optional[DiscoverCursor],
        limit: int,
        exclude_user_ids: Iterable[UUID] = (),
        tag: Optional[str] = None,
        created_after: Optional[datetime] = None,
    ) -> list[Anchor]:
        """
        Public anchors ranked for discovery.

        Args:
            category: RECENT orders by creation time, the others by score
            cursor: Exclusive lower bound from the previous page
            limit: Rows to fetch (callers pass page size + 1)
            exclude_user_ids: Authors to leave out (viewer, followed, blocked)
            tag: Normalized (lower-cased) tag the anchor must carry
            created_after: Start of the trending window
        """
        query = select(Anchor).where(
            Anchor.visibility == Visibility.PUBLIC,
            Anchor.deleted_at.is_(None),
        )

        excluded = list(exclude_user_ids)
        if excluded:
            query = query.where(Anchor.user_id.not_in(excluded))

        if tag:
            query = query.where(Anchor.tag_links.any(AnchorTag.tag == tag))

        if created_after is not None:
            query = query.where(Anchor.created_at >= created_after)

        if category == FeedCategory.RECENT:
            if cursor is not None:
                query = query.where(
                    or_(
                        Anchor.created_at < cursor.created_at,
                        and_(
                            Anchor.created_at == cursor.created_at,
                            Anchor.id < cursor.anchor_id,
                        ),
                    )
                )
            query = query.order_by(Anchor.created_at.desc(), Anchor.id.desc())
        else:
            if cursor is not None:
                query = query.where(
                    or_(
                        Anchor.engagement_score < cursor.score,
                        and_(
                            Anchor.engagement_score == cursor.score,
                            Anchor.created_at < cursor.created_at,
                        ),
                        and_(
                            Anchor.engagement_score == cursor.score,
                            Anchor.created_at == cursor.created_at,
                            Anchor.id < cursor.anchor_id,
                        ),
                    )
                )
            query = query.order_by(
                Anchor.engagement_score.desc(),
                Anchor.created_at.desc(),
                Anchor.id.desc(),
            )

        result = await self.session.execute(query.limit(limit))
        return list(result.scalars().all())

    # ═══════════════════════════════════════════════════════════════════════════
    # BATCH LOOKUPS
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_cloned_anchor_ids(self, user_id: UUID, anchor_ids: list[UUID]) -> set[UUID]:
        """Which of ``anchor_ids`` the user has a live clone of."""
        if not anchor_ids:
            return set()

        result = await self.session.execute(
            select(Anchor.cloned_from_anchor_id)
            .where(
                Anchor.user_id == user_id,
                Anchor.cloned_from_anchor_id.in_(anchor_ids),
                Anchor.deleted_at.is_(None),
            )
            .distinct()
        )
        return set(result.scalars().all())

    async def get_like_count(self, anchor_id: UUID) -> int:
        """Current like_count straight from the table."""
        result = await self.session.execute(select(Anchor.like_count).where(Anchor.id == anchor_id))
        return result.scalar_one_or_none() or 0

    # ═══════════════════════════════════════════════════════════════════════════
    # ATOMIC COUNTER UPDATES
    # ═══════════════════════════════════════════════════════════════════════════

    async def increment_version(self, anchor_id: UUID) -> Optional[int]:
        """
        Bump the anchor's content version by exactly one.

        Returns:
            The new version, or None if the anchor is gone

        SQL Generated:
            UPDATE anchors SET version = version + 1
            WHERE id = :id AND deleted_at IS NULL RETURNING version
        """
        result = await self.session.execute(
            update(Anchor)
            .where(Anchor.id == anchor_id, Anchor.deleted_at.is_(None))
            .values(version=Anchor.version + 1)
            .returning(Anchor.version)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one_or_none()

    async def adjust_like_count(self, anchor_id: UUID, delta: int) -> None:
        """Add ``delta`` to like_count, flooring at zero."""
        await self._adjust_counter(anchor_id, Anchor.like_count, delta)

    async def adjust_follower_count(self, anchor_id: UUID, delta: int) -> None:
        """Add ``delta`` to follower_count, flooring at zero."""
        await self._adjust_counter(anchor_id, Anchor.follower_count, delta)

    async def recompute_engagement_score(self, anchor_id: UUID) -> Optional[int]:
        """
        Recompute engagement_score from the current counters.

        Idempotent: running it twice gives the same score.

        SQL Generated:
            UPDATE anchors
            SET engagement_score = like_count * 2 + clone_count * 3 + comment_count * 1
            WHERE id = :id RETURNING engagement_score
        """
        result = await self.session.execute(
            update(Anchor)
            .where(Anchor.id == anchor_id)
            .values(
                engagement_score=(
                    Anchor.like_count * LIKE_WEIGHT
                    + Anchor.clone_count * CLONE_WEIGHT
                    + Anchor.comment_count * COMMENT_WEIGHT
                )
            )
            .returning(Anchor.engagement_score)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one_or_none()

    async def _adjust_counter(self, anchor_id: UUID, column, delta: int) -> None:
        new_value = column + delta
        await self.session.execute(
            update(Anchor)
            .where(Anchor.id == anchor_id)
            .values({column.key: case((new_value < 0, 0), else_=new_value)})
            .execution_options(synchronize_session=False)
        )
