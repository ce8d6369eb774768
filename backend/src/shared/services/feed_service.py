"""
Feed Service

Composes the following feed, the discovery feed and the tag feed.

Page Pipeline:
==============
┌─────────────────────────────────────────────────────────────────────────────┐
│  1. Decode cursor            invalid token → InvalidCursorError (no SQL)    │
│  2. Candidate set            following ids / exclusion set, minus blocked   │
│  3. Range scan               LIMIT page + 1 rows in strict sort order       │
│  4. Trim                     extra row present → has_more, next_cursor      │
│  5. Enrich (batched)         authors, engagement, previews                  │
│  6. Empty reason             only when the page has no entries              │
└─────────────────────────────────────────────────────────────────────────────┘

Empty Reasons:
==============
    following   no authors at all              → NO_FOLLOWING
                no rows, cursor supplied       → END_OF_FEED
                no rows, first page            → NO_CONTENT

    discover    no rows, tag filter active     → NO_TAG_CONTENT
                no rows, cursor supplied       → END_OF_FEED
                no rows, first page            → NO_CONTENT

Usage:
======
    service = FeedService(db)
    page = await service.get_following_feed(viewer_id, limit=20, cursor=token)
    page.entries, page.has_more, page.next_cursor
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import settings
from src.shared.core.logging import logger
from src.shared.models.anchor import Anchor
from src.shared.models.enums import EmptyReason, FeedCategory, FeedType
from src.shared.models.user import User
from src.shared.repositories.anchor_repository import AnchorRepository
from src.shared.repositories.item_repository import ItemRepository
from src.shared.repositories.like_repository import LikeRepository
from src.shared.repositories.user_block_repository import UserBlockRepository
from src.shared.repositories.user_follow_repository import UserFollowRepository
from src.shared.repositories.user_repository import UserRepository
from src.shared.services.engagement_service import Engagement, EngagementService
from src.shared.services.preview_service import PreviewExtractor, PreviewItem
from src.shared.utils.cursor import (
    decode_discover_cursor,
    decode_following_cursor,
    encode_discover_cursor,
    encode_following_cursor,
)


@dataclass
class FeedEntry:
    """One enriched anchor on a feed page."""

    anchor: Anchor
    author: Optional[User]
    engagement: Engagement
    preview: list[PreviewItem] = field(default_factory=list)


@dataclass
class FeedPage:
    """A page of any feed, with the metadata the response envelope needs."""

    entries: list[FeedEntry]
    limit: int
    has_more: bool
    feed_type: FeedType
    next_cursor: Optional[str] = None
    category: Optional[FeedCategory] = None
    tag: Optional[str] = None
    is_authenticated: bool = False
    includes_own_anchors: Optional[bool] = None
    total_following: Optional[int] = None
    empty_reason: Optional[EmptyReason] = None


class FeedService:
    """
    Service for feed composition.

    Handles:
    - Following feed (keyset on last_item_added_at, id)
    - Discovery feed per category, with optional tag filter
    - Batched enrichment of every returned page
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize FeedService.

        Args:
            session: Async database session
        """
        self.session = session
        self.anchor_repo = AnchorRepository(session)
        self.user_repo = UserRepository(session)
        self.follow_repo = UserFollowRepository(session)
        self.block_repo = UserBlockRepository(session)
        self.engagement = EngagementService(
            likes=LikeRepository(session),
            clones=self.anchor_repo,
            follows=self.follow_repo,
            profiles=self.user_repo,
        )
        self.previews = PreviewExtractor(ItemRepository(session))

    # ═══════════════════════════════════════════════════════════════════════════
    # FOLLOWING FEED
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_following_feed(
        self,
        viewer_id: UUID,
        *,
        limit: int = settings.FEED_DEFAULT_LIMIT,
        cursor: Optional[str] = None,
        include_own: bool = True,
    ) -> FeedPage:
        """
        Anchors from users the viewer follows, newest content first.

        Args:
            viewer_id: Authenticated viewer
            limit: Page size (already validated)
            cursor: Token from the previous page, if any
            include_own: Also show the viewer's own anchors

        Raises:
            InvalidCursorError: Malformed cursor or one issued by another feed
        """
        decoded = decode_following_cursor(cursor)

        following_ids = set(await self.follow_repo.get_following_ids(viewer_id))
        following_ids -= await self.block_repo.get_blocked_user_ids(viewer_id)
        author_ids = set(following_ids)
        if include_own:
            author_ids.add(viewer_id)

        if not author_ids:
            return FeedPage(
                entries=[],
                limit=limit,
                has_more=False,
                feed_type=FeedType.FOLLOWING,
                is_authenticated=True,
                includes_own_anchors=include_own,
                total_following=0,
                empty_reason=EmptyReason.NO_FOLLOWING,
            )

        rows = await self.anchor_repo.get_following_feed_page(author_ids, decoded, limit + 1)
        has_more = len(rows) > limit
        anchors = rows[:limit]

        next_cursor = None
        if has_more:
            last = anchors[-1]
            next_cursor = encode_following_cursor(last.last_item_added_at, last.id)

        empty_reason = None
        if not anchors:
            empty_reason = EmptyReason.END_OF_FEED if decoded else EmptyReason.NO_CONTENT

        logger.info(
            "Following feed served",
            viewer_id=str(viewer_id),
            authors=len(author_ids),
            items=len(anchors),
            has_more=has_more,
        )

        return FeedPage(
            entries=await self._enrich(anchors, viewer_id),
            limit=limit,
            has_more=has_more,
            next_cursor=next_cursor,
            feed_type=FeedType.FOLLOWING,
            is_authenticated=True,
            includes_own_anchors=include_own,
            total_following=len(following_ids),
            empty_reason=empty_reason,
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # DISCOVERY
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_discover_feed(
        self,
        viewer_id: Optional[UUID],
        *,
        category: FeedCategory = FeedCategory.TRENDING,
        limit: int = settings.FEED_DEFAULT_LIMIT,
        cursor: Optional[str] = None,
        tag: Optional[str] = None,
        feed_type: FeedType = FeedType.DISCOVER,
    ) -> FeedPage:
        """
        Public anchors from people the viewer does not follow.

        Args:
            viewer_id: None for anonymous viewers (no exclusion set)
            category: trending (48h window), popular or recent
            limit: Page size (already validated)
            cursor: Token from the previous page of the same category
            tag: Normalized tag filter
            feed_type: Reported in the page metadata

        Raises:
            InvalidCursorError: Malformed cursor or one issued for another category
        """
        decoded = decode_discover_cursor(cursor, category)

        excluded: set[UUID] = set()
        if viewer_id is not None:
            excluded.add(viewer_id)
            excluded.update(await self.follow_repo.get_following_ids(viewer_id))
            excluded |= await self.block_repo.get_blocked_user_ids(viewer_id)

        created_after = None
        if category == FeedCategory.TRENDING:
            created_after = datetime.now(timezone.utc) - timedelta(hours=settings.TRENDING_WINDOW_HOURS)

        rows = await self.anchor_repo.get_discover_page(
            category=category,
            cursor=decoded,
            limit=limit + 1,
            exclude_user_ids=excluded,
            tag=tag,
            created_after=created_after,
        )
        has_more = len(rows) > limit
        anchors = rows[:limit]

        next_cursor = None
        if has_more:
            last = anchors[-1]
            next_cursor = encode_discover_cursor(
                category,
                last.created_at,
                last.id,
                score=None if category == FeedCategory.RECENT else last.engagement_score,
            )

        empty_reason = None
        if not anchors:
            if tag:
                empty_reason = EmptyReason.NO_TAG_CONTENT
            elif decoded:
                empty_reason = EmptyReason.END_OF_FEED
            else:
                empty_reason = EmptyReason.NO_CONTENT

        logger.info(
            "Discover feed served",
            viewer_id=str(viewer_id) if viewer_id else None,
            category=category.value,
            tag=tag,
            excluded=len(excluded),
            items=len(anchors),
            has_more=has_more,
        )

        return FeedPage(
            entries=await self._enrich(anchors, viewer_id),
            limit=limit,
            has_more=has_more,
            next_cursor=next_cursor,
            feed_type=feed_type,
            category=category,
            tag=tag,
            is_authenticated=viewer_id is not None,
            empty_reason=empty_reason,
        )

    async def get_tag_feed(
        self,
        viewer_id: Optional[UUID],
        tag: str,
        *,
        limit: int = settings.FEED_DEFAULT_LIMIT,
        cursor: Optional[str] = None,
    ) -> FeedPage:
        """Most engaging public anchors carrying ``tag``."""
        return await self.get_discover_feed(
            viewer_id,
            category=FeedCategory.POPULAR,
            limit=limit,
            cursor=cursor,
            tag=tag,
            feed_type=FeedType.TAG,
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # ENRICHMENT
    # ═══════════════════════════════════════════════════════════════════════════

    async def _enrich(self, anchors: list[Anchor], viewer_id: Optional[UUID]) -> list[FeedEntry]:
        if not anchors:
            return []

        authors = await self.user_repo.get_map(list({anchor.user_id for anchor in anchors}))
        engagement = await self.engagement.enrich(anchors, viewer_id)
        previews = await self.previews.get_previews([anchor.id for anchor in anchors])

        return [
            FeedEntry(
                anchor=anchor,
                author=authors.get(anchor.user_id),
                engagement=engagement[anchor.id],
                preview=previews.get(anchor.id, []),
            )
            for anchor in anchors
        ]
