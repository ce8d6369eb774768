"""
Engagement Service

Per-viewer social context for a page of anchors: has the viewer liked or
cloned each anchor, and who liked it.

Batching:
=========
A page of N anchors costs a fixed number of queries, not N of them:

    1. liked set      likes WHERE user = viewer AND anchor IN (page)
    2. cloned set     anchors WHERE user = viewer AND cloned_from IN (page)
    3. recent likers  top 20 likers per anchor (window function), skipping
                      anchors whose like_count is 0
    4. followed set   which of those likers the viewer follows
    5. profiles       the (at most 3 per anchor) likers actually shown

Any failure propagates and fails the whole page. A page where some items
carry engagement and others silently do not is worse than an error.

Like Summary:
=============
    recent likers (newest first, up to 20)   [u1, u2*, u3, u4*, u5 ...]   (* followed)

    anonymous viewer            → [u1, u2, u3]           (most recent)
    feed, signed-in viewer      → [u2, u4]               (followed likers only)
    detail, signed-in viewer    → [u2, u4, u1]           (followed first, then others)

    other_likers_count = max(0, total_like_count - shown)

An anchor with like_count == 0 gets the empty summary without touching
the likes table.

Collaborators:
==============
The service depends on the narrow provider protocols below, not on
concrete repositories, so each lookup can be swapped or faked on its own.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Protocol, Sequence
from uuid import UUID

from src.config.settings import settings
from src.shared.core.logging import logger
from src.shared.models.anchor import Anchor
from src.shared.models.user import User


# ═══════════════════════════════════════════════════════════════════════════════
# PROVIDER PROTOCOLS
# ═══════════════════════════════════════════════════════════════════════════════


class LikeStatusProvider(Protocol):
    """Like lookups (implemented by LikeRepository)."""

    async def get_liked_anchor_ids(self, user_id: UUID, anchor_ids: list[UUID]) -> set[UUID]: ...

    async def get_recent_liker_ids(
        self, anchor_ids: list[UUID], per_anchor: int
    ) -> dict[UUID, list[UUID]]: ...


class CloneStatusProvider(Protocol):
    """Clone lookups (implemented by AnchorRepository)."""

    async def get_cloned_anchor_ids(self, user_id: UUID, anchor_ids: list[UUID]) -> set[UUID]: ...


class FollowSetProvider(Protocol):
    """Followed-user lookups (implemented by UserFollowRepository)."""

    async def get_followed_subset(self, user_id: UUID, candidate_ids: Iterable[UUID]) -> set[UUID]: ...


class ProfileProvider(Protocol):
    """Batch user profile lookups (implemented by UserRepository)."""

    async def get_map(self, ids: list[UUID]) -> dict[UUID, User]: ...


# ═══════════════════════════════════════════════════════════════════════════════
# RESULTS
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class LikeSummary:
    """Who liked an anchor, as shown to one viewer."""

    total_count: int = 0
    liked_by_following: list[User] = field(default_factory=list)
    other_likers_count: int = 0


@dataclass
class Engagement:
    """Viewer-specific engagement for one anchor."""

    has_liked: bool = False
    has_cloned: bool = False
    like_summary: LikeSummary = field(default_factory=LikeSummary)


def select_shown_likers(
    recent_liker_ids: Sequence[UUID],
    followed_ids: set[UUID],
    *,
    authenticated: bool,
    include_strangers: bool,
    shown: int,
) -> list[UUID]:
    """
    Pick the likers named in a like summary.

    Args:
        recent_liker_ids: Most recent likers, newest first
        followed_ids: Users the viewer follows (may contain extra ids)
        authenticated: False for anonymous viewers
        include_strangers: Fill remaining slots with likers the viewer
            does not follow (detail view) instead of leaving them empty (feed)
        shown: Maximum number of likers to name
    """
    if not authenticated:
        return list(recent_liker_ids[:shown])

    followed = [user_id for user_id in recent_liker_ids if user_id in followed_ids]
    if not include_strangers:
        return followed[:shown]

    others = [user_id for user_id in recent_liker_ids if user_id not in followed_ids]
    return (followed + others)[:shown]


# ═══════════════════════════════════════════════════════════════════════════════
# SERVICE
# ═══════════════════════════════════════════════════════════════════════════════


class EngagementService:
    """
    Batched engagement enrichment.

    Handles:
    - hasLiked / hasCloned set membership for the viewer
    - Like summaries with followed-first prioritization
    """

    def __init__(
        self,
        likes: LikeStatusProvider,
        clones: CloneStatusProvider,
        follows: FollowSetProvider,
        profiles: ProfileProvider,
        *,
        sample_size: int = settings.LIKE_SUMMARY_SAMPLE_SIZE,
        shown: int = settings.LIKE_SUMMARY_SHOWN,
    ) -> None:
        self.likes = likes
        self.clones = clones
        self.follows = follows
        self.profiles = profiles
        self.sample_size = sample_size
        self.shown = shown

    async def enrich(
        self,
        anchors: Sequence[Anchor],
        viewer_id: Optional[UUID],
        *,
        include_strangers: bool = False,
    ) -> dict[UUID, Engagement]:
        """
        Engagement for every anchor on a page.

        Args:
            anchors: The page, in any order
            viewer_id: None for anonymous viewers
            include_strangers: See select_shown_likers()

        Returns:
            anchor_id → Engagement, one entry per input anchor
        """
        anchor_ids = [anchor.id for anchor in anchors]
        if not anchor_ids:
            return {}

        liked: set[UUID] = set()
        cloned: set[UUID] = set()
        if viewer_id is not None:
            liked = await self.likes.get_liked_anchor_ids(viewer_id, anchor_ids)
            cloned = await self.clones.get_cloned_anchor_ids(viewer_id, anchor_ids)

        summaries = await self._build_like_summaries(anchors, viewer_id, include_strangers)

        logger.debug(
            "Engagement enriched",
            anchors=len(anchor_ids),
            viewer_id=str(viewer_id) if viewer_id else None,
        )

        return {
            anchor.id: Engagement(
                has_liked=anchor.id in liked,
                has_cloned=anchor.id in cloned,
                like_summary=summaries.get(anchor.id, LikeSummary()),
            )
            for anchor in anchors
        }

    async def _build_like_summaries(
        self,
        anchors: Sequence[Anchor],
        viewer_id: Optional[UUID],
        include_strangers: bool,
    ) -> dict[UUID, LikeSummary]:
        liked_anchors = [anchor for anchor in anchors if anchor.like_count > 0]
        if not liked_anchors:
            return {}

        recent_likers = await self.likes.get_recent_liker_ids(
            [anchor.id for anchor in liked_anchors], self.sample_size
        )

        followed: set[UUID] = set()
        if viewer_id is not None:
            all_likers = {user_id for likers in recent_likers.values() for user_id in likers}
            followed = await self.follows.get_followed_subset(viewer_id, all_likers)

        shown_ids = {
            anchor.id: select_shown_likers(
                recent_likers.get(anchor.id, []),
                followed,
                authenticated=viewer_id is not None,
                include_strangers=include_strangers,
                shown=self.shown,
            )
            for anchor in liked_anchors
        }

        wanted_profiles = {user_id for ids in shown_ids.values() for user_id in ids}
        profiles = await self.profiles.get_map(list(wanted_profiles)) if wanted_profiles else {}

        summaries: dict[UUID, LikeSummary] = {}
        for anchor in liked_anchors:
            # Likers whose account is gone are dropped from the names
            users = [profiles[user_id] for user_id in shown_ids[anchor.id] if user_id in profiles]
            summaries[anchor.id] = LikeSummary(
                total_count=anchor.like_count,
                liked_by_following=users,
                other_likers_count=max(0, anchor.like_count - len(users)),
            )
        return summaries
