"""
Anchor Follow Service

Follow Version Tracker: who follows which anchor, which version of it they
last saw, and the background jobs that move both counters.

Version Model:
==============
    anchor.version               1 ──► 2 ──► 3 ──► 4 ──► 5    (+1 per content change)
    follow.last_seen_version                   3               (set on view)

    has_updates             = version > last_seen_version           → True
    updates_since_last_seen = max(0, version - last_seen_version)   → 2

The clamp keeps corrupted rows (last_seen_version > version) from ever
reporting a negative count.

Background Side Effects:
========================
┌─────────────────────────┬───────────────────────────────────────────────────┐
│ schedule_mark_seen()    │ MARK_SEEN job → raise last_seen_version to the    │
│   (anchor viewed)       │ anchor's current version, if the viewer follows   │
├─────────────────────────┼───────────────────────────────────────────────────┤
│ record_content_change() │ INCREMENT_VERSION job → version + 1, then notify  │
│   (items changed)       │ followers with notify_on_update (actor excluded)  │
└─────────────────────────┴───────────────────────────────────────────────────┘

Both are submitted to the task runner and never block or fail the caller.

Usage:
======
    tracker = FollowVersionTracker(db, runner)
    status = await tracker.get_follow_status(user_id, anchor_id)
    tracker.record_content_change(anchor_id, actor_id=user_id)
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Protocol
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import settings
from src.shared.core.exceptions import (
    AnchorNotFoundError,
    AuthorizationError,
    FollowNotFoundError,
    ValidationError,
)
from src.shared.core.logging import logger
from src.shared.models.anchor import Anchor
from src.shared.models.anchor_follow import AnchorFollow
from src.shared.models.enums import BackgroundJob, FollowingSort, Visibility
from src.shared.models.user import User
from src.shared.repositories.anchor_follow_repository import AnchorFollowRepository
from src.shared.repositories.anchor_repository import AnchorRepository
from src.shared.repositories.user_repository import UserRepository


class TaskSubmitter(Protocol):
    """Fire-and-forget job submission (implemented by BackgroundTaskRunner)."""

    def submit(self, job_type: BackgroundJob, **payload: Any) -> bool: ...


def compute_update_status(last_seen_version: int, current_version: int) -> tuple[bool, int]:
    """
    Update badge values for one follow.

    Returns:
        (has_updates, updates_since_last_seen), the count never negative
    """
    return current_version > last_seen_version, max(0, current_version - last_seen_version)


def clamp_list_limit(limit: Optional[int]) -> int:
    """Out-of-range list page sizes fall back to the default."""
    if limit is None or limit < 1 or limit > settings.LIST_MAX_LIMIT:
        return settings.LIST_DEFAULT_LIMIT
    return limit


def clamp_list_page(page: int) -> int:
    """Pages below 1 read page 1; pages past LIST_MAX_PAGE read the last allowed page."""
    return min(max(page, 1), settings.LIST_MAX_PAGE)


# ═══════════════════════════════════════════════════════════════════════════════
# RESULTS
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class FollowStatus:
    """The viewer's follow state for one anchor."""

    is_following: bool
    notify_on_update: bool
    has_updates: bool
    updates_since_last_seen: int
    last_seen_version: int
    current_version: int
    follower_count: int
    followed_at: Optional[datetime] = None


@dataclass
class FollowedAnchor:
    """One row of the "anchors I follow" list."""

    follow: AnchorFollow
    anchor: Anchor
    author: Optional[User]
    has_updates: bool
    updates_since_last_seen: int


@dataclass
class FollowedAnchorsPage:
    """Offset-paginated list of followed anchors."""

    items: list[FollowedAnchor]
    page: int
    limit: int
    total: int
    total_with_updates: int
    sort: FollowingSort
    total_pages: int = field(init=False)
    has_more: bool = field(init=False)

    def __post_init__(self) -> None:
        self.total_pages = math.ceil(self.total / self.limit) if self.total else 0
        self.has_more = self.page < self.total_pages


@dataclass
class ContentChange:
    """Outcome of one version increment, ready for notification fan-out."""

    anchor_id: UUID
    anchor_title: str
    author_id: UUID
    version: int
    recipient_ids: list[UUID]


# ═══════════════════════════════════════════════════════════════════════════════
# SERVICE
# ═══════════════════════════════════════════════════════════════════════════════


class FollowVersionTracker:
    """
    Service for anchor follows and version tracking.

    Handles:
    - Follow / unfollow / notification preference
    - Follow status with update badges
    - "Anchors I follow" listing
    - Background mark-seen and content-change jobs
    """

    def __init__(self, session: AsyncSession, tasks: Optional[TaskSubmitter] = None) -> None:
        """
        Initialize FollowVersionTracker.

        Args:
            session: Async database session
            tasks: Background runner; only needed by the schedule/record methods
        """
        self.session = session
        self.tasks = tasks
        self.anchor_repo = AnchorRepository(session)
        self.follow_repo = AnchorFollowRepository(session)
        self.user_repo = UserRepository(session)

    # ═══════════════════════════════════════════════════════════════════════════
    # FOLLOW STATE
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_follow_status(self, user_id: UUID, anchor_id: UUID) -> FollowStatus:
        """
        The user's follow state for an anchor.

        Raises:
            AnchorNotFoundError: Anchor missing or deleted
        """
        anchor = await self._get_anchor(anchor_id)
        follow = await self.follow_repo.get_follow(user_id, anchor_id)
        return self._build_status(anchor, follow)

    async def follow(
        self,
        user_id: UUID,
        anchor_id: UUID,
        notify_on_update: Optional[bool] = None,
    ) -> FollowStatus:
        """
        Follow an anchor, or update the notification flag of an existing follow.

        A new follow starts at the anchor's current version, so it shows no
        updates until the anchor changes again.

        Raises:
            AnchorNotFoundError: Anchor missing or deleted
            ValidationError: Following your own anchor
            AuthorizationError: Anchor is private
        """
        anchor = await self._get_anchor(anchor_id)
        if anchor.user_id == user_id:
            raise ValidationError("You cannot follow your own anchor", error_code="CANNOT_FOLLOW_OWN")
        if anchor.visibility == Visibility.PRIVATE:
            raise AuthorizationError("Private anchors cannot be followed")

        follow = await self.follow_repo.get_follow(user_id, anchor_id)
        created = False
        if follow is None:
            follow, created = await self.follow_repo.create_follow(
                user_id,
                anchor_id,
                notify_on_update=True if notify_on_update is None else notify_on_update,
                last_seen_version=anchor.version,
            )

        if not created:
            if notify_on_update is not None and follow.notify_on_update != notify_on_update:
                follow = await self.follow_repo.set_notify_on_update(follow, notify_on_update)
            return self._build_status(anchor, follow)

        await self.anchor_repo.adjust_follower_count(anchor_id, 1)
        await self.session.refresh(anchor)

        logger.info("Anchor followed", user_id=str(user_id), anchor_id=str(anchor_id))
        return self._build_status(anchor, follow)

    async def unfollow(self, user_id: UUID, anchor_id: UUID) -> FollowStatus:
        """Stop following an anchor. Unfollowing twice is not an error."""
        anchor = await self._get_anchor(anchor_id)

        if await self.follow_repo.delete_follow(user_id, anchor_id):
            await self.anchor_repo.adjust_follower_count(anchor_id, -1)
            await self.session.refresh(anchor)
            logger.info("Anchor unfollowed", user_id=str(user_id), anchor_id=str(anchor_id))

        return self._build_status(anchor, None)

    async def set_notifications(self, user_id: UUID, anchor_id: UUID, notify_on_update: bool) -> FollowStatus:
        """
        Toggle update notifications for an existing follow.

        Raises:
            FollowNotFoundError: The user does not follow the anchor
        """
        anchor = await self._get_anchor(anchor_id)
        follow = await self.follow_repo.get_follow(user_id, anchor_id)
        if follow is None:
            raise FollowNotFoundError(str(anchor_id))

        follow = await self.follow_repo.set_notify_on_update(follow, notify_on_update)
        return self._build_status(anchor, follow)

    async def list_following_anchors(
        self,
        user_id: UUID,
        *,
        page: int = 1,
        limit: Optional[int] = None,
        sort: FollowingSort = FollowingSort.STALE,
        only_with_updates: bool = False,
    ) -> FollowedAnchorsPage:
        """
        Page through the anchors a user follows.

        Args:
            user_id: The follower
            page: 1-based page number, clamped to 1..LIST_MAX_PAGE
            limit: Page size, clamped to the list default when out of range
            sort: Ordering, stale-first by default
            only_with_updates: Keep only anchors changed since last seen
        """
        page = clamp_list_page(page)
        limit = clamp_list_limit(limit)

        rows = await self.follow_repo.list_followed_anchors(
            user_id,
            sort=sort,
            offset=(page - 1) * limit,
            limit=limit,
            only_with_updates=only_with_updates,
        )
        total = await self.follow_repo.count_followed_anchors(user_id, only_with_updates=only_with_updates)
        total_with_updates = (
            total
            if only_with_updates
            else await self.follow_repo.count_followed_anchors(user_id, only_with_updates=True)
        )

        authors = await self.user_repo.get_map(list({anchor.user_id for _, anchor in rows}))

        items = []
        for follow, anchor in rows:
            has_updates, updates = compute_update_status(follow.last_seen_version, anchor.version)
            items.append(
                FollowedAnchor(
                    follow=follow,
                    anchor=anchor,
                    author=authors.get(anchor.user_id),
                    has_updates=has_updates,
                    updates_since_last_seen=updates,
                )
            )

        return FollowedAnchorsPage(
            items=items,
            page=page,
            limit=limit,
            total=total,
            total_with_updates=total_with_updates,
            sort=sort,
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # JOB BODIES (run by the background processor in their own session)
    # ═══════════════════════════════════════════════════════════════════════════

    async def mark_seen(self, user_id: UUID, anchor_id: UUID) -> bool:
        """
        Raise the viewer's last_seen_version to the anchor's current version.

        Returns:
            True if a follow record moved forward
        """
        anchor = await self.anchor_repo.get_active(anchor_id)
        if anchor is None:
            return False
        return await self.follow_repo.raise_last_seen_version(user_id, anchor_id, anchor.version)

    async def apply_content_change(self, anchor_id: UUID, actor_id: Optional[UUID]) -> Optional[ContentChange]:
        """
        Increment the anchor version and collect who should hear about it.

        Returns:
            The change, or None if the anchor no longer exists
        """
        version = await self.anchor_repo.increment_version(anchor_id)
        if version is None:
            logger.warning("Version increment skipped, anchor missing", anchor_id=str(anchor_id))
            return None

        anchor = await self.anchor_repo.get(anchor_id)
        recipients = await self.follow_repo.get_notification_recipients(anchor_id, exclude_user_id=actor_id)

        return ContentChange(
            anchor_id=anchor_id,
            anchor_title=anchor.title,
            author_id=anchor.user_id,
            version=version,
            recipient_ids=recipients,
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # SCHEDULING
    # ═══════════════════════════════════════════════════════════════════════════

    def schedule_mark_seen(self, user_id: UUID, anchor_id: UUID) -> bool:
        """Queue a MARK_SEEN job. Returns False if the job was dropped."""
        return self._submit(BackgroundJob.MARK_SEEN, user_id=str(user_id), anchor_id=str(anchor_id))

    def record_content_change(self, anchor_id: UUID, actor_id: Optional[UUID] = None) -> bool:
        """
        Hook for item add/remove/reorder: bump the version and notify followers.

        Returns:
            False if the job was dropped
        """
        return self._submit(
            BackgroundJob.INCREMENT_VERSION,
            anchor_id=str(anchor_id),
            actor_id=str(actor_id) if actor_id else None,
        )

    def _submit(self, job_type: BackgroundJob, **payload: Any) -> bool:
        if self.tasks is None:
            raise RuntimeError("FollowVersionTracker was created without a task runner")
        return self.tasks.submit(job_type, **payload)

    # ═══════════════════════════════════════════════════════════════════════════
    # HELPERS
    # ═══════════════════════════════════════════════════════════════════════════

    async def _get_anchor(self, anchor_id: UUID) -> Anchor:
        anchor = await self.anchor_repo.get_active(anchor_id)
        if anchor is None:
            raise AnchorNotFoundError(str(anchor_id))
        return anchor

    def _build_status(self, anchor: Anchor, follow: Optional[AnchorFollow]) -> FollowStatus:
        if follow is None:
            return FollowStatus(
                is_following=False,
                notify_on_update=False,
                has_updates=False,
                updates_since_last_seen=0,
                last_seen_version=0,
                current_version=anchor.version,
                follower_count=anchor.follower_count,
            )

        has_updates, updates = compute_update_status(follow.last_seen_version, anchor.version)
        return FollowStatus(
            is_following=True,
            notify_on_update=follow.notify_on_update,
            has_updates=has_updates,
            updates_since_last_seen=updates,
            last_seen_version=follow.last_seen_version,
            current_version=anchor.version,
            follower_count=anchor.follower_count,
            followed_at=follow.created_at,
        )
