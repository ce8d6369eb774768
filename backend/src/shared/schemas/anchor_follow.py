"""
Anchor Follow Schemas

Request and response models for anchor follows and the "anchors I follow" list.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from src.shared.models.enums import FollowAction, FollowingSort, Visibility
from src.shared.schemas.common import BaseSchema, PaginatedResponse, PaginationMeta
from src.shared.schemas.feed import AuthorSchema
from src.shared.services.anchor_follow_service import FollowedAnchor, FollowedAnchorsPage, FollowStatus


class FollowRequest(BaseSchema):
    """POST /anchors/{id}/follow"""

    action: FollowAction
    notify_on_update: Optional[bool] = None


class NotificationPreferenceRequest(BaseSchema):
    """PATCH /anchors/{id}/follow/notifications"""

    notify_on_update: bool


class FollowResponse(BaseSchema):
    """Result of a follow / unfollow / preference change."""

    is_following: bool
    notify_on_update: bool
    follower_count: int

    @classmethod
    def from_status(cls, status: FollowStatus) -> "FollowResponse":
        return cls(
            is_following=status.is_following,
            notify_on_update=status.notify_on_update,
            follower_count=status.follower_count,
        )


class FollowStatusResponse(BaseSchema):
    """GET /anchors/{id}/follow/status"""

    is_following: bool
    notify_on_update: bool
    has_updates: bool
    updates_since_last_seen: int
    last_seen_version: int
    current_version: int
    followed_at: Optional[datetime] = None

    @classmethod
    def from_status(cls, status: FollowStatus) -> "FollowStatusResponse":
        return cls(
            is_following=status.is_following,
            notify_on_update=status.notify_on_update,
            has_updates=status.has_updates,
            updates_since_last_seen=status.updates_since_last_seen,
            last_seen_version=status.last_seen_version,
            current_version=status.current_version,
            followed_at=status.followed_at,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# FOLLOWING ANCHORS LIST
# ═══════════════════════════════════════════════════════════════════════════════


class FollowingAnchorItem(BaseSchema):
    id: UUID
    title: str
    description: Optional[str] = None
    visibility: Visibility
    item_count: int
    like_count: int
    follower_count: int
    tags: list[str]
    has_updates: bool
    updates_since_last_seen: int
    current_version: int
    last_seen_version: int
    last_item_added_at: datetime
    notify_on_update: bool
    followed_at: datetime
    author: AuthorSchema

    @classmethod
    def from_followed(cls, row: FollowedAnchor) -> "FollowingAnchorItem":
        anchor, follow = row.anchor, row.follow
        return cls(
            id=anchor.id,
            title=anchor.title,
            description=anchor.description,
            visibility=anchor.visibility,
            item_count=anchor.item_count,
            like_count=anchor.like_count,
            follower_count=anchor.follower_count,
            tags=anchor.tags,
            has_updates=row.has_updates,
            updates_since_last_seen=row.updates_since_last_seen,
            current_version=anchor.version,
            last_seen_version=follow.last_seen_version,
            last_item_added_at=anchor.last_item_added_at,
            notify_on_update=follow.notify_on_update,
            followed_at=follow.created_at,
            author=AuthorSchema.from_user(row.author),
        )


class FollowingAnchorsMeta(BaseSchema):
    sort: FollowingSort
    total_with_updates: int


class FollowingAnchorsResponse(PaginatedResponse[FollowingAnchorItem]):
    """GET /users/me/following-anchors"""

    meta: FollowingAnchorsMeta

    @classmethod
    def from_page(cls, page: FollowedAnchorsPage) -> "FollowingAnchorsResponse":
        return cls(
            data=[FollowingAnchorItem.from_followed(row) for row in page.items],
            pagination=PaginationMeta.create(page=page.page, limit=page.limit, total=page.total),
            meta=FollowingAnchorsMeta(sort=page.sort, total_with_updates=page.total_with_updates),
        )
