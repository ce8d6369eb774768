"""
Feed Schemas

Query and response models for /feed.

Query Validation:
=================
    limit      omitted → 20; supplied outside 1..50 → INVALID_QUERY
    category   trending | popular | recent (default trending)
    tag        trimmed and lower-cased; "" → no filter;
               shorter than 2 or longer than 30 characters → INVALID_QUERY
    cursor     opaque; decoded by the service

Response Envelope:
==================
    {
        "items": [...],
        "pagination": {"limit": 20, "hasMore": true, "nextCursor": "eyJr...", "itemCount": 20},
        "meta": {"feedType": "discover", "category": "popular", "isAuthenticated": false}
    }

Null fields are left out of the response (endpoints set
response_model_exclude_none), so nextCursor appears only when hasMore
is true and preview fragments carry only the keys that apply.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from src.config.settings import settings
from src.shared.models.enums import EmptyReason, FeedCategory, FeedType, ItemType, Visibility
from src.shared.models.user import User
from src.shared.schemas.common import BaseSchema
from src.shared.services.engagement_service import Engagement
from src.shared.services.feed_service import FeedEntry, FeedPage


def normalize_tag(value: Optional[str]) -> Optional[str]:
    """
    Canonical form of a tag filter.

    Returns:
        The lower-cased tag, or None when empty

    Raises:
        ValueError: Tag length outside TAG_MIN_LENGTH..TAG_MAX_LENGTH
    """
    if value is None:
        return None

    tag = value.strip().lower()
    if not tag:
        return None
    if len(tag) < settings.TAG_MIN_LENGTH or len(tag) > settings.TAG_MAX_LENGTH:
        raise ValueError(
            f"tag must be between {settings.TAG_MIN_LENGTH} and {settings.TAG_MAX_LENGTH} characters"
        )
    return tag


# ═══════════════════════════════════════════════════════════════════════════════
# QUERIES
# ═══════════════════════════════════════════════════════════════════════════════


class FeedQuery(BaseSchema):
    """Parameters shared by every feed."""

    limit: int = Field(default=settings.FEED_DEFAULT_LIMIT, ge=1, le=settings.FEED_MAX_LIMIT)
    cursor: Optional[str] = None


class FollowingFeedQuery(FeedQuery):
    """GET /feed/following"""

    include_own: bool = True


class DiscoverFeedQuery(FeedQuery):
    """GET /feed/discover"""

    category: FeedCategory = FeedCategory.TRENDING
    tag: Optional[str] = None

    @field_validator("tag")
    @classmethod
    def _normalize_tag(cls, value: Optional[str]) -> Optional[str]:
        return normalize_tag(value)


class TagFeedQuery(FeedQuery):
    """GET /feed/tags/{tag}"""

    tag: str

    @field_validator("tag")
    @classmethod
    def _normalize_tag(cls, value: str) -> str:
        tag = normalize_tag(value)
        if tag is None:
            raise ValueError("tag is required")
        return tag


# ═══════════════════════════════════════════════════════════════════════════════
# ITEM PARTS
# ═══════════════════════════════════════════════════════════════════════════════


class AuthorSchema(BaseSchema):
    """Anchor author as shown on a feed card."""

    id: Optional[UUID] = None
    username: str
    display_name: str
    profile_picture: Optional[str] = None
    is_verified: bool = False
    follower_count: Optional[int] = None

    @classmethod
    def from_user(cls, user: Optional[User], include_follower_count: bool = False) -> "AuthorSchema":
        if user is None:
            return cls(
                username="unknown",
                display_name="Deleted User",
                follower_count=0 if include_follower_count else None,
            )
        return cls(
            id=user.id,
            username=user.username,
            display_name=user.display_name,
            profile_picture=user.profile_picture_url or None,
            is_verified=user.is_verified,
            follower_count=user.follower_count if include_follower_count else None,
        )


class LikerSchema(BaseSchema):
    """A user named in a like summary."""

    id: UUID
    username: str
    display_name: str
    profile_picture: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "LikerSchema":
        return cls(
            id=user.id,
            username=user.username,
            display_name=user.display_name,
            profile_picture=user.profile_picture_url or None,
        )


class LikeSummarySchema(BaseSchema):
    total_count: int = 0
    liked_by_following: list[LikerSchema] = Field(default_factory=list)
    other_likers_count: int = 0


class EngagementSchema(BaseSchema):
    """The viewer's engagement with one anchor."""

    has_liked: bool = False
    has_cloned: bool = False
    like_summary: LikeSummarySchema = Field(default_factory=LikeSummarySchema)

    @classmethod
    def from_engagement(cls, engagement: Engagement) -> "EngagementSchema":
        summary = engagement.like_summary
        return cls(
            has_liked=engagement.has_liked,
            has_cloned=engagement.has_cloned,
            like_summary=LikeSummarySchema(
                total_count=summary.total_count,
                liked_by_following=[LikerSchema.from_user(user) for user in summary.liked_by_following],
                other_likers_count=summary.other_likers_count,
            ),
        )


class PreviewItemSchema(BaseSchema):
    type: ItemType
    thumbnail: Optional[str] = None
    title: Optional[str] = None
    snippet: Optional[str] = None


class PreviewSchema(BaseSchema):
    items: list[PreviewItemSchema] = Field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════════
# RESPONSE
# ═══════════════════════════════════════════════════════════════════════════════


class FeedItemSchema(BaseSchema):
    """One anchor card."""

    id: UUID
    title: str
    description: Optional[str] = None
    cover_media_type: Optional[str] = None
    cover_media_value: Optional[str] = None
    visibility: Visibility
    is_pinned: bool
    tags: list[str]
    item_count: int
    like_count: int
    clone_count: int
    comment_count: int
    engagement_score: Optional[int] = None
    last_item_added_at: datetime
    created_at: datetime
    author: AuthorSchema
    engagement: EngagementSchema
    preview: PreviewSchema


class FeedPagination(BaseSchema):
    limit: int
    has_more: bool
    next_cursor: Optional[str] = None
    item_count: int


class FeedMeta(BaseSchema):
    feed_type: FeedType
    category: Optional[FeedCategory] = None
    tag: Optional[str] = None
    is_authenticated: Optional[bool] = None
    includes_own_anchors: Optional[bool] = None
    total_following: Optional[int] = None
    empty_reason: Optional[EmptyReason] = None


class FeedResponse(BaseSchema):
    """Response envelope shared by every feed."""

    items: list[FeedItemSchema]
    pagination: FeedPagination
    meta: FeedMeta

    @classmethod
    def from_page(cls, page: FeedPage) -> "FeedResponse":
        discovery = page.feed_type != FeedType.FOLLOWING
        return cls(
            items=[_build_item(entry, discovery) for entry in page.entries],
            pagination=FeedPagination(
                limit=page.limit,
                has_more=page.has_more,
                next_cursor=page.next_cursor if page.has_more else None,
                item_count=len(page.entries),
            ),
            meta=FeedMeta(
                feed_type=page.feed_type,
                category=page.category,
                tag=page.tag,
                is_authenticated=page.is_authenticated,
                includes_own_anchors=page.includes_own_anchors,
                total_following=page.total_following,
                empty_reason=page.empty_reason,
            ),
        )


def _build_item(entry: FeedEntry, discovery: bool) -> FeedItemSchema:
    anchor = entry.anchor
    return FeedItemSchema(
        id=anchor.id,
        title=anchor.title,
        description=anchor.description,
        cover_media_type=anchor.cover_media_type,
        cover_media_value=anchor.cover_media_value,
        visibility=anchor.visibility,
        is_pinned=anchor.is_pinned,
        tags=anchor.tags,
        item_count=anchor.item_count,
        like_count=anchor.like_count,
        clone_count=anchor.clone_count,
        comment_count=anchor.comment_count,
        engagement_score=anchor.engagement_score if discovery else None,
        last_item_added_at=anchor.last_item_added_at,
        created_at=anchor.created_at,
        author=AuthorSchema.from_user(entry.author, include_follower_count=discovery),
        engagement=EngagementSchema.from_engagement(entry.engagement),
        preview=PreviewSchema(
            items=[
                PreviewItemSchema(
                    type=item.type,
                    thumbnail=item.thumbnail,
                    title=item.title,
                    snippet=item.snippet,
                )
                for item in entry.preview
            ]
        ),
    )
