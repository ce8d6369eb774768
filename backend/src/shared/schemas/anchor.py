"""
Anchor Schemas

Detail view and like action models.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from src.shared.models.enums import ItemType, LikeAction, Visibility
from src.shared.models.item import Item
from src.shared.schemas.common import BaseSchema
from src.shared.schemas.feed import AuthorSchema, EngagementSchema
from src.shared.services.anchor_service import AnchorDetail
from src.shared.services.like_service import LikeState


class ItemSchema(BaseSchema):
    """A full item in the detail view (only the payload of its type is set)."""

    id: UUID
    type: ItemType
    position: int
    url_data: Optional[dict[str, Any]] = None
    image_data: Optional[dict[str, Any]] = None
    audio_data: Optional[dict[str, Any]] = None
    file_data: Optional[dict[str, Any]] = None
    text_data: Optional[dict[str, Any]] = None
    created_at: datetime

    @classmethod
    def from_item(cls, item: Item) -> "ItemSchema":
        return cls.model_validate(item)


class AnchorDetailResponse(BaseSchema):
    """GET /anchors/{id}"""

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
    follower_count: int
    version: int
    last_item_added_at: datetime
    created_at: datetime
    updated_at: datetime
    author: AuthorSchema
    items: list[ItemSchema]
    engagement: EngagementSchema

    @classmethod
    def from_detail(cls, detail: AnchorDetail) -> "AnchorDetailResponse":
        anchor = detail.anchor
        return cls(
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
            follower_count=anchor.follower_count,
            version=anchor.version,
            last_item_added_at=anchor.last_item_added_at,
            created_at=anchor.created_at,
            updated_at=anchor.updated_at,
            author=AuthorSchema.from_user(detail.author),
            items=[ItemSchema.from_item(item) for item in detail.items],
            engagement=EngagementSchema.from_engagement(detail.engagement),
        )


class LikeRequest(BaseSchema):
    """POST /anchors/{id}/like"""

    action: LikeAction


class LikeResponse(BaseSchema):
    has_liked: bool
    like_count: int

    @classmethod
    def from_state(cls, state: LikeState) -> "LikeResponse":
        return cls(has_liked=state.has_liked, like_count=state.like_count)
