"""
Pydantic Schemas

Request and response models for the API.

Schema Categories:
==================
- common: Base schema, pagination, error responses
- feed: Feed queries and the shared feed envelope
- anchor: Anchor detail and like action
- anchor_follow: Anchor follows and the following-anchors list

Usage:
======
    from src.shared.schemas.feed import DiscoverFeedQuery, FeedResponse
    from src.shared.schemas.common import ErrorResponse
"""

from src.shared.schemas.common import (
    BaseSchema,
    PaginationMeta,
    PaginatedResponse,
    ErrorDetail,
    ErrorResponse,
    HealthResponse,
    ReadinessResponse,
)
from src.shared.schemas.feed import (
    normalize_tag,
    FollowingFeedQuery,
    DiscoverFeedQuery,
    TagFeedQuery,
    FeedResponse,
)
from src.shared.schemas.anchor import (
    AnchorDetailResponse,
    LikeRequest,
    LikeResponse,
)
from src.shared.schemas.anchor_follow import (
    FollowRequest,
    NotificationPreferenceRequest,
    FollowResponse,
    FollowStatusResponse,
    FollowingAnchorsResponse,
)

__all__ = [
    # Common
    "BaseSchema",
    "PaginationMeta",
    "PaginatedResponse",
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    "ReadinessResponse",
    # Feed
    "normalize_tag",
    "FollowingFeedQuery",
    "DiscoverFeedQuery",
    "TagFeedQuery",
    "FeedResponse",
    # Anchor
    "AnchorDetailResponse",
    "LikeRequest",
    "LikeResponse",
    # Anchor follows
    "FollowRequest",
    "NotificationPreferenceRequest",
    "FollowResponse",
    "FollowStatusResponse",
    "FollowingAnchorsResponse",
]
