"""
Anchor SQLAlchemy Models

This package contains all database models read or written by the feed service.

Model Hierarchy:
================
    User
       ├── UserFollow (follower_id / following_id)   ← following feed author set
       ├── UserBlock  (blocker_id / blocked_id)      ← excluded from every feed
       └── Anchor (user_id)
              ├── AnchorTag (anchor_id, tag)         ← tag feed filter
              ├── Item (anchor_id, position)         ← feed previews
              ├── Like (anchor_id, user_id)          ← hasLiked, like summaries
              └── AnchorFollow (anchor_id, user_id)  ← version tracking

Usage:
======
    from src.shared.models import Anchor, AnchorFollow, Visibility

    query = select(Anchor).where(Anchor.visibility == Visibility.PUBLIC)
"""

from src.shared.models.base import Base, TimestampMixin, SoftDeleteMixin, utc_now
from src.shared.models.enums import (
    Visibility,
    ItemType,
    FeedCategory,
    FeedType,
    EmptyReason,
    FollowingSort,
    FollowAction,
    LikeAction,
    BackgroundJob,
)
from src.shared.models.user import User
from src.shared.models.anchor import Anchor
from src.shared.models.anchor_tag import AnchorTag
from src.shared.models.item import Item
from src.shared.models.user_follow import UserFollow
from src.shared.models.user_block import UserBlock
from src.shared.models.anchor_follow import AnchorFollow
from src.shared.models.like import Like

__all__ = [
    # Base classes and mixins
    "Base",
    "TimestampMixin",
    "SoftDeleteMixin",
    "utc_now",
    # Enums
    "Visibility",
    "ItemType",
    "FeedCategory",
    "FeedType",
    "EmptyReason",
    "FollowingSort",
    "FollowAction",
    "LikeAction",
    "BackgroundJob",
    # Models
    "User",
    "Anchor",
    "AnchorTag",
    "Item",
    "UserFollow",
    "UserBlock",
    "AnchorFollow",
    "Like",
]
