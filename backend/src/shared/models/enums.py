"""
Enums used across the application.
"""

from enum import Enum


class Visibility(str, Enum):
    """
    Who can see an anchor.

    - PRIVATE: owner only, never in any feed
    - UNLISTED: in followers' following feed, never in discovery
    - PUBLIC: everywhere
    """

    PRIVATE = "private"
    UNLISTED = "unlisted"
    PUBLIC = "public"


class ItemType(str, Enum):
    """Content variant stored in an anchor item."""

    URL = "url"
    IMAGE = "image"
    AUDIO = "audio"
    FILE = "file"
    TEXT = "text"


class FeedCategory(str, Enum):
    """Ranking policy for the discovery feed."""

    TRENDING = "trending"
    POPULAR = "popular"
    RECENT = "recent"


class FeedType(str, Enum):
    """Which feed produced a page (reported in meta.feedType)."""

    FOLLOWING = "following"
    DISCOVER = "discover"
    TAG = "tag"


class EmptyReason(str, Enum):
    """
    Why a feed page came back empty.

    An empty page is a successful response, never an error.
    """

    NO_FOLLOWING = "NO_FOLLOWING"
    NO_CONTENT = "NO_CONTENT"
    END_OF_FEED = "END_OF_FEED"
    NO_TAG_CONTENT = "NO_TAG_CONTENT"


class FollowingSort(str, Enum):
    """Sort orders for the list of anchors a user follows."""

    STALE = "stale"  # lastSeenVersion ascending
    RECENT = "recent"  # followed most recently first
    UPDATED = "updated"  # anchor content changed most recently first
    ALPHABETICAL = "alphabetical"


class FollowAction(str, Enum):
    """Body action for the anchor follow endpoint."""

    FOLLOW = "follow"
    UNFOLLOW = "unfollow"


class LikeAction(str, Enum):
    """Body action for the anchor like endpoint."""

    LIKE = "like"
    UNLIKE = "unlike"


class BackgroundJob(str, Enum):
    """Side-effect jobs handled by the background task runner."""

    MARK_SEEN = "mark_seen"
    INCREMENT_VERSION = "increment_version"
    RECOMPUTE_ENGAGEMENT = "recompute_engagement"
