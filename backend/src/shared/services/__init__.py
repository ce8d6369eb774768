"""
Business Logic Services

Services encapsulate feed composition and engagement rules and coordinate
between repositories and the background task runner.

Service Pattern:
================
    Handler → Service → Repository → Database
                ↘ BackgroundTaskRunner (side effects)

Services should:
- Contain business logic and validation
- Coordinate multiple repositories if needed
- Handle transactions (via session)
- NOT handle HTTP concerns (that's for handlers)

Available Services:
===================
- FeedService: Following, discovery and tag feeds
- EngagementService: hasLiked / hasCloned / like summaries for a page
- PreviewExtractor: Item previews for feed cards
- FollowVersionTracker: Anchor follows, version badges, content-change hook
- LikeService: Like / unlike
- AnchorService: Anchor detail view

Usage:
======
    from src.shared.services import FeedService

    service = FeedService(db)
    page = await service.get_discover_feed(viewer_id, category=FeedCategory.POPULAR)
"""

from src.shared.services.engagement_service import EngagementService
from src.shared.services.preview_service import PreviewExtractor
from src.shared.services.feed_service import FeedService
from src.shared.services.anchor_follow_service import FollowVersionTracker
from src.shared.services.like_service import LikeService
from src.shared.services.anchor_service import AnchorService

__all__ = [
    "EngagementService",
    "PreviewExtractor",
    "FeedService",
    "FollowVersionTracker",
    "LikeService",
    "AnchorService",
]
