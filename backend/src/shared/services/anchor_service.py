"""
Anchor Service

Read path for a single anchor.

The detail view differs from feed cards in two ways:
- every live item is returned, not a preview
- the like summary fills free slots with likers the viewer does not follow

Viewing is also what clears a follower's "has updates" badge; that write
is queued on the task runner so it can never slow down or fail the read.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.shared.core.exceptions import AnchorNotFoundError
from src.shared.models.anchor import Anchor
from src.shared.models.enums import Visibility
from src.shared.models.item import Item
from src.shared.models.user import User
from src.shared.repositories.anchor_repository import AnchorRepository
from src.shared.repositories.item_repository import ItemRepository
from src.shared.repositories.like_repository import LikeRepository
from src.shared.repositories.user_follow_repository import UserFollowRepository
from src.shared.repositories.user_repository import UserRepository
from src.shared.services.anchor_follow_service import FollowVersionTracker, TaskSubmitter
from src.shared.services.engagement_service import Engagement, EngagementService


@dataclass
class AnchorDetail:
    """An anchor with its items and the viewer's engagement."""

    anchor: Anchor
    author: Optional[User]
    items: list[Item]
    engagement: Engagement


class AnchorService:
    """Service for anchor reads."""

    def __init__(self, session: AsyncSession, tasks: TaskSubmitter) -> None:
        self.session = session
        self.anchor_repo = AnchorRepository(session)
        self.item_repo = ItemRepository(session)
        self.user_repo = UserRepository(session)
        self.engagement = EngagementService(
            likes=LikeRepository(session),
            clones=self.anchor_repo,
            follows=UserFollowRepository(session),
            profiles=self.user_repo,
        )
        self.tracker = FollowVersionTracker(session, tasks)

    async def get_anchor_detail(self, anchor_id: UUID, viewer_id: Optional[UUID]) -> AnchorDetail:
        """
        Get an anchor as ``viewer_id`` sees it.

        Raises:
            AnchorNotFoundError: Missing, deleted, or private and not the viewer's
        """
        anchor = await self.anchor_repo.get_active(anchor_id)
        if anchor is None:
            raise AnchorNotFoundError(str(anchor_id))
        if anchor.visibility == Visibility.PRIVATE and anchor.user_id != viewer_id:
            raise AnchorNotFoundError(str(anchor_id))

        items = await self.item_repo.list_for_anchor(anchor_id)
        author = await self.user_repo.get(anchor.user_id)
        engagement = await self.engagement.enrich([anchor], viewer_id, include_strangers=True)

        if viewer_id is not None:
            self.tracker.schedule_mark_seen(viewer_id, anchor_id)

        return AnchorDetail(
            anchor=anchor,
            author=author,
            items=items,
            engagement=engagement[anchor.id],
        )
