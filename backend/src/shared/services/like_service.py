"""
Like Service

Like / unlike with denormalized counter upkeep.

Flow:
=====
    POST /anchors/{id}/like {"action": "like"}
        │
        ├── row inserted?  no  → return current state (idempotent)
        │                  yes → like_count + 1
        │                        queue RECOMPUTE_ENGAGEMENT
        ▼
    {"hasLiked": true, "likeCount": 11}

like_count only moves when the relation changes and never drops below 0.
engagement_score catches up in the background.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.shared.core.exceptions import AnchorNotFoundError
from src.shared.core.logging import logger
from src.shared.models.anchor import Anchor
from src.shared.models.enums import BackgroundJob, LikeAction, Visibility
from src.shared.repositories.anchor_repository import AnchorRepository
from src.shared.repositories.like_repository import LikeRepository
from src.shared.services.anchor_follow_service import TaskSubmitter


@dataclass
class LikeState:
    """Viewer's like state after an action."""

    has_liked: bool
    like_count: int


class LikeService:
    """Service for likes."""

    def __init__(self, session: AsyncSession, tasks: TaskSubmitter) -> None:
        self.session = session
        self.tasks = tasks
        self.anchor_repo = AnchorRepository(session)
        self.like_repo = LikeRepository(session)

    async def apply(self, user_id: UUID, anchor_id: UUID, action: LikeAction) -> LikeState:
        """
        Like or unlike an anchor.

        Raises:
            AnchorNotFoundError: Anchor missing, deleted, or private to someone else
        """
        anchor = await self._get_likeable_anchor(user_id, anchor_id)

        if action == LikeAction.LIKE:
            changed = await self.like_repo.add_like(anchor_id, user_id)
            delta = 1
        else:
            changed = await self.like_repo.remove_like(anchor_id, user_id)
            delta = -1

        if changed:
            await self.anchor_repo.adjust_like_count(anchor_id, delta)
            self.tasks.submit(BackgroundJob.RECOMPUTE_ENGAGEMENT, anchor_id=str(anchor_id))
            logger.info(
                "Like state changed",
                user_id=str(user_id),
                anchor_id=str(anchor_id),
                action=action.value,
            )

        return LikeState(
            has_liked=action == LikeAction.LIKE,
            like_count=await self.anchor_repo.get_like_count(anchor.id),
        )

    async def _get_likeable_anchor(self, user_id: Optional[UUID], anchor_id: UUID) -> Anchor:
        anchor = await self.anchor_repo.get_active(anchor_id)
        if anchor is None or (anchor.visibility == Visibility.PRIVATE and anchor.user_id != user_id):
            raise AnchorNotFoundError(str(anchor_id))
        return anchor
