"""
Side-effect processor.

Runs the fire-and-forget writes queued by request handlers. Every job opens
its own session, so nothing here depends on the request that queued it.

Jobs:
=====
    MARK_SEEN              {user_id, anchor_id}    raise last_seen_version
    INCREMENT_VERSION      {anchor_id, actor_id}   version + 1, then notify
    RECOMPUTE_ENGAGEMENT   {anchor_id}             score from counters

All three are safe to retry. INCREMENT_VERSION commits the new version
before publishing, and a failed publish is logged instead of raised, so
a retry can never increment the same change twice.
"""

import asyncio
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.shared.adapters.sqs_adapter import SQSAdapter
from src.shared.core.logging import get_logger
from src.shared.db.session import session_scope
from src.shared.repositories.anchor_repository import AnchorRepository
from src.shared.services.anchor_follow_service import ContentChange, FollowVersionTracker
from src.worker.processors.base_processor import BaseProcessor

logger = get_logger(__name__)


def _uuid(value: Optional[str]) -> Optional[UUID]:
    return UUID(value) if value else None


class SideEffectProcessor(BaseProcessor):
    """Processor for feed side effects."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        notifier: Optional[SQSAdapter] = None,
    ):
        self.session_factory = session_factory
        self.notifier = notifier

    async def handle_mark_seen(self, payload: dict[str, Any]) -> None:
        user_id = UUID(payload["user_id"])
        anchor_id = UUID(payload["anchor_id"])

        async with session_scope(self.session_factory) as session:
            moved = await FollowVersionTracker(session).mark_seen(user_id, anchor_id)

        logger.debug("Last seen version processed", user_id=str(user_id), anchor_id=str(anchor_id), moved=moved)

    async def handle_increment_version(self, payload: dict[str, Any]) -> None:
        anchor_id = UUID(payload["anchor_id"])
        actor_id = _uuid(payload.get("actor_id"))

        async with session_scope(self.session_factory) as session:
            change = await FollowVersionTracker(session).apply_content_change(anchor_id, actor_id)

        if change is None:
            return

        logger.info(
            "Anchor version incremented",
            anchor_id=str(anchor_id),
            version=change.version,
            recipients=len(change.recipient_ids),
        )
        await self._notify(change)

    async def handle_recompute_engagement(self, payload: dict[str, Any]) -> None:
        anchor_id = UUID(payload["anchor_id"])

        async with session_scope(self.session_factory) as session:
            score = await AnchorRepository(session).recompute_engagement_score(anchor_id)

        logger.debug("Engagement score recomputed", anchor_id=str(anchor_id), score=score)

    async def _notify(self, change: ContentChange) -> None:
        if self.notifier is None or not change.recipient_ids:
            return

        try:
            await asyncio.to_thread(
                self.notifier.send_anchor_update_notification,
                anchor_id=str(change.anchor_id),
                anchor_title=change.anchor_title,
                author_id=str(change.author_id),
                version=change.version,
                recipient_ids=[str(user_id) for user_id in change.recipient_ids],
            )
        except Exception as e:
            logger.error(
                "Anchor update notification failed",
                anchor_id=str(change.anchor_id),
                version=change.version,
                error=str(e),
            )
