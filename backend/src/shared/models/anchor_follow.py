"""
AnchorFollow Entity Model

User → anchor subscription that remembers the last anchor version the
follower has seen.

Version Tracking:
=================
    anchor.version            5   ← bumped on every item add/remove/reorder
    follow.last_seen_version  3   ← set when the follower opens the anchor

    has_updates            = 5 > 3          → True
    updates_since_last_seen = max(0, 5 - 3) → 2

Invariants:
===========
- At most one row per (user_id, anchor_id) (uq_anchor_follows_pair)
- last_seen_version starts at the anchor's version when the follow is created
- last_seen_version never decreases (the repository only ever raises it)

SAMPLE ANCHOR_FOLLOW RECORD:
┌──────────────────────────────────────────────────────────────────────────────┐
│ user_id           │ 550e8400-e29b-41d4-a716-446655440000                     │
│ anchor_id         │ 7c9e6679-7425-40de-944b-e07fc1f90ae7                     │
│ notify_on_update  │ true                                                     │
│ last_seen_version │ 3                                                        │
│ created_at        │ 2024-02-10T12:00:00Z                                     │
└──────────────────────────────────────────────────────────────────────────────┘
"""

import uuid

from sqlalchemy import Boolean, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.shared.models.base import Base, TimestampMixin


class AnchorFollow(Base, TimestampMixin):
    """
    AnchorFollow model - a user's subscription to one anchor.

    Attributes:
        user_id: Follower
        anchor_id: Followed anchor
        notify_on_update: Whether version bumps should notify this follower
        last_seen_version: Anchor version at the follower's last view
    """

    __tablename__ = "anchor_follows"

    __table_args__ = (
        UniqueConstraint("user_id", "anchor_id", name="uq_anchor_follows_pair"),
        Index("ix_anchor_follows_user_seen", "user_id", "last_seen_version"),
        Index("ix_anchor_follows_anchor_notify", "anchor_id", "notify_on_update"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    anchor_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("anchors.id", ondelete="CASCADE"),
        nullable=False,
    )

    notify_on_update: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_seen_version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<AnchorFollow(user_id={self.user_id}, anchor_id={self.anchor_id}, "
            f"last_seen_version={self.last_seen_version})>"
        )
