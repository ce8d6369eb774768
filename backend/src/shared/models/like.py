"""
Like Entity Model

(anchor, user) pair with a creation timestamp. The unique constraint makes
double-likes impossible at the store level; the like service treats a
repeated like or unlike as a no-op.

The (anchor_id, created_at) index serves the "20 most recent likers"
window used by like summaries.
"""

from datetime import datetime
import uuid

from sqlalchemy import DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.shared.models.base import Base, utc_now


class Like(Base):
    """A user's like on an anchor."""

    __tablename__ = "likes"

    __table_args__ = (
        UniqueConstraint("anchor_id", "user_id", name="uq_likes_anchor_user"),
        Index("ix_likes_anchor_recent", "anchor_id", "created_at"),
        Index("ix_likes_user", "user_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    anchor_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("anchors.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Like(anchor_id={self.anchor_id}, user_id={self.user_id})>"
