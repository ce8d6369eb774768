"""
Anchor Entity Model

An anchor is a user-owned, versioned collection of items. It is the unit
every feed paginates over.

Anchors are created and edited by the CRUD service. This service reads
them and only ever writes three derived columns as side effects:

    version           ← +1 per content-changing mutation (item add/remove/reorder)
    engagement_score  ← recomputed as 2×likes + 3×clones + 1×comments
    like_count / follower_count ← adjusted by like and follow actions here

SAMPLE ANCHOR RECORD:
┌──────────────────────────────────────────────────────────────────────────────┐
│ id                │ 7c9e6679-7425-40de-944b-e07fc1f90ae7                     │
│ user_id           │ 550e8400-e29b-41d4-a716-446655440000                     │
│ title             │ "Tokyo coffee crawl"                                     │
│ visibility        │ PUBLIC                                                   │
│ version           │ 12                                                       │
│ like_count        │ 40    clone_count 3    comment_count 7                   │
│ engagement_score  │ 96    (2×40 + 3×3 + 1×7)                                 │
│ last_item_added_at│ 2024-03-02T08:15:00.120000Z                              │
│ tags              │ ["coffee", "tokyo"]                                      │
└──────────────────────────────────────────────────────────────────────────────┘

Feed Indexes:
=============
    ix_anchors_following_feed   (user_id, visibility, last_item_added_at, id)
    ix_anchors_discover_score   (visibility, engagement_score, created_at, id)
    ix_anchors_discover_recent  (visibility, created_at, id)

All three are partial on ``deleted_at IS NULL`` in PostgreSQL and are read
backwards for the descending feed orderings.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional
import uuid

from sqlalchemy import Boolean, DateTime, Enum as SQLEnum, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.shared.models.base import Base, SoftDeleteMixin, TimestampMixin, utc_now
from src.shared.models.enums import Visibility


if TYPE_CHECKING:
    from src.shared.models.anchor_tag import AnchorTag


# Weights of the engagement score formula
LIKE_WEIGHT = 2
CLONE_WEIGHT = 3
COMMENT_WEIGHT = 1


class Anchor(Base, TimestampMixin, SoftDeleteMixin):
    """
    Anchor model - a collection of items with visibility and engagement metadata.

    Attributes:
        id: Unique identifier (UUID v4), also the pagination tie-break
        user_id: Owner
        visibility: private / unlisted / public
        cloned_from_anchor_id: Source anchor when this one is a clone
        version: Monotonic content version, starts at 1
        engagement_score: Denormalized ranking score for discovery
        last_item_added_at: Drives following-feed ordering

    Relationships:
        tag_links: Normalized tag rows (see AnchorTag)
    """

    __tablename__ = "anchors"

    __table_args__ = (
        Index(
            "ix_anchors_following_feed",
            "user_id",
            "visibility",
            "last_item_added_at",
            "id",
            postgresql_where=text("deleted_at IS NULL"),
        ),
        Index(
            "ix_anchors_discover_score",
            "visibility",
            "engagement_score",
            "created_at",
            "id",
            postgresql_where=text("deleted_at IS NULL"),
        ),
        Index(
            "ix_anchors_discover_recent",
            "visibility",
            "created_at",
            "id",
            postgresql_where=text("deleted_at IS NULL"),
        ),
        Index("ix_anchors_cloned_from", "cloned_from_anchor_id", "user_id"),
    )

    # ═══════════════════════════════════════════════════════════════════════════
    # IDENTITY & OWNERSHIP
    # ═══════════════════════════════════════════════════════════════════════════

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

    cloned_from_anchor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("anchors.id", ondelete="SET NULL"),
        nullable=True,
    )

    # ═══════════════════════════════════════════════════════════════════════════
    # CONTENT
    # ═══════════════════════════════════════════════════════════════════════════

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cover_media_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    cover_media_value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    visibility: Mapped[Visibility] = mapped_column(
        SQLEnum(Visibility),
        default=Visibility.PRIVATE,
        nullable=False,
    )
    is_pinned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # ═══════════════════════════════════════════════════════════════════════════
    # COUNTERS (eventually consistent with the rows they summarize)
    # ═══════════════════════════════════════════════════════════════════════════

    item_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    like_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    clone_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    comment_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    follower_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    engagement_score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # ═══════════════════════════════════════════════════════════════════════════
    # VERSIONING & FEED ORDERING
    # ═══════════════════════════════════════════════════════════════════════════

    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    last_item_added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    # ═══════════════════════════════════════════════════════════════════════════
    # RELATIONSHIPS
    # ═══════════════════════════════════════════════════════════════════════════

    # selectin keeps tags loadable under AsyncSession (no lazy IO on access)
    tag_links: Mapped[list["AnchorTag"]] = relationship(
        "AnchorTag",
        back_populates="anchor",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    # ═══════════════════════════════════════════════════════════════════════════
    # METHODS
    # ═══════════════════════════════════════════════════════════════════════════

    @property
    def tags(self) -> list[str]:
        """Tag names in a stable order."""
        return sorted(link.tag for link in self.tag_links)

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<Anchor(id={self.id}, title={self.title!r}, version={self.version})>"
