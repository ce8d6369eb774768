"""
User Entity Model

Represents a platform user as seen by the feed: an author to render next
to an anchor, a liker to show in a like summary.

Accounts and credentials are owned by the authentication service; this
table carries only the public profile fields the feed renders.

SAMPLE USER RECORD:
┌──────────────────────────────────────────────────────────────────────────────┐
│ id                  │ 550e8400-e29b-41d4-a716-446655440000                   │
│ username            │ "maya"                                                 │
│ display_name        │ "Maya Chen"                                            │
│ profile_picture_url │ "https://cdn.example.com/u/maya.jpg"                   │
│ is_verified         │ true                                                   │
│ follower_count      │ 1240                                                   │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from typing import Optional
import uuid

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.shared.models.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    """
    User model with the public profile fields used by feeds.

    Attributes:
        id: Unique identifier (UUID v4)
        username: Unique handle
        display_name: Name shown in the UI
        profile_picture_url: Avatar URL, if any
        is_verified: Verified badge
        follower_count: Denormalized count of users following this user
        following_count: Denormalized count of users this user follows
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    username: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        index=True,
    )
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    profile_picture_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    follower_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    following_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<User(id={self.id}, username={self.username})>"
