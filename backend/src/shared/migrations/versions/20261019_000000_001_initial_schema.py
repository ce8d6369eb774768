# pylint: skip-file
# ruff: noqa
"""Initial schema - create all tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00

Tables created:
- users: Public profile fields and follower counters
- anchors: Item collections with visibility, version and engagement counters
- anchor_tags: Normalized tags per anchor
- items: Entries of an anchor (url, image, audio, file, text)
- user_follows: User to user follows
- user_blocks: User to user blocks
- anchor_follows: Anchor subscriptions with last seen version
- likes: Anchor likes

Enums created:
- visibility: PRIVATE, UNLISTED, PUBLIC
- itemtype: URL, IMAGE, AUDIO, FILE, TEXT
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# Enum types
visibility_enum = postgresql.ENUM(
    "PRIVATE",
    "UNLISTED",
    "PUBLIC",
    name="visibility",
    create_type=False,
)

item_type_enum = postgresql.ENUM(
    "URL",
    "IMAGE",
    "AUDIO",
    "FILE",
    "TEXT",
    name="itemtype",
    create_type=False,
)

NOT_DELETED = sa.text("deleted_at IS NULL")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade database schema."""
    # Create enum types
    op.execute("CREATE TYPE visibility AS ENUM ('PRIVATE', 'UNLISTED', 'PUBLIC')")
    op.execute("CREATE TYPE itemtype AS ENUM ('URL', 'IMAGE', 'AUDIO', 'FILE', 'TEXT')")

    # Create users table
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("username", sa.String(50), nullable=False, unique=True, index=True),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("profile_picture_url", sa.Text(), nullable=True),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("follower_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("following_count", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )

    # Create anchors table
    op.create_table(
        "anchors",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "cloned_from_anchor_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("anchors.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("cover_media_type", sa.String(20), nullable=True),
        sa.Column("cover_media_value", sa.Text(), nullable=True),
        sa.Column("visibility", visibility_enum, nullable=False, server_default="PRIVATE"),
        sa.Column("is_pinned", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("item_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("like_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("clone_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("comment_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("follower_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("engagement_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column(
            "last_item_added_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_anchors_following_feed",
        "anchors",
        ["user_id", "visibility", "last_item_added_at", "id"],
        postgresql_where=NOT_DELETED,
    )
    op.create_index(
        "ix_anchors_discover_score",
        "anchors",
        ["visibility", "engagement_score", "created_at", "id"],
        postgresql_where=NOT_DELETED,
    )
    op.create_index(
        "ix_anchors_discover_recent",
        "anchors",
        ["visibility", "created_at", "id"],
        postgresql_where=NOT_DELETED,
    )
    op.create_index("ix_anchors_cloned_from", "anchors", ["cloned_from_anchor_id", "user_id"])

    # Create anchor_tags table
    op.create_table(
        "anchor_tags",
        sa.Column(
            "anchor_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("anchors.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("tag", sa.String(50), primary_key=True),
    )
    op.create_index("ix_anchor_tags_tag", "anchor_tags", ["tag"])

    # Create items table
    op.create_table(
        "items",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "anchor_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("anchors.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("type", item_type_enum, nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("url_data", postgresql.JSONB(), nullable=True),
        sa.Column("image_data", postgresql.JSONB(), nullable=True),
        sa.Column("audio_data", postgresql.JSONB(), nullable=True),
        sa.Column("file_data", postgresql.JSONB(), nullable=True),
        sa.Column("text_data", postgresql.JSONB(), nullable=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_items_anchor_position",
        "items",
        ["anchor_id", "position"],
        postgresql_where=NOT_DELETED,
    )

    # Create user_follows table
    op.create_table(
        "user_follows",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "follower_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "following_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.UniqueConstraint("follower_id", "following_id", name="uq_user_follows_pair"),
    )
    op.create_index("ix_user_follows_following", "user_follows", ["following_id"])

    # Create user_blocks table
    op.create_table(
        "user_blocks",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "blocker_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "blocked_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.UniqueConstraint("blocker_id", "blocked_id", name="uq_user_blocks_pair"),
    )
    op.create_index("ix_user_blocks_blocked", "user_blocks", ["blocked_id"])

    # Create anchor_follows table
    op.create_table(
        "anchor_follows",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "anchor_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("anchors.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("notify_on_update", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_seen_version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "anchor_id", name="uq_anchor_follows_pair"),
    )
    op.create_index("ix_anchor_follows_user_seen", "anchor_follows", ["user_id", "last_seen_version"])
    op.create_index("ix_anchor_follows_anchor_notify", "anchor_follows", ["anchor_id", "notify_on_update"])

    # Create likes table
    op.create_table(
        "likes",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "anchor_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("anchors.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.UniqueConstraint("anchor_id", "user_id", name="uq_likes_anchor_user"),
    )
    op.create_index("ix_likes_anchor_recent", "likes", ["anchor_id", "created_at"])
    op.create_index("ix_likes_user", "likes", ["user_id"])


def downgrade() -> None:
    """Downgrade database schema."""
    # Drop tables in reverse order (respect foreign keys)
    op.drop_table("likes")
    op.drop_table("anchor_follows")
    op.drop_table("user_blocks")
    op.drop_table("user_follows")
    op.drop_table("items")
    op.drop_table("anchor_tags")
    op.drop_table("anchors")
    op.drop_table("users")

    # Drop enum types
    op.execute("DROP TYPE IF EXISTS itemtype")
    op.execute("DROP TYPE IF EXISTS visibility")
