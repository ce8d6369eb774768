"""
Base Model Classes

This module provides the foundational classes for all SQLAlchemy models in Anchor.
It includes the declarative base and common mixins for timestamps and soft deletion.

Model Hierarchy:
================
    Base                    ← SQLAlchemy declarative base
       │
       ├── TimestampMixin   ← created_at/updated_at
       │
       └── SoftDeleteMixin  ← Soft delete with deleted_at

Usage:
======
    from src.shared.models.base import Base, TimestampMixin, SoftDeleteMixin

    class Anchor(Base, TimestampMixin, SoftDeleteMixin):
        __tablename__ = "anchors"
        id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)

Timestamps:
===========
Feed ordering depends on created_at down to the microsecond, so both
timestamp columns get a Python-side default in addition to the database
default. The database default alone only has second precision on some
backends, which would make far more rows fall back to the id tie-break.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Maps ``dict[str, Any]`` annotations to JSONB on PostgreSQL and to the
    generic JSON type everywhere else.
    """

    type_annotation_map = {
        dict[str, Any]: JSON().with_variant(JSONB(), "postgresql"),
    }


class TimestampMixin:
    """
    Mixin that adds automatic timestamp tracking to models.

    Example values:
        created_at: 2024-01-15T10:30:00.123456Z (when record was created)
        updated_at: 2024-01-16T14:45:30.654321Z (last modification time)
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=utc_now,
        nullable=False,
    )


class SoftDeleteMixin:
    """
    Mixin that adds soft delete capability to models.

    Soft-deleted anchors and items stay in the table (follows and likes still
    reference them) but must never appear in a feed or preview.

    Querying:
    =========
        query.where(MyModel.deleted_at.is_(None))
    """

    # NULL means the record is active
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )

    @property
    def is_deleted(self) -> bool:
        """True once deleted_at is set."""
        return self.deleted_at is not None
