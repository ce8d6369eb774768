"""
Item Entity Model

An ordered content unit inside an anchor. Exactly one of the payload
columns is populated, matching ``type``.

Payload Shapes:
===============
    url_data    {"url", "title", "description", "favicon", "thumbnail"}
    image_data  {"url", "width", "height"}
    audio_data  {"url", "duration_seconds"}
    file_data   {"url", "filename", "size_bytes"}
    text_data   {"content"}

Only the first few items by ``position`` are read here, to build feed
previews.
"""

from typing import Any, Optional
import uuid

from sqlalchemy import Enum as SQLEnum, ForeignKey, Index, Integer, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.shared.models.base import Base, SoftDeleteMixin, TimestampMixin
from src.shared.models.enums import ItemType


class Item(Base, TimestampMixin, SoftDeleteMixin):
    """
    Item model - one url/image/audio/file/text entry of an anchor.

    Attributes:
        id: Unique identifier (UUID v4)
        anchor_id: Owning anchor
        type: Which payload column is populated
        position: 0-based order inside the anchor
    """

    __tablename__ = "items"

    __table_args__ = (
        Index(
            "ix_items_anchor_position",
            "anchor_id",
            "position",
            postgresql_where=text("deleted_at IS NULL"),
        ),
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

    type: Mapped[ItemType] = mapped_column(SQLEnum(ItemType), nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    url_data: Mapped[Optional[dict[str, Any]]] = mapped_column(nullable=True)
    image_data: Mapped[Optional[dict[str, Any]]] = mapped_column(nullable=True)
    audio_data: Mapped[Optional[dict[str, Any]]] = mapped_column(nullable=True)
    file_data: Mapped[Optional[dict[str, Any]]] = mapped_column(nullable=True)
    text_data: Mapped[Optional[dict[str, Any]]] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        return f"<Item(id={self.id}, anchor_id={self.anchor_id}, type={self.type}, position={self.position})>"
