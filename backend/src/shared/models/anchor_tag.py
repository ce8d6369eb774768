"""
AnchorTag Entity Model

One row per (anchor, tag). Tags are stored lower-cased so the tag feed can
use an index for its case-insensitive membership test.
"""

from typing import TYPE_CHECKING
import uuid

from sqlalchemy import ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from src.shared.models.base import Base


if TYPE_CHECKING:
    from src.shared.models.anchor import Anchor


class AnchorTag(Base):
    """Junction row between an anchor and a normalized tag."""

    __tablename__ = "anchor_tags"

    anchor_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("anchors.id", ondelete="CASCADE"),
        primary_key=True,
    )
    tag: Mapped[str] = mapped_column(String(50), primary_key=True, index=True)

    anchor: Mapped["Anchor"] = relationship("Anchor", back_populates="tag_links")

    @validates("tag")
    def _normalize_tag(self, _key: str, value: str) -> str:
        return value.strip().lower()

    def __repr__(self) -> str:
        return f"<AnchorTag(anchor_id={self.anchor_id}, tag={self.tag})>"
