"""
Preview Service

Small content previews for feed cards, built from the first items of
each anchor.

Projection Rules:
=================
    url    thumbnail = favicon, else page thumbnail; title cut to 50 chars
    image  thumbnail = the stored image URL
    text   snippet = content, cut to 100 chars + "..." when longer
    other  type only (audio, file)

Every anchor on the page gets a list, empty when it has no live items.
"""

from dataclasses import dataclass
from typing import Optional, Protocol
from uuid import UUID

from src.config.settings import settings
from src.shared.models.enums import ItemType
from src.shared.models.item import Item


URL_TITLE_MAX_LENGTH = 50
TEXT_SNIPPET_MAX_LENGTH = 100


class LeadingItemsProvider(Protocol):
    """First items per anchor (implemented by ItemRepository)."""

    async def get_leading_items(self, anchor_ids: list[UUID], per_anchor: int) -> dict[UUID, list[Item]]: ...


@dataclass
class PreviewItem:
    """Preview projection of one item."""

    type: ItemType
    thumbnail: Optional[str] = None
    title: Optional[str] = None
    snippet: Optional[str] = None


def build_preview_item(item: Item) -> PreviewItem:
    """Project one item into its preview fragment."""
    if item.type == ItemType.URL:
        data = item.url_data or {}
        title = data.get("title") or None
        return PreviewItem(
            type=item.type,
            thumbnail=data.get("favicon") or data.get("thumbnail") or None,
            title=title[:URL_TITLE_MAX_LENGTH] if title else None,
        )

    if item.type == ItemType.IMAGE:
        return PreviewItem(type=item.type, thumbnail=(item.image_data or {}).get("url") or None)

    if item.type == ItemType.TEXT and item.text_data is not None:
        content = item.text_data.get("content") or ""
        if len(content) > TEXT_SNIPPET_MAX_LENGTH:
            content = content[:TEXT_SNIPPET_MAX_LENGTH] + "..."
        return PreviewItem(type=item.type, snippet=content)

    return PreviewItem(type=item.type)


class PreviewExtractor:
    """Builds previews for a page of anchors with one item query."""

    def __init__(
        self,
        items: LeadingItemsProvider,
        *,
        per_anchor: int = settings.PREVIEW_ITEM_COUNT,
    ) -> None:
        self.items = items
        self.per_anchor = per_anchor

    async def get_previews(self, anchor_ids: list[UUID]) -> dict[UUID, list[PreviewItem]]:
        """anchor_id → preview items in position order (never missing, possibly empty)."""
        if not anchor_ids:
            return {}

        leading = await self.items.get_leading_items(anchor_ids, self.per_anchor)
        return {
            anchor_id: [build_preview_item(item) for item in leading.get(anchor_id, [])]
            for anchor_id in anchor_ids
        }
