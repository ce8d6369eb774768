"""
Item Repository

Item reads for previews and the anchor detail view.

Batched Preview Query:
======================
The first N items of every anchor on a feed page come back in one query
using a window function, instead of one query per anchor:

    SELECT * FROM (
        SELECT items.*,
               row_number() OVER (PARTITION BY anchor_id
                                  ORDER BY position, id) AS rn
        FROM items
        WHERE anchor_id IN (:page_anchor_ids) AND deleted_at IS NULL
    ) ranked
    WHERE rn <= 3
"""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from src.shared.models.item import Item
from src.shared.repositories.base import BaseRepository


class ItemRepository(BaseRepository[Item]):
    """Repository for anchor items."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Item, session)

    async def get_leading_items(
        self,
        anchor_ids: list[UUID],
        per_anchor: int,
    ) -> dict[UUID, list[Item]]:
        """
        First ``per_anchor`` live items of each anchor, by position.

        Returns:
            anchor_id → items in position order; anchors without items
            are absent from the mapping
        """
        if not anchor_ids:
            return {}

        ranked = (
            select(
                Item,
                func.row_number()
                .over(partition_by=Item.anchor_id, order_by=(Item.position, Item.id))
                .label("rn"),
            )
            .where(Item.anchor_id.in_(anchor_ids), Item.deleted_at.is_(None))
            .subquery()
        )
        ranked_item = aliased(Item, ranked)

        result = await self.session.execute(
            select(ranked_item)
            .where(ranked.c.rn <= per_anchor)
            .order_by(ranked.c.anchor_id, ranked.c.rn)
        )

        items_by_anchor: dict[UUID, list[Item]] = {}
        for item in result.scalars().all():
            items_by_anchor.setdefault(item.anchor_id, []).append(item)
        return items_by_anchor

    async def list_for_anchor(self, anchor_id: UUID) -> list[Item]:
        """All live items of one anchor in position order."""
        result = await self.session.execute(
            select(Item)
            .where(Item.anchor_id == anchor_id, Item.deleted_at.is_(None))
            .order_by(Item.position, Item.id)
        )
        return list(result.scalars().all())
