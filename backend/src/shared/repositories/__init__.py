"""
Repository Pattern Implementations

Repositories encapsulate every query the feed service runs. Services never
build SQL themselves.

Repository Hierarchy:
=====================
    BaseRepository[ModelType]           ← get / get_by_ids / get_map / create
         │
         ├── AnchorRepository           ← Feed range scans, atomic counters
         ├── ItemRepository             ← Batched preview items
         ├── LikeRepository             ← Liked sets, recent likers
         ├── UserFollowRepository       ← Followed sets
         ├── UserBlockRepository        ← Blocked sets
         ├── AnchorFollowRepository     ← Last seen versions, follow lists
         └── UserRepository             ← Author profiles

Usage Example:
==============
    anchor_repo = AnchorRepository(db)
    rows = await anchor_repo.get_following_feed_page(author_ids, cursor, limit + 1)
"""

from src.shared.repositories.base import BaseRepository
from src.shared.repositories.anchor_repository import AnchorRepository
from src.shared.repositories.item_repository import ItemRepository
from src.shared.repositories.like_repository import LikeRepository
from src.shared.repositories.user_follow_repository import UserFollowRepository
from src.shared.repositories.user_block_repository import UserBlockRepository
from src.shared.repositories.anchor_follow_repository import AnchorFollowRepository
from src.shared.repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "AnchorRepository",
    "ItemRepository",
    "LikeRepository",
    "UserFollowRepository",
    "UserBlockRepository",
    "AnchorFollowRepository",
    "UserRepository",
]
