"""
User Repository

Batch profile lookups for feed authors and like-summary entries.

Usage Example:
==============
    repo = UserRepository(db)
    authors = await repo.get_map([anchor.user_id for anchor in anchors])
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.shared.repositories.base import BaseRepository
from src.shared.models.user import User


class UserRepository(BaseRepository[User]):
    """
    Repository for User reads.

    Profiles are owned by the account service; the inherited get_map()
    batch lookup is all the feed needs.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(User, session)
