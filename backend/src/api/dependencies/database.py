"""
Database Dependency

FastAPI dependency for request-scoped database sessions.

The session is committed when the handler returns and rolled back when it
raises. Background jobs never use this session; they open their own
through session_scope() so a disconnected client cannot cancel them.

Tests replace this dependency with app.dependency_overrides[get_db].

Usage:
======
    from src.api.dependencies.database import DbSession

    @router.get("/anchors/{anchor_id}")
    async def get_anchor(anchor_id: UUID, db: DbSession):
        return await AnchorRepository(db).get_active(anchor_id)
"""

from typing import Annotated, AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.shared.db import get_db as _get_db


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield the request's database session.

    Yields:
        AsyncSession: Database session for the current request
    """
    async for session in _get_db():
        yield session


DbSession = Annotated[AsyncSession, Depends(get_db)]
