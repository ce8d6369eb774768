"""
Database Module

Database connectivity and session management for the Anchor service.

Architecture Overview:
======================
┌─────────────────────────────────────────────────────────────────────────────┐
│                        DATABASE LAYER                                       │
├─────────────────────────────────────────────────────────────────────────────┤
│                                                                             │
│   FastAPI Route                      Background Worker                      │
│       │ get_db()                         │ session_scope(factory)           │
│       ▼                                  ▼                                  │
│   ┌─────────────────────────────────────────────────────────────┐          │
│   │              AsyncSession (from session.py)                 │          │
│   └─────────────────────────────────────────────────────────────┘          │
│       │                                                                     │
│       ▼                                                                     │
│   ┌─────────────────────────────────────────────────────────────┐          │
│   │              Repository (from repositories/)                │          │
│   │                                                             │          │
│   │  - AnchorRepository        (feed range scans, counters)     │          │
│   │  - ItemRepository          (batched previews)               │          │
│   │  - LikeRepository          (liked sets, recent likers)      │          │
│   │  - UserFollowRepository    (followed sets)                  │          │
│   │  - AnchorFollowRepository  (last seen versions)             │          │
│   │  - UserBlockRepository     (blocked sets)                   │          │
│   │  - UserRepository          (author lookup)                  │          │
│   └─────────────────────────────────────────────────────────────┘          │
│       │                                                                     │
│       ▼                                                                     │
│   ┌─────────────────────────────────────────────────────────────┐          │
│   │              PostgreSQL Database                            │          │
│   └─────────────────────────────────────────────────────────────┘          │
│                                                                             │
└─────────────────────────────────────────────────────────────────────────────┘

Components:
===========
- session.py: Database engine, session factory, session scopes and lifecycle functions
"""

from src.shared.db.session import (
    get_db,
    session_scope,
    init_db,
    close_db,
    AsyncSessionLocal,
    engine,
)

__all__ = [
    "get_db",  # FastAPI dependency for getting a database session
    "session_scope",  # Transactional scope for background jobs
    "init_db",  # Verify connectivity on app startup
    "close_db",  # Dispose of the pool on app shutdown
    "AsyncSessionLocal",  # Session factory handed to the background worker
    "engine",  # Database engine (for migrations, etc.)
]
