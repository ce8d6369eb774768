"""
Shared Module

Contains code shared between the API and the background runner:
- Models: SQLAlchemy ORM models
- Repositories: Data access layer
- Services: Feed composition, engagement, follow tracking
- Schemas: Pydantic request/response models
- Core: Logging and exceptions
- Adapters: External service integrations

Package Structure:
==================
    shared/
    ├── core/           ← Logging, exceptions
    ├── db/             ← Database session management
    ├── models/         ← SQLAlchemy models
    ├── repositories/   ← Data access layer
    ├── services/       ← Business logic
    ├── schemas/        ← Pydantic schemas
    ├── adapters/       ← External services
    ├── migrations/     ← Alembic environment and revisions
    └── utils/          ← Cursor codec, JWT validation

Usage:
======
    from src.shared.models import Anchor, AnchorFollow
    from src.shared.repositories import AnchorRepository
    from src.shared.services import FeedService
    from src.shared.schemas import FeedResponse
    from src.shared.core import logger, AnchorException
"""
