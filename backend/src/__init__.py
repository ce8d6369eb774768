"""
Anchor Feed Backend

Following feed, discovery feeds and anchor follow tracking.

Package Structure:
==================
    src/
    ├── api/        ← FastAPI application
    ├── worker/     ← In-process background task runner and processors
    ├── shared/     ← Shared code (models, services, etc.)
    └── config/     ← Configuration

Running the Application:
========================
    # API Server (starts the background runner in its lifespan)
    uvicorn src.api.main:app --reload

    # Migrations
    cd backend && alembic upgrade head
"""
