"""
Route Registration

Centralizes all route registration for the FastAPI application.

Route Hierarchy:
================
    /health, /ready, /live   → Health check endpoints
    /feed                    → Following, discovery and tag feeds
    /anchors                 → Anchor detail, likes, follows
    /users                   → Per-user lists (following anchors)

Usage:
======
    from src.api.routes import register_routes

    app = FastAPI()
    register_routes(app)
"""

from fastapi import FastAPI

from src.api.handlers import (
    anchor_handler,
    feed_handler,
    health_handler,
    user_handler,
)
from src.shared.schemas.common import ErrorResponse


# Documented error envelopes (OpenAPI only)
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid query, cursor or body"},
    401: {"model": ErrorResponse, "description": "Missing or invalid bearer token"},
    404: {"model": ErrorResponse, "description": "Anchor not found"},
}


def register_routes(app: FastAPI) -> None:
    """
    Register all API routes.

    Args:
        app: FastAPI application instance
    """
    # Health check endpoints (no prefix, root level)
    app.include_router(
        health_handler.router,
        tags=["Health"],
    )

    # Feed endpoints
    app.include_router(
        feed_handler.router,
        prefix="/feed",
        tags=["Feed"],
        responses=ERROR_RESPONSES,
    )

    # Anchor endpoints
    app.include_router(
        anchor_handler.router,
        prefix="/anchors",
        tags=["Anchors"],
        responses=ERROR_RESPONSES,
    )

    # User endpoints
    app.include_router(
        user_handler.router,
        prefix="/users",
        tags=["Users"],
        responses=ERROR_RESPONSES,
    )
