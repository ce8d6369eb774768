"""
API Handlers

Route handlers for the Anchor feed API.

Handlers follow the pattern:
- Parse HTTP requests
- Call service methods
- Format HTTP responses

All business logic is delegated to the service layer.
"""

from src.api.handlers import (
    anchor_handler,
    feed_handler,
    health_handler,
    user_handler,
)

__all__ = [
    "anchor_handler",
    "feed_handler",
    "health_handler",
    "user_handler",
]
