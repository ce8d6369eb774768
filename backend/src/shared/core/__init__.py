"""
Core Module

Provides core functionality shared across the application:
- Structured logging
- Custom exceptions

Usage:
======
    from src.shared.core.logging import logger, get_logger
    from src.shared.core.exceptions import AnchorException, InvalidCursorError

    logger.info("Starting operation", user_id=user_id)
"""

from src.shared.core.logging import (
    logger,
    get_logger,
    bind_log_context,
)
from src.shared.core.exceptions import (
    AnchorException,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    AnchorNotFoundError,
    FollowNotFoundError,
    ValidationError,
    InvalidQueryError,
    InvalidCursorError,
    ServiceUnavailableError,
)

__all__ = [
    # Logging
    "logger",
    "get_logger",
    "bind_log_context",
    # Exceptions
    "AnchorException",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "AnchorNotFoundError",
    "FollowNotFoundError",
    "ValidationError",
    "InvalidQueryError",
    "InvalidCursorError",
    "ServiceUnavailableError",
]
