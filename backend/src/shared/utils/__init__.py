"""
Utilities Package

Stateless helpers with no database access.

Contents:
=========
- cursor: Keyset pagination cursor codec for the feeds
- security: JWT validation

Usage:
======
    from src.shared.utils.security import SecurityUtils
    from src.shared.utils.cursor import encode_following_cursor, decode_following_cursor
"""

from src.shared.utils.security import SecurityUtils
from src.shared.utils.cursor import (
    FollowingCursor,
    DiscoverCursor,
    encode_following_cursor,
    decode_following_cursor,
    encode_discover_cursor,
    decode_discover_cursor,
)

__all__ = [
    "SecurityUtils",
    "FollowingCursor",
    "DiscoverCursor",
    "encode_following_cursor",
    "decode_following_cursor",
    "encode_discover_cursor",
    "decode_discover_cursor",
]
