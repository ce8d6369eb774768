"""
Cursor Codec

Opaque keyset-pagination tokens for the feeds.

A cursor is the sort key of the last row on a page plus the row's id as a
tie-break, serialized as compact JSON and base64 encoded (URL-safe
alphabet). Clients must round-trip it unmodified.

Token Layout:
=============
    following feed             {"k": "following", "t": <lastItemAddedAt>, "i": <anchorId>}
    discover trending/popular  {"k": "popular",   "s": <score>, "c": <createdAt>, "i": <anchorId>}
    discover recent            {"k": "recent",    "c": <createdAt>, "i": <anchorId>}

    base64("{"k":"following","t":"2024-03-02T08:15:00.120000Z","i":"7c9e..."}")

The "k" field binds a cursor to the feed that issued it. Replaying a
popular cursor against recent (or against the following feed) raises
InvalidCursorError instead of silently reinterpreting the sort key.

Validation Rules:
=================
- None or "" → first page (not an error)
- not base64 / not JSON / wrong shape → InvalidCursorError
- missing or zero-valued timestamp or id → InvalidCursorError
- score-ordered kinds must carry a score (0 is a valid score)
- kind does not match the feed being read → InvalidCursorError

Usage:
======
    from src.shared.utils.cursor import encode_following_cursor, decode_following_cursor

    token = encode_following_cursor(anchor.last_item_added_at, anchor.id)
    cursor = decode_following_cursor(token)
    cursor.timestamp, cursor.anchor_id
"""

import base64
from datetime import datetime, timezone
from typing import Optional, Type, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.shared.core.exceptions import InvalidCursorError
from src.shared.models.enums import FeedCategory


FOLLOWING_KIND = "following"

_ZERO_ID = UUID(int=0)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything stored is UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ═══════════════════════════════════════════════════════════════════════════════
# CURSOR PAYLOADS
# ═══════════════════════════════════════════════════════════════════════════════


class _CursorPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    kind: str = Field(alias="k")
    anchor_id: UUID = Field(alias="i")

    @field_validator("anchor_id")
    @classmethod
    def _non_zero_id(cls, value: UUID) -> UUID:
        if value == _ZERO_ID:
            raise ValueError("cursor id is zero")
        return value


class FollowingCursor(_CursorPayload):
    """Position in the following feed: (lastItemAddedAt, anchorId)."""

    kind: str = Field(default=FOLLOWING_KIND, alias="k")
    timestamp: datetime = Field(alias="t")

    @field_validator("timestamp")
    @classmethod
    def _non_zero_timestamp(cls, value: datetime) -> datetime:
        if value.year <= 1:
            raise ValueError("cursor timestamp is zero")
        return _as_utc(value)


class DiscoverCursor(_CursorPayload):
    """Position in a discovery feed: (score?, createdAt, anchorId)."""

    score: Optional[int] = Field(default=None, alias="s")
    created_at: datetime = Field(alias="c")

    @field_validator("created_at")
    @classmethod
    def _non_zero_created_at(cls, value: datetime) -> datetime:
        if value.year <= 1:
            raise ValueError("cursor timestamp is zero")
        return _as_utc(value)


CursorT = TypeVar("CursorT", bound=_CursorPayload)


# ═══════════════════════════════════════════════════════════════════════════════
# ENCODE / DECODE
# ═══════════════════════════════════════════════════════════════════════════════


def _encode(payload: _CursorPayload) -> str:
    raw = payload.model_dump_json(by_alias=True, exclude_none=True)
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def _decode(token: str, model: Type[CursorT]) -> CursorT:
    # binascii.Error, UnicodeError and pydantic's ValidationError are all ValueErrors
    try:
        raw = base64.b64decode(token.encode("ascii"), altchars=b"-_", validate=True)
        return model.model_validate_json(raw)
    except ValueError as e:
        raise InvalidCursorError("Cursor could not be decoded") from e


def encode_following_cursor(timestamp: datetime, anchor_id: UUID) -> str:
    """Encode the position after the row (timestamp, anchor_id) in the following feed."""
    return _encode(FollowingCursor(timestamp=timestamp, anchor_id=anchor_id))


def decode_following_cursor(token: Optional[str]) -> Optional[FollowingCursor]:
    """
    Decode a following-feed cursor.

    Returns:
        None for an absent/empty token (first page), else the decoded cursor

    Raises:
        InvalidCursorError: Malformed token or a cursor issued by another feed
    """
    if not token:
        return None

    cursor = _decode(token, FollowingCursor)
    if cursor.kind != FOLLOWING_KIND:
        raise InvalidCursorError(
            "Cursor was issued for a different feed",
            details={"expected": FOLLOWING_KIND, "received": cursor.kind},
        )
    return cursor


def encode_discover_cursor(
    category: FeedCategory,
    created_at: datetime,
    anchor_id: UUID,
    score: Optional[int] = None,
) -> str:
    """
    Encode a discovery-feed position.

    ``score`` is required for trending/popular and ignored for recent.
    """
    if category == FeedCategory.RECENT:
        score = None
    elif score is None:
        raise ValueError(f"{category.value} cursors need a score")

    return _encode(
        DiscoverCursor(
            kind=category.value,
            score=score,
            created_at=created_at,
            anchor_id=anchor_id,
        )
    )


def decode_discover_cursor(
    token: Optional[str],
    category: FeedCategory,
) -> Optional[DiscoverCursor]:
    """
    Decode a discovery-feed cursor for ``category``.

    Returns:
        None for an absent/empty token (first page), else the decoded cursor

    Raises:
        InvalidCursorError: Malformed token, missing score for a score-ordered
            category, or a cursor issued for another category
    """
    if not token:
        return None

    cursor = _decode(token, DiscoverCursor)
    if cursor.kind != category.value:
        raise InvalidCursorError(
            "Cursor was issued for a different feed",
            details={"expected": category.value, "received": cursor.kind},
        )
    if category != FeedCategory.RECENT and cursor.score is None:
        raise InvalidCursorError("Cursor is missing its score")
    return cursor
