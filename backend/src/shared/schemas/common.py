"""
Common Schemas

Building blocks shared by the feed, anchor and follow schemas.

Field Naming:
=============
Attributes are snake_case, JSON keys camelCase. FastAPI serializes
response models by alias, so ``has_liked`` goes out as ``hasLiked``;
requests accept either spelling.

Two Pagination Styles:
======================
    feeds            keyset: {"limit", "hasMore", "itemCount", "nextCursor"?}   (schemas.feed)
    follow lists     offset: {"page", "limit", "total", "totalPages", "hasMore"} (here)
"""

from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class BaseSchema(BaseModel):
    """camelCase aliases, construction from ORM rows, population by name."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# OFFSET PAGINATION
# ═══════════════════════════════════════════════════════════════════════════════


class PaginationMeta(BaseSchema):
    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    total: int = Field(ge=0)
    total_pages: int
    has_more: bool

    @classmethod
    def create(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        """
        Derive total_pages and has_more.

        page=2, limit=20, total=45  →  total_pages=3, has_more=True
        page=3, limit=20, total=45  →  total_pages=3, has_more=False
        """
        total_pages = -(-total // limit) if total else 0
        return cls(page=page, limit=limit, total=total, total_pages=total_pages, has_more=page < total_pages)


class PaginatedResponse(BaseSchema, Generic[DataT]):
    data: list[DataT]
    pagination: PaginationMeta


# ═══════════════════════════════════════════════════════════════════════════════
# ERRORS (OpenAPI documentation of the handler envelope)
# ═══════════════════════════════════════════════════════════════════════════════


class ErrorDetail(BaseModel):
    code: str = Field(examples=["INVALID_CURSOR"])
    message: str = Field(examples=["Cursor was issued for a different feed"])
    details: Optional[dict[str, Any]] = Field(
        default=None,
        examples=[{"expected": "recent", "received": "popular"}],
    )


class ErrorResponse(BaseModel):
    error: ErrorDetail


# ═══════════════════════════════════════════════════════════════════════════════
# HEALTH
# ═══════════════════════════════════════════════════════════════════════════════


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ReadinessResponse(BaseSchema):
    status: str
    pending_jobs: int = 0
