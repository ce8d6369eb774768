"""
Feed Query Dependencies

Parse and validate feed query parameters into schema objects.

FastAPI only does the type coercion here (a non-integer limit is already
a 400 through the RequestValidationError handler). Range and format rules
live on the schemas; their failures are re-raised as InvalidQueryError so
every feed error shares the INVALID_QUERY code.

Usage:
======
    @router.get("/discover")
    async def discover(query: DiscoverQuery):
        query.limit, query.category, query.tag
"""

from typing import Annotated, Any, Optional

from fastapi import Depends, Path, Query
from pydantic import ValidationError

from src.shared.core.exceptions import InvalidQueryError
from src.shared.schemas.feed import DiscoverFeedQuery, FollowingFeedQuery, TagFeedQuery


def _build(schema: type, **values: Any):
    supplied = {key: value for key, value in values.items() if value is not None}
    try:
        return schema(**supplied)
    except ValidationError as e:
        raise InvalidQueryError.from_errors(e.errors()) from e


async def get_following_feed_query(
    limit: Annotated[Optional[int], Query(description="Page size (1-50, default 20)")] = None,
    cursor: Annotated[Optional[str], Query(description="Opaque cursor from the previous page")] = None,
    include_own: Annotated[Optional[bool], Query(alias="includeOwn")] = None,
) -> FollowingFeedQuery:
    return _build(FollowingFeedQuery, limit=limit, cursor=cursor or None, include_own=include_own)


async def get_discover_feed_query(
    limit: Annotated[Optional[int], Query(description="Page size (1-50, default 20)")] = None,
    cursor: Annotated[Optional[str], Query(description="Opaque cursor from the previous page")] = None,
    category: Annotated[Optional[str], Query(description="trending | popular | recent")] = None,
    tag: Annotated[Optional[str], Query(description="Only anchors with this tag")] = None,
) -> DiscoverFeedQuery:
    return _build(DiscoverFeedQuery, limit=limit, cursor=cursor or None, category=category or None, tag=tag)


async def get_tag_feed_query(
    tag: Annotated[str, Path(description="Tag name")],
    limit: Annotated[Optional[int], Query(description="Page size (1-50, default 20)")] = None,
    cursor: Annotated[Optional[str], Query(description="Opaque cursor from the previous page")] = None,
) -> TagFeedQuery:
    return _build(TagFeedQuery, tag=tag, limit=limit, cursor=cursor or None)


FollowingQuery = Annotated[FollowingFeedQuery, Depends(get_following_feed_query)]
DiscoverQuery = Annotated[DiscoverFeedQuery, Depends(get_discover_feed_query)]
TagQuery = Annotated[TagFeedQuery, Depends(get_tag_feed_query)]
