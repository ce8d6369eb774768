"""
Feed Handler

Handles the following, discovery and tag feed endpoints.

ARCHITECTURE:
=============
    Handler → FeedService → Repositories → Models

Endpoints:
==========
    GET /feed/following        auth required   followed users' anchors
    GET /feed/discover         auth optional   public anchors, by category
    GET /feed/tags/{tag}       auth optional   popular public anchors with a tag

Handlers should ONLY:
- Parse HTTP requests
- Call service methods
- Format HTTP responses

Business logic belongs in the SERVICE layer.
"""

from fastapi import APIRouter, Depends

from src.api.dependencies import CurrentUser, DiscoverQuery, FollowingQuery, OptionalUser, TagQuery
from src.api.dependencies.services import get_feed_service
from src.shared.schemas.feed import FeedResponse
from src.shared.services.feed_service import FeedService


router = APIRouter()


@router.get("/following", response_model=FeedResponse, response_model_exclude_none=True)
async def get_following_feed(
    user_id: CurrentUser,
    query: FollowingQuery,
    feed_service: FeedService = Depends(get_feed_service),
):
    """
    Anchors from users you follow, most recently updated first.

    An empty page carries meta.emptyReason: NO_FOLLOWING when you follow
    nobody, NO_CONTENT when they have nothing to show, END_OF_FEED past
    the last page.
    """
    page = await feed_service.get_following_feed(
        user_id,
        limit=query.limit,
        cursor=query.cursor,
        include_own=query.include_own,
    )
    return FeedResponse.from_page(page)


@router.get("/discover", response_model=FeedResponse, response_model_exclude_none=True)
async def get_discover_feed(
    user_id: OptionalUser,
    query: DiscoverQuery,
    feed_service: FeedService = Depends(get_feed_service),
):
    """
    Public anchors from people you don't follow.

    Categories:
    - trending: created in the last 48 hours, by engagement score
    - popular: all time, by engagement score
    - recent: newest first
    """
    page = await feed_service.get_discover_feed(
        user_id,
        category=query.category,
        limit=query.limit,
        cursor=query.cursor,
        tag=query.tag,
    )
    return FeedResponse.from_page(page)


@router.get("/tags/{tag}", response_model=FeedResponse, response_model_exclude_none=True)
async def get_tag_feed(
    user_id: OptionalUser,
    query: TagQuery,
    feed_service: FeedService = Depends(get_feed_service),
):
    """Most engaging public anchors carrying a tag."""
    page = await feed_service.get_tag_feed(
        user_id,
        query.tag,
        limit=query.limit,
        cursor=query.cursor,
    )
    return FeedResponse.from_page(page)
