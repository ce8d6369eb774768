"""
User Handler

Endpoints scoped to the authenticated user.

Endpoints:
==========
    GET /users/me/following-anchors   anchors you follow, stale first by default
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import CurrentUser
from src.api.dependencies.services import get_follow_tracker
from src.shared.models.enums import FollowingSort
from src.shared.schemas.anchor_follow import FollowingAnchorsResponse
from src.shared.services.anchor_follow_service import FollowVersionTracker


router = APIRouter()


@router.get("/me/following-anchors", response_model=FollowingAnchorsResponse)
async def list_following_anchors(
    user_id: CurrentUser,
    tracker: FollowVersionTracker = Depends(get_follow_tracker),
    page: int = Query(1, description="Page number (clamped to 1..10000)"),
    limit: Optional[int] = Query(None, description="Items per page (1-50, otherwise 20)"),
    sort: FollowingSort = Query(FollowingSort.STALE, description="stale | recent | updated | alphabetical"),
    has_updates: bool = Query(False, alias="hasUpdates", description="Only anchors with unseen changes"),
):
    """
    Anchors you follow.

    The default sort puts the anchors you are furthest behind on first.
    """
    result = await tracker.list_following_anchors(
        user_id,
        page=page,
        limit=limit,
        sort=sort,
        only_with_updates=has_updates,
    )
    return FollowingAnchorsResponse.from_page(result)
