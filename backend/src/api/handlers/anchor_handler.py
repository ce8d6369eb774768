"""
Anchor Handler

Handles the anchor detail, like and follow endpoints.

Endpoints:
==========
    GET   /anchors/{id}                       auth optional
    POST  /anchors/{id}/like                  {action: like | unlike}
    POST  /anchors/{id}/follow                {action: follow | unfollow, notifyOnUpdate?}
    GET   /anchors/{id}/follow/status
    PATCH /anchors/{id}/follow/notifications  {notifyOnUpdate}
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from src.api.dependencies import CurrentUser, OptionalUser
from src.api.dependencies.services import get_anchor_service, get_follow_tracker, get_like_service
from src.shared.models.enums import FollowAction
from src.shared.schemas.anchor import AnchorDetailResponse, LikeRequest, LikeResponse
from src.shared.schemas.anchor_follow import (
    FollowRequest,
    FollowResponse,
    FollowStatusResponse,
    NotificationPreferenceRequest,
)
from src.shared.services.anchor_follow_service import FollowVersionTracker
from src.shared.services.anchor_service import AnchorService
from src.shared.services.like_service import LikeService


router = APIRouter()


@router.get("/{anchor_id}", response_model=AnchorDetailResponse)
async def get_anchor(
    anchor_id: UUID,
    user_id: OptionalUser,
    anchor_service: AnchorService = Depends(get_anchor_service),
):
    """
    Get an anchor with all of its items.

    Viewing an anchor you follow clears its "has updates" badge shortly after.
    """
    detail = await anchor_service.get_anchor_detail(anchor_id, user_id)
    return AnchorDetailResponse.from_detail(detail)


@router.post("/{anchor_id}/like", response_model=LikeResponse)
async def like_anchor(
    anchor_id: UUID,
    request: LikeRequest,
    user_id: CurrentUser,
    like_service: LikeService = Depends(get_like_service),
):
    """Like or unlike an anchor. Repeating an action changes nothing."""
    state = await like_service.apply(user_id, anchor_id, request.action)
    return LikeResponse.from_state(state)


@router.post("/{anchor_id}/follow", response_model=FollowResponse)
async def follow_anchor(
    anchor_id: UUID,
    request: FollowRequest,
    user_id: CurrentUser,
    tracker: FollowVersionTracker = Depends(get_follow_tracker),
):
    """
    Follow or unfollow an anchor.

    Following an anchor you already follow only updates notifyOnUpdate.
    """
    if request.action == FollowAction.FOLLOW:
        status = await tracker.follow(user_id, anchor_id, request.notify_on_update)
    else:
        status = await tracker.unfollow(user_id, anchor_id)
    return FollowResponse.from_status(status)


@router.get("/{anchor_id}/follow/status", response_model=FollowStatusResponse)
async def get_follow_status(
    anchor_id: UUID,
    user_id: CurrentUser,
    tracker: FollowVersionTracker = Depends(get_follow_tracker),
):
    """Your follow state for an anchor, with update badges."""
    status = await tracker.get_follow_status(user_id, anchor_id)
    return FollowStatusResponse.from_status(status)


@router.patch("/{anchor_id}/follow/notifications", response_model=FollowResponse)
async def update_follow_notifications(
    anchor_id: UUID,
    request: NotificationPreferenceRequest,
    user_id: CurrentUser,
    tracker: FollowVersionTracker = Depends(get_follow_tracker),
):
    """Turn update notifications for a followed anchor on or off."""
    status = await tracker.set_notifications(user_id, anchor_id, request.notify_on_update)
    return FollowResponse.from_status(status)
