from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request

from app.auth.dependencies import get_current_user
from app.auth.models.user import User
from app.core.config import settings
from app.core.exceptions import UnauthorizedError, ValidationError
from app.core.rate_limit import limiter
from app.core.schemas import AckResponse, error_responses
from app.notifications.publisher import notify_follow_accepted, notify_follow_request
from app.social.dependencies import get_relationship_store
from app.social.models.follow import FollowStatus
from app.social.schemas.follow import (
    FollowAction,
    FollowActionResult,
    FollowCreate,
    FollowDecision,
    FollowListResponse,
    FollowListType,
    FollowPairStatus,
    FollowRequestResult,
)
from app.social.services.relationship_store import RelationshipStore

router = APIRouter()


@router.post("", response_model=FollowRequestResult, responses=error_responses(400, 401, 404))
@limiter.limit(settings.FOLLOW_RATE_LIMIT)
def send_follow_request(
    request: Request,
    data: FollowCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    store: RelationshipStore = Depends(get_relationship_store),
) -> FollowRequestResult:
    follow = store.request_follow(current_user.id, data.target_user_id)
    background_tasks.add_task(
        notify_follow_request, data.target_user_id, follow.id, current_user.id
    )
    return FollowRequestResult(status=follow.status, follow_id=follow.id)


@router.get("", response_model=FollowListResponse, responses=error_responses(400, 401))
def list_follows(
    requested_type: str | None = Query(None, alias="type"),
    target_user_id: UUID | None = Query(None, alias="userId"),
    current_user: User = Depends(get_current_user),
    store: RelationshipStore = Depends(get_relationship_store),
) -> FollowListResponse:
    try:
        list_type = FollowListType(requested_type)
    except ValueError:
        raise ValidationError("Invalid type parameter", field="type") from None

    owner_id = target_user_id or current_user.id
    if list_type == FollowListType.FOLLOWERS:
        follows = store.list_followers(owner_id)
    elif list_type == FollowListType.FOLLOWING:
        follows = store.list_following(owner_id)
    else:
        if owner_id != current_user.id:
            raise UnauthorizedError("Pending requests are only visible to their recipient")
        follows = store.list_pending(owner_id)

    return FollowListResponse(follows=follows)


@router.get("/status", response_model=FollowPairStatus, responses=error_responses(400, 401))
def get_follow_status(
    target_user_id: UUID | None = Query(None, alias="targetUserId"),
    current_user: User = Depends(get_current_user),
    store: RelationshipStore = Depends(get_relationship_store),
) -> FollowPairStatus:
    if target_user_id is None:
        raise ValidationError("targetUserId is required", field="targetUserId")
    return store.get_pair_status(current_user.id, target_user_id)


@router.patch(
    "/{follow_id}",
    response_model=FollowActionResult,
    response_model_exclude_none=True,
    responses=error_responses(400, 401, 404),
)
def update_follow(
    follow_id: UUID,
    data: FollowAction,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    store: RelationshipStore = Depends(get_relationship_store),
) -> FollowActionResult:
    if data.action == "unfollow":
        store.unfollow(follow_id, current_user.id)
        return FollowActionResult(message="Unfollowed successfully")

    decision = FollowDecision(data.action)
    resolution = store.resolve_request(follow_id, current_user.id, decision)
    if resolution.changed and resolution.status == FollowStatus.ACCEPTED:
        background_tasks.add_task(
            notify_follow_accepted,
            resolution.follower_id,
            resolution.follow_id,
            resolution.following_id,
        )
    return FollowActionResult(
        message=f"Follow request {decision.value}ed successfully",
        status=resolution.status.value,
    )


@router.delete("/{follow_id}", response_model=AckResponse, responses=error_responses(401, 404))
def delete_follow(
    follow_id: UUID,
    current_user: User = Depends(get_current_user),
    store: RelationshipStore = Depends(get_relationship_store),
) -> AckResponse:
    store.unfollow(follow_id, current_user.id)
    return AckResponse(message="Unfollowed successfully")
