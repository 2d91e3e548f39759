import enum
from typing import Literal
from uuid import UUID

from app.auth.schemas.user import UserSummary
from app.core.datetime_utils import UTCDatetime
from app.core.schemas import CamelModel


class FollowListType(str, enum.Enum):
    FOLLOWERS = "followers"
    FOLLOWING = "following"
    PENDING = "pending"


class FollowDecision(str, enum.Enum):
    ACCEPT = "accept"
    REJECT = "reject"


class FollowCreate(CamelModel):
    target_user_id: UUID


class FollowAction(CamelModel):
    action: Literal["accept", "reject", "unfollow"]


class FollowRequestResult(CamelModel):
    message: str = "Follow request sent"
    status: str
    follow_id: UUID


class FollowActionResult(CamelModel):
    message: str
    status: str | None = None


class FollowListItem(CamelModel):
    """A relationship joined with the counterpart user's projection."""

    id: UUID
    follower_id: UUID
    following_id: UUID
    status: str
    created_at: UTCDatetime
    updated_at: UTCDatetime
    user: UserSummary


class FollowListResponse(CamelModel):
    follows: list[FollowListItem]


class FollowPairStatus(CamelModel):
    is_following: bool
    is_followed_by: bool
    follow_request_status: str | None = None
    follow_id: UUID | None = None
