from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from app.core.constants import NAME_MAX_LENGTH, PASSWORD_MIN_LENGTH
from app.core.datetime_utils import UTCDatetime
from app.core.schemas import CamelModel


class UserProjection(CamelModel):
    """Display projection joined onto relationships, conversations and messages."""

    id: UUID
    name: str
    image: str | None = None
    github_username: str | None = None


class UserSummary(UserProjection):
    email: str
    title: str | None = None
    github_avatar_url: str | None = None


class UserWithCounts(UserSummary):
    followers_count: int = 0
    following_count: int = 0


class UserProfile(UserWithCounts):
    created_at: UTCDatetime


class UserProfileResponse(CamelModel):
    user: UserProfile


class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=128)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Name must not be blank")
        return stripped


class RegisteredUser(CamelModel):
    id: UUID
    name: str
    email: str
    created_at: UTCDatetime


class RegisterResponse(CamelModel):
    message: str
    user: RegisteredUser
