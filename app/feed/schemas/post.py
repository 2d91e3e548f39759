from uuid import UUID

from pydantic import Field

from app.auth.schemas.user import UserProjection
from app.core.datetime_utils import UTCDatetime
from app.core.schemas import CamelModel


class PostCreate(CamelModel):
    # Upper bound and blank content are checked by the post store
    content: str = Field(..., min_length=1)


class PostAuthor(UserProjection):
    title: str | None = None


class PostOut(CamelModel):
    id: UUID
    content: str
    created_at: UTCDatetime
    likes: int = 0
    # Whether the requesting user has liked the post
    liked: bool = False
    author: PostAuthor


class LikeToggleResult(CamelModel):
    liked: bool
    likes: int
