from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from app.auth.dependencies import get_current_user
from app.auth.models.user import User
from app.core.config import settings
from app.core.constants import FEED_PAGE_SIZE, MAX_PAGE_SIZE
from app.core.rate_limit import limiter
from app.core.schemas import error_responses
from app.feed.dependencies import get_post_store
from app.feed.schemas.post import LikeToggleResult, PostCreate, PostOut
from app.feed.services.post_store import PostStore

router = APIRouter()


@router.get("", response_model=list[PostOut], responses=error_responses(401))
def list_posts(
    limit: int = Query(FEED_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    skip: int = Query(0, ge=0),
    author_id: UUID | None = Query(None, alias="authorId"),
    current_user: User = Depends(get_current_user),
    store: PostStore = Depends(get_post_store),
) -> list[PostOut]:
    return store.list_feed(current_user.id, limit, skip, author_id)


@router.post("", response_model=PostOut, responses=error_responses(400, 401))
@limiter.limit(settings.POST_RATE_LIMIT)
def create_post(
    request: Request,
    data: PostCreate,
    current_user: User = Depends(get_current_user),
    store: PostStore = Depends(get_post_store),
) -> PostOut:
    return store.create(current_user.id, data.content)


@router.post(
    "/{post_id}/like", response_model=LikeToggleResult, responses=error_responses(401, 404)
)
def toggle_like(
    post_id: UUID,
    current_user: User = Depends(get_current_user),
    store: PostStore = Depends(get_post_store),
) -> LikeToggleResult:
    return store.toggle_like(post_id, current_user.id)
