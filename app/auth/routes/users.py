from uuid import UUID

from fastapi import APIRouter, Depends

from app.auth.schemas.user import UserProfileResponse, UserWithCounts
from app.core.schemas import error_responses
from app.social.dependencies import get_relationship_store
from app.social.services.relationship_store import RelationshipStore

router = APIRouter()


@router.get("", response_model=list[UserWithCounts])
def list_users(
    store: RelationshipStore = Depends(get_relationship_store),
) -> list[UserWithCounts]:
    return store.list_users_with_counts()


@router.get("/{user_id}", response_model=UserProfileResponse, responses=error_responses(404))
def get_user_profile(
    user_id: UUID, store: RelationshipStore = Depends(get_relationship_store)
) -> UserProfileResponse:
    return UserProfileResponse(user=store.get_profile(user_id))
