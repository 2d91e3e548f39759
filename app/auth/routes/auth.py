import logging

from fastapi import APIRouter, Depends, Request, status

from app.auth.schemas.user import RegisteredUser, RegisterRequest, RegisterResponse
from app.auth.services.user_directory import UserDirectory
from app.core.rate_limit import limiter
from app.core.schemas import error_responses
from app.social.dependencies import get_user_directory

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses=error_responses(400),
)
@limiter.limit("5/minute")
def register(
    request: Request,
    data: RegisterRequest,
    users: UserDirectory = Depends(get_user_directory),
) -> RegisterResponse:
    user = users.register(data)
    return RegisterResponse(
        message="User created successfully",
        user=RegisteredUser(
            id=user.id, name=user.name, email=user.email, created_at=user.created_at
        ),
    )
