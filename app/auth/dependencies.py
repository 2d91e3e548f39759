import logging
from typing import Annotated
from uuid import UUID

from fastapi import Cookie, Depends, Header
from sqlalchemy.orm import Session

from app.auth.models.user import User
from app.core import security
from app.core.exceptions import UnauthorizedError
from app.db.session import get_db

logger = logging.getLogger(__name__)


async def get_access_token(
    access_token: Annotated[str | None, Cookie()] = None,
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    """Take the access token from the cookie, falling back to a Bearer header"""
    if access_token:
        return access_token
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
    raise UnauthorizedError("Not authenticated")


async def get_validated_token_payload(
    token: str,
    expected_type: str = "access",
) -> dict:
    """Decode and validate JWT token"""
    payload = security.decode_token(token)

    if payload is None:
        raise UnauthorizedError("Could not validate credentials")

    if payload.get("type") != expected_type:
        raise UnauthorizedError(f"Invalid token type, expected {expected_type}")

    return payload


async def get_current_user_id(
    access_token: str = Depends(get_access_token),
) -> UUID:
    """Stable user id asserted by the identity provider's token"""
    payload = await get_validated_token_payload(access_token, expected_type="access")

    subject = payload.get("sub")
    if not subject:
        raise UnauthorizedError("Could not validate credentials")
    try:
        return UUID(str(subject))
    except ValueError:
        raise UnauthorizedError("Could not validate credentials") from None


async def get_current_user(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> User:
    """Load the token's user; unknown and deactivated accounts are rejected."""
    user = db.get(User, user_id)
    if user is None:
        logger.info("Token subject %s has no user record", user_id)
        raise UnauthorizedError("User not found")
    if not user.is_active:
        raise UnauthorizedError("Account is inactive")
    return user
