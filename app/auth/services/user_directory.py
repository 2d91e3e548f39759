"""User Directory: profile records consumed by the follow and messaging core."""

import logging
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.auth.models.user import User
from app.auth.schemas.user import RegisterRequest, UserProjection, UserSummary
from app.core.exceptions import ConflictError, NotFoundError
from app.core.repository import BaseRepository
from app.core.security import get_password_hash

logger = logging.getLogger(__name__)


def to_projection(user: User) -> UserProjection:
    return UserProjection(
        id=user.id,
        name=user.name,
        image=user.image,
        github_username=user.github_username,
    )


def to_summary(user: User) -> UserSummary:
    return UserSummary(
        id=user.id,
        name=user.name,
        email=user.email,
        image=user.image,
        title=user.title,
        github_username=user.github_username,
        github_avatar_url=user.github_avatar_url,
    )


class UserDirectory(BaseRepository[User]):
    def __init__(self, db: Session) -> None:
        super().__init__(db, User)

    def find_by_id(self, user_id: UUID) -> UserProjection:
        """Return the display projection of a user or raise NotFoundError."""
        return to_projection(self.require(user_id))

    def find_by_email(self, email: str) -> UserProjection:
        user = self.db.query(User).filter(User.email == email.strip().lower()).first()
        if user is None:
            raise NotFoundError("User not found", resource="user")
        return to_projection(user)

    def require(self, user_id: UUID) -> User:
        user = self.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found", resource="user")
        return user

    def register(self, data: RegisterRequest) -> User:
        email = data.email.strip().lower()
        if self.db.query(User.id).filter(User.email == email).first() is not None:
            raise ConflictError("User already exists", resource="user")

        user = User(
            name=data.name,
            email=email,
            hashed_password=get_password_hash(data.password),
        )
        try:
            with self.db.begin_nested():
                self.db.add(user)
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            raise ConflictError("Email already exists", resource="user") from None

        self.db.commit()
        self.db.refresh(user)
        logger.info("Registered user %s", user.id)
        return user

    def list_by_name(self) -> list[User]:
        users: list[User] = self.db.query(User).order_by(func.lower(User.name), User.id).all()
        return users
