import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.datetime_utils import utcnow
from app.db.session import Base


class User(Base):
    """
    Developer account.

    Attributes:
        id: Unique UUID primary key
        email: Unique, lower-cased email address
        hashed_password: Argon2 hashed password
        name: Display name
        image: Optional avatar URL
        title: Optional headline ("Backend engineer", ...)
        github_username: Linked GitHub account, if any
        github_avatar_url: Avatar imported from GitHub, if any
        is_active: Whether the account may authenticate
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    name: Mapped[str] = mapped_column(String(50))

    image: Mapped[str | None] = mapped_column(String(500), nullable=True, default=None)
    title: Mapped[str | None] = mapped_column(String(100), nullable=True, default=None)
    github_username: Mapped[str | None] = mapped_column(
        String(100), nullable=True, default=None, index=True
    )
    github_avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True, default=None)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
