import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.datetime_utils import utcnow
from app.db.session import Base


class MessageType(str, enum.Enum):
    TEXT = "text"
    CODE = "code"
    FILE = "file"
    IMAGE = "image"


class Message(Base):
    """Direct message between two users. Only ``read``/``read_at`` ever change."""

    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_pair_created", "sender_id", "recipient_id", "created_at"),
        Index("ix_messages_recipient_read", "recipient_id", "read"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4, index=True)
    sender_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    recipient_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))

    content: Mapped[str] = mapped_column(Text)
    message_type: Mapped[str] = mapped_column(String(10), default=MessageType.TEXT.value)

    read: Mapped[bool] = mapped_column(Boolean, default=False)
    read_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    sender = relationship("User", foreign_keys=[sender_id])
    recipient = relationship("User", foreign_keys=[recipient_id])
