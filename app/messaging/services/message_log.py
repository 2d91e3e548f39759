"""Message Log: append-only per-pair message history with read state."""

import logging
from uuid import UUID

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session, aliased

from app.auth.models.user import User
from app.auth.services.user_directory import to_projection
from app.core.config import settings
from app.core.datetime_utils import utcnow
from app.core.exceptions import NotFoundError, ValidationError
from app.core.repository import BaseRepository
from app.messaging.models.message import Message, MessageType
from app.messaging.schemas.message import MessageOut

logger = logging.getLogger(__name__)


def validate_content(content: str | None) -> str:
    if content is None or not content.strip():
        raise ValidationError("Message content is required", field="content")
    if len(content) > settings.MESSAGE_MAX_LENGTH:
        raise ValidationError(
            f"Message cannot be more than {settings.MESSAGE_MAX_LENGTH} characters",
            field="content",
        )
    return content


def validate_message_type(message_type: MessageType | str) -> MessageType:
    try:
        return MessageType(message_type)
    except ValueError:
        raise ValidationError(
            f"Unknown message type: {message_type}", field="messageType"
        ) from None


class MessageLog(BaseRepository[Message]):
    def __init__(self, db: Session) -> None:
        super().__init__(db, Message)

    def append(
        self,
        sender_id: UUID,
        recipient_id: UUID,
        content: str,
        message_type: MessageType | str = MessageType.TEXT,
    ) -> MessageOut:
        """Persist a new unread message and return it with both projections."""
        content = validate_content(content)
        kind = validate_message_type(message_type)

        sender = self.db.get(User, sender_id)
        recipient = self.db.get(User, recipient_id)
        if sender is None or recipient is None:
            raise NotFoundError("User not found", resource="user")

        message = Message(
            sender_id=sender_id,
            recipient_id=recipient_id,
            content=content,
            message_type=kind.value,
            read=False,
        )
        self.add(message)
        self.db.commit()
        self.db.refresh(message)
        return self._to_out(message, sender, recipient)

    def list_conversation(
        self, user_a: UUID, user_b: UUID, limit: int = 50, offset: int = 0
    ) -> list[MessageOut]:
        """Messages exchanged between the pair in either direction, newest first."""
        sender = aliased(User)
        recipient = aliased(User)
        rows = (
            self.db.query(Message, sender, recipient)
            .join(sender, sender.id == Message.sender_id)
            .join(recipient, recipient.id == Message.recipient_id)
            .filter(self.pair_filter(user_a, user_b))
            .order_by(Message.created_at.desc(), Message.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [self._to_out(m, s, r) for m, s, r in rows]

    def mark_conversation_read(self, reader_id: UUID, other_id: UUID) -> int:
        """Mark everything ``other_id`` sent to ``reader_id`` as read.

        Already-read messages are not touched, so repeating the call is
        harmless. Returns the number of messages that changed.
        """
        affected: int = (
            self.db.query(Message)
            .filter(
                Message.sender_id == other_id,
                Message.recipient_id == reader_id,
                Message.read == False,  # noqa: E712
            )
            .update({Message.read: True, Message.read_at: utcnow()}, synchronize_session="evaluate")
        )
        self.db.commit()
        if affected:
            logger.info("Marked %d messages from %s to %s as read", affected, other_id, reader_id)
        return affected

    def unread_total(self, user_id: UUID) -> int:
        """Unread messages addressed to the user across all senders."""
        total: int = (
            self.db.query(func.count(Message.id))
            .filter(Message.recipient_id == user_id, Message.read == False)  # noqa: E712
            .scalar()
            or 0
        )
        return total

    @staticmethod
    def pair_filter(user_a: UUID, user_b: UUID):  # type: ignore[no-untyped-def]
        return or_(
            and_(Message.sender_id == user_a, Message.recipient_id == user_b),
            and_(Message.sender_id == user_b, Message.recipient_id == user_a),
        )

    @staticmethod
    def _to_out(message: Message, sender: User, recipient: User) -> MessageOut:
        return MessageOut(
            id=message.id,
            sender_id=message.sender_id,
            recipient_id=message.recipient_id,
            content=message.content,
            message_type=MessageType(message.message_type),
            read=message.read,
            read_at=message.read_at,
            created_at=message.created_at,
            sender=to_projection(sender),
            recipient=to_projection(recipient),
        )
