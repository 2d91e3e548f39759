"""Messaging Gateway: relationship-gated sending and conversation reads.

The gateway keeps no state of its own. It is handed the stores it
coordinates, so tests can swap any of them for a double.
"""

from dataclasses import dataclass
from uuid import UUID

import structlog
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import AppError, ForbiddenError
from app.messaging.models.conversation import Conversation
from app.messaging.models.message import MessageType
from app.messaging.schemas.conversation import ConversationOut
from app.messaging.schemas.message import MessageOut
from app.messaging.services.conversation_index import ConversationIndex
from app.messaging.services.message_log import (
    MessageLog,
    validate_content,
    validate_message_type,
)
from app.social.services.relationship_store import RelationshipStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SendResult:
    message: MessageOut
    conversation_id: UUID | None
    # True when the message was stored but the preview/unread bookkeeping failed
    degraded: bool = False


@dataclass(frozen=True)
class OpenedConversation:
    conversation_id: UUID
    other_participant_id: UUID
    messages: list[MessageOut]
    marked_read: int


class MessagingGateway:
    def __init__(
        self,
        relationships: RelationshipStore,
        conversations: ConversationIndex,
        messages: MessageLog,
    ) -> None:
        self.relationships = relationships
        self.conversations = conversations
        self.messages = messages

    def may_message(self, sender_id: UUID, recipient_id: UUID) -> bool:
        """An accepted follow in either direction is enough."""
        return self.relationships.is_following(
            sender_id, recipient_id
        ) or self.relationships.is_following(recipient_id, sender_id)

    def send_message(
        self,
        sender_id: UUID,
        recipient_id: UUID,
        content: str,
        message_type: MessageType | str = MessageType.TEXT,
    ) -> SendResult:
        if not self.may_message(sender_id, recipient_id):
            raise ForbiddenError("You can only message users you follow or who follow you")

        # Rejected content must not leave an empty conversation behind
        content = validate_content(content)
        kind = validate_message_type(message_type)

        conversation = self.conversations.find_or_create(sender_id, recipient_id)
        conversation_id = conversation.id
        message = self.messages.append(sender_id, recipient_id, content, kind)

        try:
            self.conversations.update_last_message(
                conversation_id, message.id, message.content, sender_id
            )
            self.conversations.increment_unread(conversation_id, recipient_id)
        except (SQLAlchemyError, AppError) as exc:
            # The message is already committed; only the cached preview and
            # badge are stale until the reconciliation job runs.
            self.conversations.rollback()
            logger.warning(
                "conversation_cache_update_failed",
                conversation_id=str(conversation_id),
                message_id=str(message.id),
                error=str(exc),
            )
            return SendResult(message=message, conversation_id=conversation_id, degraded=True)

        logger.info(
            "message_sent",
            conversation_id=str(conversation_id),
            message_id=str(message.id),
            message_type=message.message_type.value,
        )
        return SendResult(message=message, conversation_id=conversation_id)

    def get_or_open_conversation(
        self, user_id: UUID, conversation_id: UUID, limit: int = 50, offset: int = 0
    ) -> OpenedConversation:
        """Return a page of messages and mark the conversation read for the viewer."""
        conversation = self._participant_conversation(user_id, conversation_id)
        other_id = conversation.other_participant(user_id)

        messages = self.messages.list_conversation(user_id, other_id, limit, offset)
        marked = self._mark_read(user_id, conversation_id, other_id)

        return OpenedConversation(
            conversation_id=conversation_id,
            other_participant_id=other_id,
            messages=messages,
            marked_read=marked,
        )

    def mark_conversation_read(self, user_id: UUID, conversation_id: UUID) -> OpenedConversation:
        conversation = self._participant_conversation(user_id, conversation_id)
        other_id = conversation.other_participant(user_id)
        marked = self._mark_read(user_id, conversation_id, other_id)
        return OpenedConversation(
            conversation_id=conversation_id,
            other_participant_id=other_id,
            messages=[],
            marked_read=marked,
        )

    def list_conversations(self, user_id: UUID) -> list[ConversationOut]:
        return self.conversations.list_for_user(user_id)

    def unread_total(self, user_id: UUID) -> int:
        return self.messages.unread_total(user_id)

    def _participant_conversation(self, user_id: UUID, conversation_id: UUID) -> Conversation:
        conversation = self.conversations.require(conversation_id)
        if user_id not in conversation.participant_ids:
            raise ForbiddenError("You are not a participant of this conversation")
        return conversation

    def _mark_read(self, user_id: UUID, conversation_id: UUID, other_id: UUID) -> int:
        marked = self.messages.mark_conversation_read(user_id, other_id)
        self.conversations.reset_unread(conversation_id, user_id)
        return marked
