"""Conversation Index: one conversation per unordered pair of users.

Owns the last-message cache and the per-participant unread counters.
Counters are only ever changed with single UPDATE statements so that
concurrent sends and reads cannot lose updates.
"""

import logging
from typing import cast
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, aliased

from app.auth.models.user import User
from app.auth.services.user_directory import to_projection
from app.core.config import settings
from app.core.datetime_utils import utcnow
from app.core.exceptions import NotFoundError, ValidationError
from app.core.repository import BaseRepository
from app.messaging.models.conversation import Conversation
from app.messaging.models.conversation_participant import ConversationParticipant
from app.messaging.schemas.conversation import ConversationOut

logger = logging.getLogger(__name__)


def normalize_pair(user_a: UUID, user_b: UUID) -> tuple[UUID, UUID]:
    """Order a pair of user ids so (A, B) and (B, A) map to the same key."""
    if user_a == user_b:
        raise ValidationError("A conversation needs two distinct participants")
    low, high = sorted((user_a, user_b), key=str)
    return low, high


class ConversationIndex(BaseRepository[Conversation]):
    def __init__(self, db: Session) -> None:
        super().__init__(db, Conversation)

    def find(self, user_a: UUID, user_b: UUID) -> Conversation | None:
        low, high = normalize_pair(user_a, user_b)
        conversation = (
            self.db.query(Conversation)
            .filter(Conversation.user_low_id == low, Conversation.user_high_id == high)
            .first()
        )
        return cast(Conversation | None, conversation)

    def find_or_create(self, user_a: UUID, user_b: UUID) -> Conversation:
        """Return the pair's conversation, creating it on first use.

        Two racing first sends both try the insert; the loser hits the
        unique pair constraint inside its savepoint and reads the winner.
        """
        existing = self.find(user_a, user_b)
        if existing is not None:
            return existing

        low, high = normalize_pair(user_a, user_b)
        conversation = Conversation(user_low_id=low, user_high_id=high)
        conversation.participants = [
            ConversationParticipant(user_id=low, unread_count=0),
            ConversationParticipant(user_id=high, unread_count=0),
        ]
        try:
            with self.db.begin_nested():
                self.db.add(conversation)
        except IntegrityError:
            winner = self.find(low, high)
            if winner is None:
                raise
            logger.info("Conversation for %s/%s created concurrently, reusing", low, high)
            return winner

        self.db.commit()
        logger.info("Created conversation %s for %s/%s", conversation.id, low, high)
        return conversation

    def require(self, conversation_id: UUID) -> Conversation:
        conversation = self.get_by_id(conversation_id)
        if conversation is None:
            raise NotFoundError("Conversation not found", resource="conversation")
        return conversation

    def update_last_message(
        self,
        conversation_id: UUID,
        message_id: UUID,
        content_preview: str,
        sender_id: UUID,
    ) -> None:
        """Refresh the cached preview. Unread counters are left untouched."""
        conversation = self.require(conversation_id)
        now = utcnow()
        conversation.last_message_id = message_id
        conversation.last_message_content = content_preview[: settings.MESSAGE_PREVIEW_LENGTH]
        conversation.last_message_time = now
        conversation.updated_at = now

        self._ensure_slot(conversation_id, sender_id)
        self.db.commit()

    def increment_unread(self, conversation_id: UUID, recipient_id: UUID) -> None:
        """``unread_count[recipient] += 1``; a missing entry counts as zero."""
        if not self._bump_unread(conversation_id, recipient_id):
            try:
                with self.db.begin_nested():
                    self.db.add(
                        ConversationParticipant(
                            conversation_id=conversation_id,
                            user_id=recipient_id,
                            unread_count=1,
                        )
                    )
            except IntegrityError:
                # Either the slot appeared concurrently or the conversation is gone
                if not self._bump_unread(conversation_id, recipient_id):
                    raise NotFoundError(
                        "Conversation not found", resource="conversation"
                    ) from None
        self.db.commit()

    def reset_unread(self, conversation_id: UUID, user_id: UUID) -> None:
        """``unread_count[user] = 0``; a no-op when it already is."""
        (
            self.db.query(ConversationParticipant)
            .filter(
                ConversationParticipant.conversation_id == conversation_id,
                ConversationParticipant.user_id == user_id,
                ConversationParticipant.unread_count != 0,
            )
            .update({ConversationParticipant.unread_count: 0}, synchronize_session="fetch")
        )
        self.db.commit()

    def unread_counts(self, conversation_id: UUID) -> dict[str, int]:
        rows = (
            self.db.query(ConversationParticipant.user_id, ConversationParticipant.unread_count)
            .filter(ConversationParticipant.conversation_id == conversation_id)
            .all()
        )
        return {str(user_id): count for user_id, count in rows}

    def unread_for(self, conversation_id: UUID, user_id: UUID) -> int:
        return self.unread_counts(conversation_id).get(str(user_id), 0)

    def list_for_user(self, user_id: UUID) -> list[ConversationOut]:
        """Conversations containing the user, most recent message first.

        Conversations without any message yet sort last.
        """
        low_user = aliased(User)
        high_user = aliased(User)
        rows = (
            self.db.query(Conversation, low_user, high_user)
            .join(low_user, low_user.id == Conversation.user_low_id)
            .join(high_user, high_user.id == Conversation.user_high_id)
            .filter((Conversation.user_low_id == user_id) | (Conversation.user_high_id == user_id))
            .order_by(
                Conversation.last_message_time.is_(None),
                Conversation.last_message_time.desc(),
                Conversation.updated_at.desc(),
            )
            .all()
        )
        if not rows:
            return []

        counters: dict[UUID, dict[str, int]] = {conv.id: {} for conv, _, _ in rows}
        for conversation_id, participant_id, count in (
            self.db.query(
                ConversationParticipant.conversation_id,
                ConversationParticipant.user_id,
                ConversationParticipant.unread_count,
            )
            .filter(ConversationParticipant.conversation_id.in_(list(counters)))
            .all()
        ):
            counters[conversation_id][str(participant_id)] = count

        return [
            self._to_out(conv, [low, high], counters[conv.id]) for conv, low, high in rows
        ]

    def describe(self, conversation_id: UUID) -> ConversationOut:
        conversation = self.require(conversation_id)
        users = {
            u.id: u
            for u in self.db.query(User).filter(User.id.in_(conversation.participant_ids)).all()
        }
        participants = [users[uid] for uid in conversation.participant_ids if uid in users]
        return self._to_out(conversation, participants, self.unread_counts(conversation_id))

    def _bump_unread(self, conversation_id: UUID, user_id: UUID) -> bool:
        updated: int = (
            self.db.query(ConversationParticipant)
            .filter(
                ConversationParticipant.conversation_id == conversation_id,
                ConversationParticipant.user_id == user_id,
            )
            .update(
                {ConversationParticipant.unread_count: ConversationParticipant.unread_count + 1},
                synchronize_session="fetch",
            )
        )
        return updated > 0

    def _ensure_slot(self, conversation_id: UUID, user_id: UUID) -> None:
        exists = (
            self.db.query(ConversationParticipant.id)
            .filter(
                ConversationParticipant.conversation_id == conversation_id,
                ConversationParticipant.user_id == user_id,
            )
            .first()
        )
        if exists is not None:
            return
        try:
            with self.db.begin_nested():
                self.db.add(
                    ConversationParticipant(
                        conversation_id=conversation_id, user_id=user_id, unread_count=0
                    )
                )
        except IntegrityError:
            logger.debug("Unread slot for %s in %s already present", user_id, conversation_id)

    @staticmethod
    def _to_out(
        conversation: Conversation, participants: list[User], counters: dict[str, int]
    ) -> ConversationOut:
        return ConversationOut(
            id=conversation.id,
            participants=[to_projection(u) for u in participants],
            last_message_id=conversation.last_message_id,
            last_message_content=conversation.last_message_content,
            last_message_time=conversation.last_message_time,
            unread_count=counters,
            created_at=conversation.created_at,
            updated_at=conversation.updated_at,
        )
