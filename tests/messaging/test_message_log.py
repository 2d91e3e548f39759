"""
Unit tests for MessageLog.
"""

import uuid

import pytest

from app.core.exceptions import NotFoundError, ValidationError
from app.messaging.models.message import MessageType
from app.messaging.services.message_log import MessageLog


class TestAppend:
    """Tests for append method."""

    def test_persists_unread_message_with_projections(
        self, message_log: MessageLog, test_user, other_user
    ):
        message = message_log.append(test_user.id, other_user.id, "Hello")

        assert message.read is False
        assert message.read_at is None
        assert message.message_type == MessageType.TEXT
        assert message.sender.id == test_user.id
        assert message.sender.name == "Test User"
        assert message.recipient.id == other_user.id

    def test_accepts_code_messages(self, message_log: MessageLog, test_user, other_user):
        message = message_log.append(test_user.id, other_user.id, "print(1)", "code")

        assert message.message_type == MessageType.CODE

    @pytest.mark.parametrize("content", ["", "   ", "\n\t"])
    def test_rejects_blank_content(self, message_log: MessageLog, test_user, other_user, content):
        with pytest.raises(ValidationError):
            message_log.append(test_user.id, other_user.id, content)

    def test_length_boundary(self, message_log: MessageLog, test_user, other_user):
        message = message_log.append(test_user.id, other_user.id, "a" * 2000)
        assert len(message.content) == 2000

        with pytest.raises(ValidationError):
            message_log.append(test_user.id, other_user.id, "a" * 2001)

    def test_rejects_unknown_type(self, message_log: MessageLog, test_user, other_user):
        with pytest.raises(ValidationError):
            message_log.append(test_user.id, other_user.id, "hi", "video")

    def test_unknown_recipient(self, message_log: MessageLog, test_user):
        with pytest.raises(NotFoundError):
            message_log.append(test_user.id, uuid.uuid4(), "hi")


class TestListConversation:
    def test_both_directions_newest_first(
        self, message_log: MessageLog, test_user, other_user, third_user
    ):
        message_log.append(test_user.id, other_user.id, "first")
        message_log.append(other_user.id, test_user.id, "second")
        message_log.append(test_user.id, other_user.id, "third")
        message_log.append(test_user.id, third_user.id, "elsewhere")

        messages = message_log.list_conversation(other_user.id, test_user.id)

        assert [m.content for m in messages] == ["third", "second", "first"]

    def test_pagination(self, message_log: MessageLog, test_user, other_user):
        for i in range(5):
            message_log.append(test_user.id, other_user.id, f"m{i}")

        page = message_log.list_conversation(test_user.id, other_user.id, limit=2, offset=1)

        assert [m.content for m in page] == ["m3", "m2"]


class TestReadState:
    def test_mark_conversation_read_only_touches_incoming(
        self, message_log: MessageLog, test_user, other_user
    ):
        message_log.append(other_user.id, test_user.id, "to test user 1")
        message_log.append(other_user.id, test_user.id, "to test user 2")
        message_log.append(test_user.id, other_user.id, "to other user")

        affected = message_log.mark_conversation_read(test_user.id, other_user.id)

        assert affected == 2
        assert message_log.unread_total(test_user.id) == 0
        assert message_log.unread_total(other_user.id) == 1
        incoming = [
            m
            for m in message_log.list_conversation(test_user.id, other_user.id)
            if m.recipient_id == test_user.id
        ]
        assert all(m.read and m.read_at is not None for m in incoming)

    def test_mark_read_is_idempotent(self, message_log: MessageLog, test_user, other_user):
        message_log.append(other_user.id, test_user.id, "hi")

        assert message_log.mark_conversation_read(test_user.id, other_user.id) == 1
        assert message_log.mark_conversation_read(test_user.id, other_user.id) == 0
