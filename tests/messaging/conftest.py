"""
Fixtures for messaging tests.
"""

import pytest
from sqlalchemy.orm import Session

from app.auth.services.user_directory import UserDirectory
from app.messaging.services.conversation_index import ConversationIndex
from app.messaging.services.message_log import MessageLog
from app.messaging.services.messaging_gateway import MessagingGateway
from app.social.models.follow import FollowStatus
from app.social.services.relationship_store import RelationshipStore
from tests.utils.factories import create_follow_factory


@pytest.fixture
def relationships(db_session: Session) -> RelationshipStore:
    return RelationshipStore(db_session, UserDirectory(db_session))


@pytest.fixture
def conversations(db_session: Session) -> ConversationIndex:
    return ConversationIndex(db_session)


@pytest.fixture
def message_log(db_session: Session) -> MessageLog:
    return MessageLog(db_session)


@pytest.fixture
def gateway(relationships, conversations, message_log) -> MessagingGateway:
    return MessagingGateway(relationships, conversations, message_log)


@pytest.fixture
def connected_users(db_session: Session, test_user, other_user):
    """test_user follows other_user (accepted); the reverse edge does not exist."""
    create_follow_factory(db_session, test_user, other_user, FollowStatus.ACCEPTED)
    return test_user, other_user
