"""
Database base module - imports all models for Alembic migration detection.

While the imports appear unused, they register every table on
``Base.metadata`` for the migration environment and for test setup.
"""

from app.auth.models.user import User
from app.db.session import Base
from app.feed.models.post import Post, PostLike
from app.messaging.models.conversation import Conversation
from app.messaging.models.conversation_participant import ConversationParticipant
from app.messaging.models.message import Message
from app.social.models.follow import Follow

__all__ = [
    "Base",
    "User",
    "Follow",
    "Conversation",
    "ConversationParticipant",
    "Message",
    "Post",
    "PostLike",
]
