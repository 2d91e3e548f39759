from fastapi import Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.messaging.services.conversation_index import ConversationIndex
from app.messaging.services.message_log import MessageLog
from app.messaging.services.messaging_gateway import MessagingGateway
from app.social.dependencies import get_relationship_store
from app.social.services.relationship_store import RelationshipStore


def get_conversation_index(db: Session = Depends(get_db)) -> ConversationIndex:
    return ConversationIndex(db)


def get_message_log(db: Session = Depends(get_db)) -> MessageLog:
    return MessageLog(db)


def get_messaging_gateway(
    relationships: RelationshipStore = Depends(get_relationship_store),
    conversations: ConversationIndex = Depends(get_conversation_index),
    messages: MessageLog = Depends(get_message_log),
) -> MessagingGateway:
    """All stores share the request's session through ``get_db``'s dependency cache."""
    return MessagingGateway(relationships, conversations, messages)
