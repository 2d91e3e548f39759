from uuid import UUID

from pydantic import Field

from app.auth.schemas.user import UserProjection
from app.core.datetime_utils import UTCDatetime
from app.core.schemas import CamelModel
from app.messaging.models.message import MessageType


class MessageCreate(CamelModel):
    recipient_id: UUID
    # Upper bound and blank content are checked by the message log
    content: str = Field(..., min_length=1)
    message_type: MessageType = MessageType.TEXT


class MessageOut(CamelModel):
    id: UUID
    sender_id: UUID
    recipient_id: UUID
    content: str
    message_type: MessageType
    read: bool
    read_at: UTCDatetime | None = None
    created_at: UTCDatetime
    sender: UserProjection
    recipient: UserProjection


class SentMessage(CamelModel):
    message: MessageOut
    conversation_id: UUID | None = None
    degraded: bool = False


class MessageListResponse(CamelModel):
    messages: list[MessageOut]


class UnreadCountResponse(CamelModel):
    unread_count: int
