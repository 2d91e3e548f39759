from uuid import UUID

from app.auth.schemas.user import UserProjection
from app.core.datetime_utils import UTCDatetime
from app.core.schemas import CamelModel


class ConversationOut(CamelModel):
    id: UUID
    participants: list[UserProjection]
    last_message_id: UUID | None = None
    last_message_content: str | None = None
    last_message_time: UTCDatetime | None = None
    # Keyed by user id (as string); missing users read as zero
    unread_count: dict[str, int]
    created_at: UTCDatetime
    updated_at: UTCDatetime


class ConversationListResponse(CamelModel):
    conversations: list[ConversationOut]
