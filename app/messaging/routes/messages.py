from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request

from app.auth.dependencies import get_current_user
from app.auth.models.user import User
from app.core import redis as redis_module
from app.core.config import settings
from app.core.constants import CONVERSATION_MESSAGES_PAGE_SIZE, MAX_PAGE_SIZE
from app.core.rate_limit import limiter
from app.core.schemas import AckResponse, error_responses
from app.messaging.dependencies import get_messaging_gateway
from app.messaging.schemas.conversation import ConversationListResponse
from app.messaging.schemas.message import (
    MessageCreate,
    MessageListResponse,
    SentMessage,
    UnreadCountResponse,
)
from app.messaging.services.messaging_gateway import MessagingGateway, OpenedConversation
from app.notifications.publisher import notify_message_read, notify_new_message

router = APIRouter()


def _schedule_read_side_effects(
    background_tasks: BackgroundTasks, user_id: UUID, opened: OpenedConversation
) -> None:
    background_tasks.add_task(redis_module.invalidate_unread, str(user_id))
    if opened.marked_read:
        background_tasks.add_task(
            notify_message_read, opened.other_participant_id, opened.conversation_id, user_id
        )


@router.get("", response_model=ConversationListResponse, responses=error_responses(401))
def list_conversations(
    current_user: User = Depends(get_current_user),
    gateway: MessagingGateway = Depends(get_messaging_gateway),
) -> ConversationListResponse:
    return ConversationListResponse(conversations=gateway.list_conversations(current_user.id))


@router.post("", response_model=SentMessage, responses=error_responses(400, 401, 403, 404))
@limiter.limit(settings.MESSAGE_RATE_LIMIT)
def send_message(
    request: Request,
    data: MessageCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    gateway: MessagingGateway = Depends(get_messaging_gateway),
) -> SentMessage:
    result = gateway.send_message(
        current_user.id, data.recipient_id, data.content, data.message_type
    )

    background_tasks.add_task(redis_module.invalidate_unread, str(data.recipient_id))
    background_tasks.add_task(
        notify_new_message,
        data.recipient_id,
        {
            "conversationId": str(result.conversation_id),
            "message": result.message.model_dump(mode="json", by_alias=True),
        },
    )
    return SentMessage(
        message=result.message,
        conversation_id=result.conversation_id,
        degraded=result.degraded,
    )


@router.get("/unread-count", response_model=UnreadCountResponse, responses=error_responses(401))
async def get_unread_count(
    current_user: User = Depends(get_current_user),
    gateway: MessagingGateway = Depends(get_messaging_gateway),
) -> UnreadCountResponse:
    cached = await redis_module.get_cached_unread(str(current_user.id))
    if cached is not None:
        return UnreadCountResponse(unread_count=cached)

    count = gateway.unread_total(current_user.id)
    await redis_module.set_cached_unread(str(current_user.id), count)
    return UnreadCountResponse(unread_count=count)


@router.get(
    "/{conversation_id}",
    response_model=MessageListResponse,
    responses=error_responses(401, 403, 404),
)
def get_conversation_messages(
    conversation_id: UUID,
    background_tasks: BackgroundTasks,
    limit: int = Query(CONVERSATION_MESSAGES_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    skip: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    gateway: MessagingGateway = Depends(get_messaging_gateway),
) -> MessageListResponse:
    opened = gateway.get_or_open_conversation(current_user.id, conversation_id, limit, skip)
    _schedule_read_side_effects(background_tasks, current_user.id, opened)
    return MessageListResponse(messages=opened.messages)


@router.patch(
    "/{conversation_id}", response_model=AckResponse, responses=error_responses(401, 403, 404)
)
def mark_conversation_read(
    conversation_id: UUID,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    gateway: MessagingGateway = Depends(get_messaging_gateway),
) -> AckResponse:
    opened = gateway.mark_conversation_read(current_user.id, conversation_id)
    _schedule_read_side_effects(background_tasks, current_user.id, opened)
    return AckResponse(message="Conversation marked as read")
