"""Best-effort real-time notifications over Redis pub/sub.

Events are fanned out on a per-user channel
(``{NOTIFICATION_CHANNEL_PREFIX}:{user_id}``). A socket layer may
subscribe to these channels; nothing in the API depends on delivery.
"""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

import structlog
from redis.exceptions import RedisError

from app.core import redis as redis_module
from app.core.config import settings
from app.core.constants import (
    EVENT_FOLLOW_ACCEPTED,
    EVENT_FOLLOW_REQUEST,
    EVENT_MESSAGE_READ,
    EVENT_NEW_MESSAGE,
)
from app.core.datetime_utils import utcnow

logger = structlog.get_logger(__name__)


@dataclass
class PublishResult:
    event: str
    receivers: int = 0
    failed: bool = False


def user_channel(user_id: UUID | str) -> str:
    return f"{settings.NOTIFICATION_CHANNEL_PREFIX}:{user_id}"


async def publish_event(user_id: UUID | str, event: str, payload: dict[str, Any]) -> PublishResult:
    envelope = {"event": event, "data": payload, "sentAt": utcnow().isoformat()}
    # "event" is structlog's positional message argument, hence "notification"
    log = logger.bind(notification=event, user_id=str(user_id))
    try:
        receivers = await redis_module.publish(user_channel(user_id), envelope)
    except (RedisError, OSError) as e:
        log.warning("notification_publish_failed", error=str(e))
        return PublishResult(event=event, failed=True)

    log.debug("notification_published", receivers=receivers)
    return PublishResult(event=event, receivers=receivers)


async def notify_new_message(recipient_id: UUID, message: dict[str, Any]) -> PublishResult:
    return await publish_event(recipient_id, EVENT_NEW_MESSAGE, message)


async def notify_message_read(
    sender_id: UUID, conversation_id: UUID, reader_id: UUID
) -> PublishResult:
    return await publish_event(
        sender_id,
        EVENT_MESSAGE_READ,
        {"conversationId": str(conversation_id), "readerId": str(reader_id)},
    )


async def notify_follow_request(
    target_id: UUID, follow_id: UUID, follower_id: UUID
) -> PublishResult:
    return await publish_event(
        target_id,
        EVENT_FOLLOW_REQUEST,
        {"followId": str(follow_id), "followerId": str(follower_id)},
    )


async def notify_follow_accepted(
    follower_id: UUID, follow_id: UUID, following_id: UUID
) -> PublishResult:
    return await publish_event(
        follower_id,
        EVENT_FOLLOW_ACCEPTED,
        {"followId": str(follow_id), "followingId": str(following_id)},
    )
