"""Rebuild conversation previews and unread counters from the message log.

Sends whose bookkeeping step failed leave a conversation with a stale
preview or badge. This job recomputes both from ``messages`` and is safe
to run repeatedly.
"""

import sys
from dataclasses import dataclass, field
from pathlib import Path
from uuid import UUID

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.session import get_db
from app.messaging.models import Conversation, ConversationParticipant, Message
from app.messaging.services.message_log import MessageLog


@dataclass
class ReconcileReport:
    checked: int = 0
    previews_fixed: int = 0
    counters_fixed: int = 0
    fixed_conversations: list[UUID] = field(default_factory=list)


def _unread_from(db: Session, sender_id: UUID, recipient_id: UUID) -> int:
    count: int = (
        db.query(func.count(Message.id))
        .filter(
            Message.sender_id == sender_id,
            Message.recipient_id == recipient_id,
            Message.read == False,  # noqa: E712
        )
        .scalar()
        or 0
    )
    return count


def reconcile_conversations(db: Session, dry_run: bool = True) -> ReconcileReport:
    report = ReconcileReport()
    log = MessageLog(db)

    for conversation in db.query(Conversation).order_by(Conversation.created_at).all():
        report.checked += 1
        low, high = conversation.participant_ids
        dirty = False

        latest = (
            db.query(Message)
            .filter(log.pair_filter(low, high))
            .order_by(Message.created_at.desc(), Message.id.desc())
            .first()
        )
        if latest is not None and conversation.last_message_id != latest.id:
            report.previews_fixed += 1
            dirty = True
            if not dry_run:
                conversation.last_message_id = latest.id
                conversation.last_message_content = latest.content[
                    : settings.MESSAGE_PREVIEW_LENGTH
                ]
                conversation.last_message_time = latest.created_at

        slots = {p.user_id: p for p in conversation.participants}
        for user_id, other_id in ((low, high), (high, low)):
            expected = _unread_from(db, other_id, user_id)
            slot = slots.get(user_id)
            current = slot.unread_count if slot is not None else 0
            if current == expected:
                continue
            report.counters_fixed += 1
            dirty = True
            if dry_run:
                continue
            if slot is None:
                conversation.participants.append(
                    ConversationParticipant(user_id=user_id, unread_count=expected)
                )
            else:
                slot.unread_count = expected

        if dirty:
            report.fixed_conversations.append(conversation.id)

    if not dry_run:
        db.commit()
    return report


def main() -> None:
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Reconcile conversation caches")
    parser.add_argument(
        "--execute", action="store_true", help="Write repairs (default: dry run)"
    )
    args = parser.parse_args()

    dry_run = not args.execute
    db = next(get_db())
    try:
        print(f"{'[DRY RUN] ' if dry_run else ''}Reconciling conversations...")
        report = reconcile_conversations(db, dry_run=dry_run)
        print(f"   Conversations checked: {report.checked}")
        print(f"   Previews out of date: {report.previews_fixed}")
        print(f"   Unread counters out of date: {report.counters_fixed}")
        print()
        print("=" * 60)
        if dry_run:
            print("Dry run completed. Use --execute to apply changes.")
        else:
            print("Conversations reconciled.")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
