"""Relationship Store: the follow-request state machine.

Transitions:
    (none)   -> pending    request_follow by the follower
    rejected -> pending    request_follow again, same record
    pending  -> accepted   resolve_request by the followed user
    pending  -> rejected   resolve_request by the followed user
    any      -> (deleted)  unfollow by the follower
"""

import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.auth.models.user import User
from app.auth.schemas.user import UserProfile, UserWithCounts
from app.auth.services.user_directory import UserDirectory, to_summary
from app.core.exceptions import (
    AlreadyFollowingError,
    InvalidTargetError,
    NotFoundError,
    RequestAlreadySentError,
    UnauthorizedError,
)
from app.core.repository import BaseRepository
from app.social.models.follow import Follow, FollowStatus
from app.social.schemas.follow import FollowDecision, FollowListItem, FollowPairStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    follow_id: UUID
    follower_id: UUID
    following_id: UUID
    status: FollowStatus
    changed: bool


class RelationshipStore(BaseRepository[Follow]):
    def __init__(self, db: Session, users: UserDirectory) -> None:
        super().__init__(db, Follow)
        self.users = users

    def request_follow(self, follower_id: UUID, target_id: UUID) -> Follow:
        """Create (or re-open) a pending follow request from follower to target."""
        if follower_id == target_id:
            raise InvalidTargetError()
        self.users.require(target_id)

        existing = self.find_pair(follower_id, target_id)
        if existing is not None:
            return self._reopen(existing)

        follow = Follow(
            follower_id=follower_id,
            following_id=target_id,
            status=FollowStatus.PENDING.value,
        )
        try:
            with self.db.begin_nested():
                self.db.add(follow)
        except IntegrityError:
            # A concurrent request for the same ordered pair won the insert
            winner = self.find_pair(follower_id, target_id)
            if winner is None:
                raise
            return self._reopen(winner)

        self.db.commit()
        self.db.refresh(follow)
        logger.info("Follow request %s: %s -> %s", follow.id, follower_id, target_id)
        return follow

    def resolve_request(
        self, relationship_id: UUID, acting_user_id: UUID, decision: FollowDecision
    ) -> Resolution:
        """Accept or reject a request; only the followed user may do this.

        Re-resolving an already resolved relationship overwrites its status;
        ``changed`` is False when the status was already the requested one.
        """
        follow = self._get_or_404(relationship_id)
        if follow.following_id != acting_user_id:
            raise UnauthorizedError("Only the requested user can respond to this request")

        new_status = (
            FollowStatus.ACCEPTED if decision == FollowDecision.ACCEPT else FollowStatus.REJECTED
        )
        changed = follow.status != new_status.value
        if changed:
            follow.status = new_status.value
            self.db.commit()
            logger.info("Follow %s %s", follow.id, new_status.value)

        return Resolution(
            follow_id=follow.id,
            follower_id=follow.follower_id,
            following_id=follow.following_id,
            status=new_status,
            changed=changed,
        )

    def unfollow(self, relationship_id: UUID, acting_user_id: UUID) -> None:
        follow = self._get_or_404(relationship_id)
        if follow.follower_id != acting_user_id:
            raise UnauthorizedError("Only the follower can remove this relationship")

        self.delete(follow)
        self.db.commit()
        logger.info("Follow %s removed by %s", relationship_id, acting_user_id)

    def is_following(self, follower_id: UUID, following_id: UUID) -> bool:
        return (
            self.db.query(Follow.id)
            .filter(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id,
                Follow.status == FollowStatus.ACCEPTED.value,
            )
            .first()
            is not None
        )

    def find_pair(self, follower_id: UUID, following_id: UUID) -> Follow | None:
        follow: Follow | None = (
            self.db.query(Follow)
            .filter(Follow.follower_id == follower_id, Follow.following_id == following_id)
            .first()
        )
        return follow

    def count_followers(self, user_id: UUID) -> int:
        return self._count_accepted(Follow.following_id == user_id)

    def count_following(self, user_id: UUID) -> int:
        return self._count_accepted(Follow.follower_id == user_id)

    def get_profile(self, user_id: UUID) -> UserProfile:
        user = self.users.require(user_id)
        return UserProfile(
            **to_summary(user).model_dump(),
            followers_count=self.count_followers(user_id),
            following_count=self.count_following(user_id),
            created_at=user.created_at,
        )

    def list_users_with_counts(self) -> list[UserWithCounts]:
        """Every user sorted by name, with accepted follower and following totals."""
        followers = self._accepted_totals(Follow.following_id)
        following = self._accepted_totals(Follow.follower_id)
        return [
            UserWithCounts(
                **to_summary(user).model_dump(),
                followers_count=followers.get(user.id, 0),
                following_count=following.get(user.id, 0),
            )
            for user in self.users.list_by_name()
        ]

    def list_followers(self, user_id: UUID) -> list[FollowListItem]:
        return self._list_joined(
            Follow.following_id == user_id,
            FollowStatus.ACCEPTED,
            counterpart=Follow.follower_id,
        )

    def list_following(self, user_id: UUID) -> list[FollowListItem]:
        return self._list_joined(
            Follow.follower_id == user_id,
            FollowStatus.ACCEPTED,
            counterpart=Follow.following_id,
        )

    def list_pending(self, user_id: UUID) -> list[FollowListItem]:
        """Incoming requests awaiting the user's decision."""
        return self._list_joined(
            Follow.following_id == user_id,
            FollowStatus.PENDING,
            counterpart=Follow.follower_id,
        )

    def get_pair_status(self, viewer_id: UUID, target_id: UUID) -> FollowPairStatus:
        outgoing = self.find_pair(viewer_id, target_id)
        incoming = self.find_pair(target_id, viewer_id)
        return FollowPairStatus(
            is_following=outgoing is not None and outgoing.status == FollowStatus.ACCEPTED.value,
            is_followed_by=incoming is not None and incoming.status == FollowStatus.ACCEPTED.value,
            follow_request_status=outgoing.status if outgoing else None,
            follow_id=outgoing.id if outgoing else None,
        )

    def _reopen(self, existing: Follow) -> Follow:
        if existing.status != FollowStatus.REJECTED.value:
            self._raise_for_existing(existing)

        existing.status = FollowStatus.PENDING.value
        self.db.commit()
        self.db.refresh(existing)
        logger.info("Follow request %s re-sent after rejection", existing.id)
        return existing

    @staticmethod
    def _raise_for_existing(follow: Follow) -> None:
        if follow.status == FollowStatus.ACCEPTED.value:
            raise AlreadyFollowingError()
        if follow.status == FollowStatus.PENDING.value:
            raise RequestAlreadySentError()

    def _count_accepted(self, condition: Any) -> int:
        count: int = (
            self.db.query(func.count(Follow.id))
            .filter(condition, Follow.status == FollowStatus.ACCEPTED.value)
            .scalar()
            or 0
        )
        return count

    def _accepted_totals(self, column: Any) -> dict[UUID, int]:
        rows = (
            self.db.query(column, func.count(Follow.id))
            .filter(Follow.status == FollowStatus.ACCEPTED.value)
            .group_by(column)
            .all()
        )
        return {user_id: count for user_id, count in rows}

    def _get_or_404(self, relationship_id: UUID) -> Follow:
        follow = self.get_by_id(relationship_id)
        if follow is None:
            raise NotFoundError("Follow relationship not found", resource="follow")
        return follow

    def _list_joined(
        self, condition: Any, status: FollowStatus, counterpart: Any
    ) -> list[FollowListItem]:
        rows = (
            self.db.query(Follow, User)
            .join(User, User.id == counterpart)
            .filter(condition, Follow.status == status.value)
            .order_by(Follow.created_at.desc())
            .all()
        )
        return [
            FollowListItem(
                id=follow.id,
                follower_id=follow.follower_id,
                following_id=follow.following_id,
                status=follow.status,
                created_at=follow.created_at,
                updated_at=follow.updated_at,
                user=to_summary(user),
            )
            for follow, user in rows
        ]
