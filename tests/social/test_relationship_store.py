"""
Unit tests for RelationshipStore.
"""

import uuid

import pytest
from sqlalchemy.orm import Session

from app.auth.services.user_directory import UserDirectory
from app.core.exceptions import (
    AlreadyFollowingError,
    InvalidTargetError,
    NotFoundError,
    RequestAlreadySentError,
    UnauthorizedError,
)
from app.social.models.follow import Follow, FollowStatus
from app.social.schemas.follow import FollowDecision
from app.social.services.relationship_store import RelationshipStore
from tests.utils.factories import create_follow_factory, create_user_factory


class TestRequestFollow:
    """Tests for request_follow method."""

    def test_creates_pending_request(self, store: RelationshipStore, test_user, other_user):
        follow = store.request_follow(test_user.id, other_user.id)

        assert follow.status == FollowStatus.PENDING.value
        assert follow.follower_id == test_user.id
        assert follow.following_id == other_user.id

    def test_rejects_self_follow(self, store: RelationshipStore, test_user):
        with pytest.raises(InvalidTargetError):
            store.request_follow(test_user.id, test_user.id)

    def test_missing_target_is_not_found(self, store: RelationshipStore, test_user):
        with pytest.raises(NotFoundError):
            store.request_follow(test_user.id, uuid.uuid4())

    def test_pending_request_cannot_be_repeated(
        self, store: RelationshipStore, test_user, other_user
    ):
        store.request_follow(test_user.id, other_user.id)

        with pytest.raises(RequestAlreadySentError):
            store.request_follow(test_user.id, other_user.id)

    def test_accepted_follow_cannot_be_requested_again(
        self, db_session: Session, store: RelationshipStore, test_user, other_user
    ):
        create_follow_factory(db_session, test_user, other_user, FollowStatus.ACCEPTED)

        with pytest.raises(AlreadyFollowingError):
            store.request_follow(test_user.id, other_user.id)

    def test_rerequest_after_rejection_reuses_record(
        self, db_session: Session, store: RelationshipStore, test_user, other_user
    ):
        first = store.request_follow(test_user.id, other_user.id)
        store.resolve_request(first.id, other_user.id, FollowDecision.REJECT)

        second = store.request_follow(test_user.id, other_user.id)

        assert second.id == first.id
        assert second.status == FollowStatus.PENDING.value
        assert db_session.query(Follow).filter(Follow.follower_id == test_user.id).count() == 1

    def test_reverse_direction_is_a_separate_edge(
        self, store: RelationshipStore, test_user, other_user
    ):
        outgoing = store.request_follow(test_user.id, other_user.id)
        incoming = store.request_follow(other_user.id, test_user.id)

        assert outgoing.id != incoming.id


class TestConcurrentRequests:
    """A request that lost the insert race reports the winner's state."""

    @staticmethod
    def _store_with_stale_lookup(db_session: Session) -> RelationshipStore:
        loser = RelationshipStore(db_session, UserDirectory(db_session))
        calls = {"n": 0}
        real_find_pair = loser.find_pair

        def stale_first_lookup(follower_id, following_id):
            calls["n"] += 1
            return None if calls["n"] == 1 else real_find_pair(follower_id, following_id)

        loser.find_pair = stale_first_lookup  # type: ignore[method-assign]
        return loser

    @pytest.mark.parametrize(
        ("winner_status", "expected_error"),
        [
            (FollowStatus.PENDING, RequestAlreadySentError),
            (FollowStatus.ACCEPTED, AlreadyFollowingError),
        ],
    )
    def test_loser_gets_conflict(
        self, db_session: Session, test_user, other_user, winner_status, expected_error
    ):
        create_follow_factory(db_session, test_user, other_user, winner_status)
        loser = self._store_with_stale_lookup(db_session)

        with pytest.raises(expected_error):
            loser.request_follow(test_user.id, other_user.id)

        assert db_session.query(Follow).count() == 1

    def test_loser_reopens_rejected_winner(self, db_session: Session, test_user, other_user):
        winner = create_follow_factory(db_session, test_user, other_user, FollowStatus.REJECTED)
        loser = self._store_with_stale_lookup(db_session)

        follow = loser.request_follow(test_user.id, other_user.id)

        assert follow.id == winner.id
        assert follow.status == FollowStatus.PENDING.value
        assert db_session.query(Follow).count() == 1


class TestResolveRequest:
    """Tests for resolve_request method."""

    def test_accept_makes_follow_one_directional(
        self, store: RelationshipStore, test_user, other_user
    ):
        follow = store.request_follow(test_user.id, other_user.id)

        resolution = store.resolve_request(follow.id, other_user.id, FollowDecision.ACCEPT)

        assert resolution.status == FollowStatus.ACCEPTED
        assert resolution.changed is True
        assert store.is_following(test_user.id, other_user.id) is True
        assert store.is_following(other_user.id, test_user.id) is False

    def test_reject(self, store: RelationshipStore, test_user, other_user):
        follow = store.request_follow(test_user.id, other_user.id)

        resolution = store.resolve_request(follow.id, other_user.id, FollowDecision.REJECT)

        assert resolution.status == FollowStatus.REJECTED
        assert store.is_following(test_user.id, other_user.id) is False

    def test_follower_cannot_accept_own_request(
        self, store: RelationshipStore, test_user, other_user
    ):
        follow = store.request_follow(test_user.id, other_user.id)

        with pytest.raises(UnauthorizedError):
            store.resolve_request(follow.id, test_user.id, FollowDecision.ACCEPT)

        assert store.find_pair(test_user.id, other_user.id).status == FollowStatus.PENDING.value

    def test_unknown_relationship(self, store: RelationshipStore, test_user):
        with pytest.raises(NotFoundError):
            store.resolve_request(uuid.uuid4(), test_user.id, FollowDecision.ACCEPT)

    def test_resolving_twice_overwrites_status(
        self, store: RelationshipStore, test_user, other_user
    ):
        follow = store.request_follow(test_user.id, other_user.id)
        store.resolve_request(follow.id, other_user.id, FollowDecision.ACCEPT)

        again = store.resolve_request(follow.id, other_user.id, FollowDecision.ACCEPT)
        flipped = store.resolve_request(follow.id, other_user.id, FollowDecision.REJECT)

        assert again.changed is False
        assert flipped.changed is True
        assert flipped.status == FollowStatus.REJECTED


class TestUnfollow:
    """Tests for unfollow method."""

    def test_follower_can_remove_relationship(
        self, db_session: Session, store: RelationshipStore, test_user, other_user
    ):
        follow = create_follow_factory(db_session, test_user, other_user)

        store.unfollow(follow.id, test_user.id)

        assert db_session.get(Follow, follow.id) is None
        assert store.is_following(test_user.id, other_user.id) is False

    def test_followed_user_cannot_unfollow(
        self, db_session: Session, store: RelationshipStore, test_user, other_user
    ):
        follow = create_follow_factory(db_session, test_user, other_user)

        with pytest.raises(UnauthorizedError):
            store.unfollow(follow.id, other_user.id)

    def test_unknown_relationship(self, store: RelationshipStore, test_user):
        with pytest.raises(NotFoundError):
            store.unfollow(uuid.uuid4(), test_user.id)


class TestListsAndCounts:
    """Tests for list_* and count_* methods."""

    def test_lists_join_counterpart_projection(
        self, db_session: Session, store: RelationshipStore, test_user, other_user, third_user
    ):
        create_follow_factory(db_session, other_user, test_user, FollowStatus.ACCEPTED)
        create_follow_factory(db_session, third_user, test_user, FollowStatus.PENDING)
        create_follow_factory(db_session, test_user, third_user, FollowStatus.ACCEPTED)

        followers = store.list_followers(test_user.id)
        following = store.list_following(test_user.id)
        pending = store.list_pending(test_user.id)

        assert [f.user.id for f in followers] == [other_user.id]
        assert followers[0].user.name == "Other User"
        assert [f.user.id for f in following] == [third_user.id]
        assert [f.user.id for f in pending] == [third_user.id]
        assert pending[0].status == FollowStatus.PENDING.value

    def test_rejected_edges_are_not_listed(
        self, db_session: Session, store: RelationshipStore, test_user, other_user
    ):
        create_follow_factory(db_session, other_user, test_user, FollowStatus.REJECTED)

        assert store.list_followers(test_user.id) == []
        assert store.list_pending(test_user.id) == []

    def test_counts_only_accepted(self, db_session: Session, store: RelationshipStore, test_user):
        for status in (FollowStatus.ACCEPTED, FollowStatus.ACCEPTED, FollowStatus.PENDING):
            create_follow_factory(db_session, create_user_factory(db_session), test_user, status)

        assert store.count_followers(test_user.id) == 2
        assert store.count_following(test_user.id) == 0

    def test_profile_and_listing_share_accepted_counts(
        self, db_session: Session, store: RelationshipStore, test_user, other_user, third_user
    ):
        create_follow_factory(db_session, other_user, test_user, FollowStatus.ACCEPTED)
        create_follow_factory(db_session, third_user, test_user, FollowStatus.PENDING)
        create_follow_factory(db_session, test_user, third_user, FollowStatus.ACCEPTED)

        profile = store.get_profile(test_user.id)
        listed = {u.id: u for u in store.list_users_with_counts()}

        assert (profile.followers_count, profile.following_count) == (1, 1)
        assert profile.email == test_user.email
        assert listed[test_user.id].followers_count == 1
        assert listed[third_user.id].followers_count == 1
        assert listed[other_user.id].following_count == 1
        assert listed[other_user.id].followers_count == 0

    def test_profile_of_unknown_user(self, store: RelationshipStore):
        with pytest.raises(NotFoundError):
            store.get_profile(uuid.uuid4())


class TestGetPairStatus:
    """Tests for get_pair_status method."""

    def test_reports_both_directions(
        self, db_session: Session, store: RelationshipStore, test_user, other_user
    ):
        outgoing = create_follow_factory(db_session, test_user, other_user, FollowStatus.PENDING)
        create_follow_factory(db_session, other_user, test_user, FollowStatus.ACCEPTED)

        status = store.get_pair_status(test_user.id, other_user.id)

        assert status.is_following is False
        assert status.is_followed_by is True
        assert status.follow_request_status == FollowStatus.PENDING.value
        assert status.follow_id == outgoing.id

    def test_no_relationship(self, store: RelationshipStore, test_user, other_user):
        status = store.get_pair_status(test_user.id, other_user.id)

        assert status.is_following is False
        assert status.is_followed_by is False
        assert status.follow_request_status is None
        assert status.follow_id is None
