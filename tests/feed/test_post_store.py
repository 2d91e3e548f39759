"""
Tests for the post store: feed listing and like toggles.
"""

import uuid
from datetime import timedelta

import pytest

from app.core.datetime_utils import utcnow
from app.core.exceptions import NotFoundError, ValidationError
from app.feed.models.post import PostLike
from tests.utils.factories import create_post_factory


class TestCreatePost:
    def test_create_returns_author_projection(self, post_store, test_user):
        post = post_store.create(test_user.id, "Shipped the new API today")

        assert post.content == "Shipped the new API today"
        assert post.likes == 0
        assert post.liked is False
        assert post.author.id == test_user.id
        assert post.author.name == test_user.name

    @pytest.mark.parametrize("content", ["", "   \n\t", "a" * 1001])
    def test_rejects_invalid_content(self, post_store, test_user, content):
        with pytest.raises(ValidationError) as exc_info:
            post_store.create(test_user.id, content)

        assert exc_info.value.details == {"field": "content"}

    def test_accepts_content_at_limit(self, post_store, test_user):
        post = post_store.create(test_user.id, "a" * 1000)

        assert len(post.content) == 1000

    def test_unknown_author(self, post_store):
        with pytest.raises(NotFoundError):
            post_store.create(uuid.uuid4(), "Hello")


class TestListFeed:
    def test_newest_first(self, post_store, db_session, test_user, other_user):
        now = utcnow()
        older = create_post_factory(
            db_session, test_user, "older", created_at=now - timedelta(hours=1)
        )
        newer = create_post_factory(db_session, other_user, "newer", created_at=now)

        feed = post_store.list_feed(test_user.id)

        assert [p.id for p in feed] == [newer.id, older.id]

    def test_filter_by_author(self, post_store, db_session, test_user, other_user):
        create_post_factory(db_session, test_user)
        mine = create_post_factory(db_session, other_user)

        feed = post_store.list_feed(test_user.id, author_id=other_user.id)

        assert [p.id for p in feed] == [mine.id]

    def test_limit_and_offset(self, post_store, db_session, test_user):
        now = utcnow()
        posts = [
            create_post_factory(db_session, test_user, created_at=now - timedelta(minutes=i))
            for i in range(3)
        ]

        page = post_store.list_feed(test_user.id, limit=1, offset=1)

        assert [p.id for p in page] == [posts[1].id]

    def test_likes_and_viewer_flag(
        self, post_store, db_session, test_user, other_user, third_user
    ):
        post = create_post_factory(db_session, other_user, liked_by=[test_user, third_user])

        as_liker = post_store.list_feed(test_user.id)[0]
        as_author = post_store.list_feed(other_user.id)[0]

        assert as_liker.id == post.id
        assert as_liker.likes == 2
        assert as_liker.liked is True
        assert as_author.likes == 2
        assert as_author.liked is False

    def test_empty_feed(self, post_store, test_user):
        assert post_store.list_feed(test_user.id) == []


class TestToggleLike:
    def test_like_then_unlike(self, post_store, db_session, test_user, other_user):
        post = create_post_factory(db_session, other_user)

        liked = post_store.toggle_like(post.id, test_user.id)
        unliked = post_store.toggle_like(post.id, test_user.id)

        assert (liked.liked, liked.likes) == (True, 1)
        assert (unliked.liked, unliked.likes) == (False, 0)
        assert db_session.query(PostLike).filter(PostLike.post_id == post.id).count() == 0

    def test_counts_other_likers(self, post_store, db_session, test_user, other_user, third_user):
        post = create_post_factory(db_session, other_user, liked_by=[third_user])

        result = post_store.toggle_like(post.id, test_user.id)

        assert result.liked is True
        assert result.likes == 2

    def test_unknown_post(self, post_store, test_user):
        with pytest.raises(NotFoundError) as exc_info:
            post_store.toggle_like(uuid.uuid4(), test_user.id)

        assert exc_info.value.message == "Post not found"
