"""Post Store: the network feed and its like toggles."""

import logging
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.auth.models.user import User
from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationError
from app.core.repository import BaseRepository
from app.feed.models.post import Post, PostLike
from app.feed.schemas.post import LikeToggleResult, PostAuthor, PostOut

logger = logging.getLogger(__name__)


def validate_post_content(content: str | None) -> str:
    if content is None or not content.strip():
        raise ValidationError("Content is required", field="content")
    if len(content) > settings.POST_MAX_LENGTH:
        raise ValidationError(
            f"Post content cannot be more than {settings.POST_MAX_LENGTH} characters",
            field="content",
        )
    return content


def to_author(user: User) -> PostAuthor:
    return PostAuthor(
        id=user.id,
        name=user.name,
        image=user.image,
        github_username=user.github_username,
        title=user.title,
    )


class PostStore(BaseRepository[Post]):
    def __init__(self, db: Session) -> None:
        super().__init__(db, Post)

    def create(self, author_id: UUID, content: str) -> PostOut:
        content = validate_post_content(content)
        author = self.db.get(User, author_id)
        if author is None:
            raise NotFoundError("User not found", resource="user")

        post = Post(author_id=author_id, content=content)
        self.add(post)
        self.db.commit()
        self.db.refresh(post)
        logger.info("Post %s created by %s", post.id, author_id)
        return PostOut(
            id=post.id, content=post.content, created_at=post.created_at, author=to_author(author)
        )

    def require(self, post_id: UUID) -> Post:
        post = self.get_by_id(post_id)
        if post is None:
            raise NotFoundError("Post not found", resource="post")
        return post

    def list_feed(
        self,
        viewer_id: UUID,
        limit: int = 50,
        offset: int = 0,
        author_id: UUID | None = None,
    ) -> list[PostOut]:
        """Newest posts first, each with its author, like total and the viewer's like."""
        query = self.db.query(Post, User).join(User, User.id == Post.author_id)
        if author_id is not None:
            query = query.filter(Post.author_id == author_id)
        rows = (
            query.order_by(Post.created_at.desc(), Post.id.desc()).offset(offset).limit(limit).all()
        )
        if not rows:
            return []

        post_ids = [post.id for post, _ in rows]
        totals = dict(
            self.db.query(PostLike.post_id, func.count(PostLike.id))
            .filter(PostLike.post_id.in_(post_ids))
            .group_by(PostLike.post_id)
            .all()
        )
        liked = {
            post_id
            for (post_id,) in self.db.query(PostLike.post_id).filter(
                PostLike.post_id.in_(post_ids), PostLike.user_id == viewer_id
            )
        }
        return [
            PostOut(
                id=post.id,
                content=post.content,
                created_at=post.created_at,
                likes=totals.get(post.id, 0),
                liked=post.id in liked,
                author=to_author(author),
            )
            for post, author in rows
        ]

    def toggle_like(self, post_id: UUID, user_id: UUID) -> LikeToggleResult:
        """Like the post, or take the like back when it is already there."""
        self.require(post_id)
        existing = (
            self.db.query(PostLike)
            .filter(PostLike.post_id == post_id, PostLike.user_id == user_id)
            .first()
        )
        if existing is not None:
            self.db.delete(existing)
            liked = False
        else:
            try:
                with self.db.begin_nested():
                    self.db.add(PostLike(post_id=post_id, user_id=user_id))
            except IntegrityError:
                # A concurrent toggle already recorded the like
                logger.debug("Like on %s by %s already present", post_id, user_id)
            liked = True
        self.db.commit()

        return LikeToggleResult(liked=liked, likes=self.count_likes(post_id))

    def count_likes(self, post_id: UUID) -> int:
        count: int = (
            self.db.query(func.count(PostLike.id)).filter(PostLike.post_id == post_id).scalar()
            or 0
        )
        return count
