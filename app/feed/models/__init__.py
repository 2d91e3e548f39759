from app.feed.models.post import Post, PostLike

__all__ = ["Post", "PostLike"]
