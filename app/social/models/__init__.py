from app.social.models.follow import Follow, FollowStatus

__all__ = ["Follow", "FollowStatus"]
