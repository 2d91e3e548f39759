from fastapi import Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.feed.services.post_store import PostStore


def get_post_store(db: Session = Depends(get_db)) -> PostStore:
    return PostStore(db)
