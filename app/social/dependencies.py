from fastapi import Depends
from sqlalchemy.orm import Session

from app.auth.services.user_directory import UserDirectory
from app.db.session import get_db
from app.social.services.relationship_store import RelationshipStore


def get_user_directory(db: Session = Depends(get_db)) -> UserDirectory:
    return UserDirectory(db)


def get_relationship_store(
    db: Session = Depends(get_db),
    users: UserDirectory = Depends(get_user_directory),
) -> RelationshipStore:
    return RelationshipStore(db, users)
