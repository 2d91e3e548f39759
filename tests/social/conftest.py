"""
Fixtures for follow relationship tests.
"""

import pytest
from sqlalchemy.orm import Session

from app.auth.services.user_directory import UserDirectory
from app.social.services.relationship_store import RelationshipStore


@pytest.fixture
def store(db_session: Session) -> RelationshipStore:
    return RelationshipStore(db_session, UserDirectory(db_session))
