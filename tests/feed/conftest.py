"""
Fixtures for post feed tests.
"""

import pytest
from sqlalchemy.orm import Session

from app.feed.services.post_store import PostStore


@pytest.fixture
def post_store(db_session: Session) -> PostStore:
    return PostStore(db_session)
