"""
Unit tests for UserDirectory.
"""

import uuid

import pytest
from sqlalchemy.orm import Session

from app.auth.schemas.user import RegisterRequest
from app.auth.services.user_directory import UserDirectory
from app.core.exceptions import ConflictError, NotFoundError
from tests.utils.factories import create_user_factory


class TestLookups:
    def test_find_by_id_returns_projection(self, db_session: Session):
        user = create_user_factory(db_session, name="Grace", github_username="ghopper")

        projection = UserDirectory(db_session).find_by_id(user.id)

        assert projection.id == user.id
        assert projection.name == "Grace"
        assert projection.github_username == "ghopper"
        assert projection.model_dump(by_alias=True)["githubUsername"] == "ghopper"

    def test_find_by_email_is_case_insensitive(self, db_session: Session):
        user = create_user_factory(db_session, email="grace@example.com")

        assert UserDirectory(db_session).find_by_email("Grace@Example.com ").id == user.id

    def test_unknown_user(self, db_session: Session):
        directory = UserDirectory(db_session)

        with pytest.raises(NotFoundError):
            directory.find_by_id(uuid.uuid4())
        with pytest.raises(NotFoundError):
            directory.find_by_email("nobody@example.com")


class TestRegister:
    def test_normalizes_email_and_hashes_password(self, db_session: Session):
        data = RegisterRequest(name="Linus", email="Linus@Example.com", password="secret1")

        user = UserDirectory(db_session).register(data)

        assert user.email == "linus@example.com"
        assert user.hashed_password != "secret1"

    def test_duplicate_email(self, db_session: Session, test_user):
        data = RegisterRequest(name="Again", email=test_user.email, password="secret1")

        with pytest.raises(ConflictError):
            UserDirectory(db_session).register(data)


class TestListing:
    def test_ordered_by_name_ignoring_case(self, db_session: Session):
        create_user_factory(db_session, email="z@example.com", name="zed")
        create_user_factory(db_session, email="a@example.com", name="Ada")
        create_user_factory(db_session, email="m@example.com", name="mia")

        names = [user.name for user in UserDirectory(db_session).list_by_name()]

        assert names == ["Ada", "mia", "zed"]
