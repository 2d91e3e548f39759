import os
from pathlib import Path

from dotenv import load_dotenv

env_file = Path(__file__).parent.parent / ".env.test"
load_dotenv(env_file)
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-jwt-signing-only")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from app.core import redis as redis_module  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import build_engine, get_db  # noqa: E402
from app.main import app  # noqa: E402
from tests.utils.factories import create_user_factory  # noqa: E402

USE_POSTGRES = os.environ.get("TEST_USE_POSTGRES") == "1"


@pytest.fixture(scope="session")
def test_database_url(tmp_path_factory):
    if not USE_POSTGRES:
        db_path = tmp_path_factory.mktemp("db") / "test.db"
        yield f"sqlite:///{db_path}"
        return

    from testcontainers.postgres import PostgresContainer

    with PostgresContainer("postgres:16", username="test", password="test", dbname="test") as pg:
        host = pg.get_container_host_ip()
        port = pg.get_exposed_port(5432)
        yield f"postgresql://test:test@{host}:{port}/test"


@pytest.fixture(scope="session")
def test_engine(test_database_url):
    engine = build_engine(test_database_url)

    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="session")
def test_session_local(test_engine):
    return sessionmaker(bind=test_engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(test_session_local):
    session = test_session_local()

    session.commit = session.flush

    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(scope="session")
def test_redis_url():
    if not USE_POSTGRES:
        yield None
        return

    from testcontainers.redis import RedisContainer

    with RedisContainer("redis:7") as container:
        host = container.get_container_host_ip()
        port = container.get_exposed_port(6379)
        yield f"redis://{host}:{port}/0"


@pytest.fixture
async def redis_client(test_redis_url):
    """A live Redis client under TEST_USE_POSTGRES=1, otherwise None (cache disabled)."""
    if test_redis_url is None:
        yield None
        return

    from redis.asyncio import Redis

    client = Redis.from_url(test_redis_url, decode_responses=True)
    try:
        yield client
    finally:
        await client.flushdb()
        await client.aclose()


@pytest.fixture
async def test_app(db_session, redis_client):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    redis_module.redis_client = redis_client

    yield app

    redis_module.redis_client = None
    app.dependency_overrides.clear()


@pytest.fixture
async def test_client(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as client:
        yield client


@pytest.fixture
def test_user(db_session):
    return create_user_factory(db_session, email="test@example.com", name="Test User")


@pytest.fixture
def other_user(db_session):
    return create_user_factory(db_session, email="other@example.com", name="Other User")


@pytest.fixture
def third_user(db_session):
    return create_user_factory(db_session, email="third@example.com", name="Third User")


@pytest.fixture
def test_user_token(test_user):
    return create_access_token({"sub": str(test_user.id), "email": test_user.email})


@pytest.fixture
def other_user_token(other_user):
    return create_access_token({"sub": str(other_user.id), "email": other_user.email})


@pytest.fixture
def third_user_token(third_user):
    return create_access_token({"sub": str(third_user.id), "email": third_user.email})
