from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.asyncio import Redis
from redis.exceptions import RedisError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.auth.routes import auth, users
from app.core import redis as redis_module
from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.core.log_config import RequestLoggingMiddleware, setup_logging
from app.core.rate_limit import limiter
from app.db.session import SessionLocal
from app.feed.routes import posts as posts_routes
from app.messaging.routes import messages as messages_routes
from app.social.routes import follow as follow_routes

setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("connecting_to_redis")
    redis_module.redis_client = Redis.from_url(
        settings.REDIS_URL, decode_responses=True, encoding="utf-8"
    )

    try:
        await redis_module.redis_client.ping()
        logger.info("redis_connected")
    except (RedisError, OSError) as e:
        # Cache and notifications degrade gracefully without Redis
        logger.error("redis_connection_failed", error=str(e))

    yield

    logger.info("closing_redis")
    if redis_module.redis_client:
        await redis_module.redis_client.aclose()
        redis_module.redis_client = None
    logger.info("redis_closed")


app = FastAPI(
    title=settings.PROJECT_NAME,
    debug=settings.DEBUG,
    lifespan=lifespan,
    description="Developer network API: follows, direct messages and the post feed",
    version="1.0.0",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]
register_exception_handlers(app, debug=settings.DEBUG)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(auth.router, prefix=f"{settings.API_V1_PREFIX}/auth", tags=["authentication"])
app.include_router(users.router, prefix=f"{settings.API_V1_PREFIX}/users", tags=["users"])
app.include_router(
    follow_routes.router,
    prefix=f"{settings.API_V1_PREFIX}/follow",
    tags=["follow"],
)
app.include_router(
    messages_routes.router,
    prefix=f"{settings.API_V1_PREFIX}/messages",
    tags=["messages"],
)
app.include_router(
    posts_routes.router,
    prefix=f"{settings.API_V1_PREFIX}/posts",
    tags=["posts"],
)


@app.get("/")
async def root() -> dict[str, str]:
    return {"message": settings.PROJECT_NAME, "version": "1.0.0", "status": "running"}


async def _check_redis() -> str:
    if redis_module.redis_client is None:
        return "unknown"
    try:
        await redis_module.redis_client.ping()
    except (RedisError, OSError):
        return "unhealthy"
    return "healthy"


def _check_database() -> str:
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        return "unhealthy"
    return "healthy"


@app.get("/health")
async def health_check() -> dict[str, str]:
    # Redis backs only the unread cache and fan-out, so its loss degrades rather than fails
    checks = {"redis": await _check_redis(), "database": _check_database()}
    if checks["database"] != "healthy":
        overall = "unhealthy"
    elif checks["redis"] != "healthy":
        overall = "degraded"
    else:
        overall = "healthy"
    return {"status": overall, **checks}
