import json

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str

    REDIS_URL: str = "redis://redis:6379/0"

    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    BACKEND_CORS_ORIGINS: str = '["http://localhost:3000"]'

    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "DevNet API"
    DEBUG: bool = False

    LOG_LEVEL: str = "INFO"
    # None follows DEBUG: console output in debug, JSON otherwise
    LOG_JSON: bool | None = None

    # Messaging
    MESSAGE_MAX_LENGTH: int = 2000
    MESSAGE_PREVIEW_LENGTH: int = 100
    UNREAD_CACHE_TTL_SECONDS: int = 30

    # Feed
    POST_MAX_LENGTH: int = 1000

    # Realtime notifications are published to "<prefix>:<user_id>"
    NOTIFICATION_CHANNEL_PREFIX: str = "notifications"

    RATE_LIMIT_ENABLED: bool = True
    MESSAGE_RATE_LIMIT: str = "30/minute"
    FOLLOW_RATE_LIMIT: str = "20/minute"
    POST_RATE_LIMIT: str = "10/minute"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @property
    def cors_origins(self) -> list[str]:
        if isinstance(self.BACKEND_CORS_ORIGINS, str):
            try:
                parsed: list[str] = json.loads(self.BACKEND_CORS_ORIGINS)
                return parsed
            except json.JSONDecodeError:
                return ["http://localhost:3000"]
        return self.BACKEND_CORS_ORIGINS


settings = Settings()
