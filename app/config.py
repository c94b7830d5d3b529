import logging
import sys
from functools import lru_cache
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Discord application
    DISCORD_APP_ID: str
    DISCORD_PUBLIC_KEY: str
    DISCORD_BOT_TOKEN: str
    DISCORD_API_BASE_URL: str = "https://discord.com/api/v10"
    REGISTER_COMMANDS_ON_STARTUP: bool = False

    # App config
    DEBUG: bool = False

    # Session store
    SESSION_BACKEND: Literal["memory", "redis"] = "memory"
    SESSION_TTL_SECONDS: int = 900
    SESSION_REAPER_INTERVAL: int = 60
    SESSION_LOCK_TIMEOUT: float = 5.0
    SESSION_LOCK_TTL: float = 5.0

    # Upstash Redis (only used by the redis session backend)
    UPSTASH_REDIS_REST_URL: str | None = None
    UPSTASH_REDIS_REST_TOKEN: str | None = None

    @field_validator("DISCORD_PUBLIC_KEY")
    @classmethod
    def validate_public_key(cls, v: str) -> str:
        try:
            raw = bytes.fromhex(v)
        except ValueError:
            raise ValueError("DISCORD_PUBLIC_KEY must be a hex string")
        if len(raw) != 32:
            raise ValueError("DISCORD_PUBLIC_KEY must be a 32-byte Ed25519 key")
        return v

    @field_validator("SESSION_TTL_SECONDS", "SESSION_REAPER_INTERVAL", "SESSION_LOCK_TIMEOUT", "SESSION_LOCK_TTL")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be a positive number of seconds")
        return v

    @field_validator("UPSTASH_REDIS_REST_URL")
    @classmethod
    def validate_redis_url(cls, v: str | None) -> str | None:
        if v is not None and not v.startswith("https://"):
            raise ValueError("UPSTASH_REDIS_REST_URL must be a valid HTTPS URL")
        return v

    @model_validator(mode="after")
    def validate_redis_backend(self) -> "Settings":
        if self.SESSION_BACKEND == "redis":
            if not self.UPSTASH_REDIS_REST_URL:
                raise ValueError("UPSTASH_REDIS_REST_URL is required for the redis session backend")
            if not self.UPSTASH_REDIS_REST_TOKEN or not self.UPSTASH_REDIS_REST_TOKEN.strip():
                raise ValueError("UPSTASH_REDIS_REST_TOKEN cannot be empty for the redis session backend")
        return self


def configure_logging(debug: bool = False) -> None:
    """Configure logging for the application."""
    log_level = logging.DEBUG if debug else logging.INFO
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    configure_logging(settings.DEBUG)
    logger.info("Settings loaded successfully")
    logger.debug("Discord application: %s", settings.DISCORD_APP_ID)
    logger.debug("Session backend: %s (ttl=%ds)", settings.SESSION_BACKEND, settings.SESSION_TTL_SECONDS)
    return settings
