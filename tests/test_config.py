"""Tests for settings validation."""

import pytest
from pydantic import ValidationError

from app.config import Settings

BASE = {
    "DISCORD_APP_ID": "1",
    "DISCORD_PUBLIC_KEY": "ab" * 32,
    "DISCORD_BOT_TOKEN": "token",
}


class TestSettings:
    def test_defaults(self):
        settings = Settings(**BASE)

        assert settings.SESSION_BACKEND == "memory"
        assert settings.SESSION_TTL_SECONDS == 900
        assert settings.SESSION_LOCK_TTL == 5.0
        assert settings.DISCORD_API_BASE_URL == "https://discord.com/api/v10"

    def test_public_key_must_be_hex(self):
        with pytest.raises(ValidationError, match="hex"):
            Settings(**{**BASE, "DISCORD_PUBLIC_KEY": "zz" * 32})

    def test_public_key_must_be_32_bytes(self):
        with pytest.raises(ValidationError, match="32-byte"):
            Settings(**{**BASE, "DISCORD_PUBLIC_KEY": "ab" * 16})

    def test_ttl_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(**{**BASE, "SESSION_TTL_SECONDS": 0})

    def test_lock_ttl_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(**{**BASE, "SESSION_LOCK_TTL": 0})

    def test_redis_backend_requires_credentials(self, monkeypatch):
        monkeypatch.delenv("UPSTASH_REDIS_REST_URL", raising=False)
        monkeypatch.delenv("UPSTASH_REDIS_REST_TOKEN", raising=False)

        with pytest.raises(ValidationError, match="UPSTASH_REDIS_REST_URL is required"):
            Settings(**{**BASE, "SESSION_BACKEND": "redis"})

    def test_redis_url_must_be_https(self):
        with pytest.raises(ValidationError, match="HTTPS"):
            Settings(
                **{
                    **BASE,
                    "SESSION_BACKEND": "redis",
                    "UPSTASH_REDIS_REST_URL": "http://example.upstash.io",
                    "UPSTASH_REDIS_REST_TOKEN": "t",
                }
            )

    def test_redis_backend_accepts_credentials(self):
        settings = Settings(
            **{
                **BASE,
                "SESSION_BACKEND": "redis",
                "UPSTASH_REDIS_REST_URL": "https://example.upstash.io",
                "UPSTASH_REDIS_REST_TOKEN": "t",
            }
        )

        assert settings.SESSION_BACKEND == "redis"
