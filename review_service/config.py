from __future__ import annotations

import sys
from functools import lru_cache
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings


_DEFAULT_IP_HASH_SECRET = "change-me-ip-hash-secret"
_DEFAULT_JWT_SECRET = "change-me-in-production-use-long-random-string"


def _refuse_default(name: str, env: str) -> None:
    print(
        f"\nFATAL: REVIEWS_{name.upper()} is set to the default value.\n"
        f"   Set REVIEWS_{name.upper()} to a strong random string before "
        f"running in {env}.\n"
        "   Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(48))\"\n",
        file=sys.stderr,
    )
    raise ValueError(
        f"{name} must be changed from default in non-development environments. "
        f"Set REVIEWS_{name.upper()} env var."
    )


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./reviews.db"
    log_sql: bool = False

    # Server
    environment: str = "development"
    log_level: str = "info"
    log_format: str = "json"
    allow_cors_origins: List[str] = ["*"]

    # Review submission
    ip_hash_secret: str = _DEFAULT_IP_HASH_SECRET
    review_cooldown_minutes: int = 5
    comment_max_length: int = 500

    # Admin auth
    jwt_secret: str = _DEFAULT_JWT_SECRET
    jwt_expire_minutes: int = 480  # 8 hours
    login_rate_limit: str = "5/minute"

    @field_validator("ip_hash_secret")
    @classmethod
    def validate_ip_hash_secret(cls, v: str, info) -> str:
        """Client keys are only pseudonymous if the secret is private."""
        env = info.data.get("environment", "development")
        if env != "development" and v == _DEFAULT_IP_HASH_SECRET:
            _refuse_default("ip_hash_secret", env)
        return v

    @field_validator("jwt_secret")
    @classmethod
    def validate_jwt_secret(cls, v: str, info) -> str:
        env = info.data.get("environment", "development")
        if env != "development" and v == _DEFAULT_JWT_SECRET:
            _refuse_default("jwt_secret", env)
        return v

    class Config:
        env_prefix = "REVIEWS_"
        # The secret guards must also see values left at their defaults
        validate_default = True


@lru_cache
def get_settings() -> Settings:
    return Settings()


# Module-level singleton for convenience
settings = get_settings()
