"""Runtime configuration for the Folder Notes API."""

from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, Field


class Settings(BaseModel):
    """Settings resolved once at startup and injected into routes."""

    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_db_name: str = "foldernotes"
    init_db: bool = True

    # Single-user login
    app_password: str = "change-me"
    jwt_secret_key: str = "your-secret-key-here-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expiration_days: int = 30

    default_page_size: int = Field(default=12, ge=1)
    max_page_size: int = Field(default=100, ge=1)

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from environment variables."""
        return cls(
            mongodb_url=os.getenv("MONGODB_URL", "mongodb://localhost:27017"),
            mongodb_db_name=os.getenv("MONGODB_DB_NAME", "foldernotes"),
            init_db=os.getenv("INIT_DB", "true").lower() == "true",
            app_password=os.getenv("APP_PASSWORD", "change-me"),
            jwt_secret_key=os.getenv(
                "JWT_SECRET_KEY", "your-secret-key-here-change-in-production"
            ),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            jwt_expiration_days=int(os.getenv("JWT_EXPIRATION_DAYS", "30")),
            default_page_size=int(os.getenv("DEFAULT_PAGE_SIZE", "12")),
            max_page_size=int(os.getenv("MAX_PAGE_SIZE", "100")),
        )


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings (overridable via dependency_overrides)."""
    return Settings.from_env()
