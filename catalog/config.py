"""
Application configuration using Pydantic settings.

Usage:
    from catalog.config import get_settings
    settings = get_settings()

For constants, import from catalog.constants:
    from catalog.constants import ItemType, ALLOWED_IMAGE_TYPES
"""

import os
import warnings
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Unified application settings loaded from environment variables and .env file.

    Required for production:
        - JWT_SECRET_KEY (min 32 chars)
        - DATABASE_URL
        - REDIS_HOST / REDIS_PORT (cache degrades to no-op when unreachable)
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App settings
    app_name: str = "Pipe Catalog"
    api_prefix: str = "/api"
    debug: bool = Field(default=False)

    # Database
    database_url: str = Field(default="sqlite:///pipe_catalog.db", validation_alias="DATABASE_URL")
    db_pool_size: int = Field(default=10, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=20, validation_alias="DB_MAX_OVERFLOW")
    db_pool_pre_ping: bool = Field(default=True, validation_alias="DB_POOL_PRE_PING")
    auto_create_tables: bool = Field(default=True, validation_alias="AUTO_CREATE_TABLES")

    # Redis
    redis_host: str = Field(default="localhost", validation_alias="REDIS_HOST")
    redis_port: int = Field(default=6379, validation_alias="REDIS_PORT")
    redis_db: int = Field(default=0, validation_alias="REDIS_DB")
    redis_password: Optional[str] = Field(default=None, validation_alias="REDIS_PASSWORD")
    redis_socket_timeout: float = Field(default=5.0, validation_alias="REDIS_SOCKET_TIMEOUT")

    @property
    def redis_url(self) -> str:
        """Construct Redis URL from components."""
        auth = f":{self.redis_password}@" if self.redis_password else ""
        return f"redis://{auth}{self.redis_host}:{self.redis_port}/{self.redis_db}"

    # Cache TTLs (seconds)
    cache_ttl_list: int = Field(default=300, validation_alias="CACHE_TTL_LIST")
    cache_ttl_detail: int = Field(default=600, validation_alias="CACHE_TTL_DETAIL")
    cache_ttl_search: int = Field(default=300, validation_alias="CACHE_TTL_SEARCH")
    cache_ttl_comments: int = Field(default=300, validation_alias="CACHE_TTL_COMMENTS")
    cache_ttl_stats: int = Field(default=300, validation_alias="CACHE_TTL_STATS")

    # Session / JWT
    jwt_secret_key: str = Field(default="CHANGE_ME", validation_alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256")
    session_expire_minutes: int = Field(default=60 * 24)
    session_cookie_name: str = Field(default="session", validation_alias="SESSION_COOKIE_NAME")
    session_cookie_secure: bool = Field(default=False, validation_alias="SESSION_COOKIE_SECURE")

    # Uploads
    upload_dir: str = Field(default="./public/uploads", validation_alias="UPLOAD_DIR")
    max_upload_size_mb: int = Field(default=5, validation_alias="MAX_UPLOAD_SIZE_MB")
    max_upload_files: int = Field(default=10, validation_alias="MAX_UPLOAD_FILES")
    image_width: int = Field(default=1200)
    image_height: int = Field(default=800)
    image_quality: int = Field(default=85)
    image_format: str = Field(default="webp")

    # Request limits
    max_request_size_mb: int = Field(default=60, validation_alias="MAX_REQUEST_SIZE_MB")

    # CORS
    cors_allowed_origins: str = Field(default="http://localhost:3000", validation_alias="CORS_ALLOWED_ORIGINS")

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        """Validate JWT secret - warns in dev, errors in production."""
        env = os.getenv("ENV", "development")
        is_production = env.lower() in ("production", "prod")

        forbidden_values = ["CHANGE_ME", "changeme", "secret", "supersecret", "development", "test"]
        is_forbidden = v.lower() in [fv.lower() for fv in forbidden_values]
        is_too_short = len(v) < 32

        if is_production:
            if is_forbidden:
                raise ValueError(f"JWT_SECRET_KEY cannot be a default value ('{v}') in production.")
            if is_too_short:
                raise ValueError(
                    f"JWT_SECRET_KEY must be at least 32 characters in production (got {len(v)})."
                )
        elif is_forbidden:
            warnings.warn(
                f"JWT_SECRET_KEY is set to a default value ('{v}'). "
                "This is insecure - set a proper key for production.",
                UserWarning,
                stacklevel=2,
            )

        return v

    @field_validator("image_format")
    @classmethod
    def validate_image_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("jpeg", "png", "webp"):
            raise ValueError("image_format must be one of: jpeg, png, webp")
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


__all__ = ["Settings", "get_settings"]
