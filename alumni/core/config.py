import logging
from typing import List, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # Application Information
    app_name: str = Field(default="Alumni Community API")
    app_description: str = Field(
        default="Communities, posts, memberships and moderation for alumni networks"
    )
    app_version: str = Field(default="1.0.0")
    app_url: str = Field(default="http://localhost:8000")
    frontend_url: str = Field(default="http://localhost:3000")
    debug: bool = Field(default=True)
    production: bool = Field(default=False)

    # Database Configuration
    database_url: Optional[str] = Field(default=None)  # overrides the db_* fields
    db_connection: str = Field(default="postgresql")
    db_host: str = Field(default="127.0.0.1")
    db_port: int = Field(default=5432)
    db_database: str = Field(default="alumni")
    db_username: str = Field(default="alumni")
    db_password: str = Field(default="alumni")
    db_echo: bool = Field(default=False)

    # Cache Configuration
    cache_driver: str = Field(default="none")  # 'none' or 'redis'
    cache_ttl_seconds: int = Field(default=300)

    # Security Settings
    cors_allowed_origins: List[str] = Field(default=["http://localhost:3000"])
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_storage_uri: str = Field(default="memory://")
    password_hash_rounds: int = Field(default=12)

    # JWT Configuration
    jwt_secret: str = Field(default="your-secret-key-change-in-production")
    jwt_algorithm: str = Field(default="HS256")
    jwt_user_expiration: int = Field(default=7)
    jwt_issuer: str = Field(default="Alumni Community API")

    # Logging
    log_level: str = Field(default="info")
    log_file: str = Field(default="logs/app.log")

    # Pagination
    default_page_size: int = Field(default=20, ge=1)
    max_page_size: int = Field(default=100)

    # Super Admin Defaults
    admin_default_name: str = Field(default="Super Admin")
    admin_default_email: str = Field(default="admin@example.com")
    admin_default_password: str = Field(default="Admin@123")
    admin_default_tenant: str = Field(default="Platform")

    # Redis
    redis_url: str = Field(default="redis://localhost:6379")
    redis_rate_limit: str = Field(default="120/minute")

    # Scheduler
    scheduler_enabled: bool = Field(default=True)
    suspension_sweep_minutes: int = Field(default=15, ge=1, le=59)

    # ============================
    # Generic comma-separated parser
    # ============================
    @staticmethod
    def _parse_csv(value, default):
        if isinstance(value, str):
            items = [x.strip() for x in value.split(",") if x.strip()]
            return items if items else default
        if isinstance(value, list):
            return value
        return default

    @field_validator("cors_allowed_origins", mode="before")
    def validate_cors(cls, v):
        return cls._parse_csv(v, ["http://localhost:3000"])

    @field_validator("cache_driver", mode="before")
    def validate_cache_driver(cls, v):
        value = (v or "none").strip().lower()
        if value not in ("none", "redis"):
            raise ValueError("cache_driver must be 'none' or 'redis'")
        return value

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


def load_settings():
    try:
        settings = Settings()
        logger.info("Settings loaded for %s", settings.app_name)
        return settings
    except ValidationError as e:
        logger.error("Invalid settings: %s", e)
        raise


settings = load_settings()
