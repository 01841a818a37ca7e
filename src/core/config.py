"""
Core configuration module using Pydantic Settings.

This module defines all application settings loaded from environment variables.
All configuration must go through this Settings class - NO hardcoded values.
"""

from typing import Literal

from pydantic import Field, PostgresDsn, RedisDsn, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are loaded from .env file or environment variables.
    Settings are validated using Pydantic with type hints.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    app_name: str = Field(default="Ticketdesk")
    version: str = Field(default="0.1.0")
    description: str = Field(
        default="Ticket and report management API with role-based permissions"
    )
    environment: Literal["development", "staging", "production"] = Field(default="development")
    debug: bool = Field(default=False)

    # -------------------------------------------------------------------------
    # Server Configuration
    # -------------------------------------------------------------------------
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)
    reload: bool = Field(default=False)

    # -------------------------------------------------------------------------
    # Security Settings
    # -------------------------------------------------------------------------
    secret_key: str = Field(
        ...,
        min_length=32,
        description="Secret key for JWT signing. Must be at least 32 characters."
    )

    # JWT Token Configuration
    access_token_expire_minutes: int = Field(default=60 * 12, ge=1, le=60 * 24 * 7)

    # Argon2id Password Hashing Configuration
    argon2_time_cost: int = Field(default=2, ge=1, le=10)
    argon2_memory_cost: int = Field(default=65536, ge=8192)  # 64 MB
    argon2_parallelism: int = Field(default=4, ge=1, le=16)

    # -------------------------------------------------------------------------
    # Database Configuration
    # -------------------------------------------------------------------------
    database_url: PostgresDsn = Field(
        ...,
        description="PostgreSQL connection string with asyncpg driver"
    )

    # Connection Pool Settings
    db_pool_size: int = Field(default=5, ge=1, le=50)
    db_max_overflow: int = Field(default=10, ge=0, le=100)
    db_pool_recycle: int = Field(default=3600, ge=300)  # Seconds
    db_pool_timeout: int = Field(default=30, ge=1)  # Seconds
    db_pool_pre_ping: bool = Field(default=True)

    # -------------------------------------------------------------------------
    # Redis Configuration
    # -------------------------------------------------------------------------
    redis_url: RedisDsn = Field(
        ...,
        description="Redis connection string for rate limiting"
    )

    # -------------------------------------------------------------------------
    # CORS Settings
    # -------------------------------------------------------------------------
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        description="Comma-separated list of allowed CORS origins"
    )
    cors_allow_credentials: bool = Field(default=True)

    # -------------------------------------------------------------------------
    # Rate Limiting
    # -------------------------------------------------------------------------
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_default: str = Field(default="1000/hour")
    rate_limit_login: str = Field(default="5/15minute")
    rate_limit_register: str = Field(default="3/hour")
    rate_limit_password_change: str = Field(default="3/hour")
    rate_limit_public: str = Field(default="60/minute")
    rate_limit_storage_uri: str | None = Field(
        default=None,
        description="Override limiter storage (defaults to redis_url)",
    )

    # -------------------------------------------------------------------------
    # Logging Configuration
    # -------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_format: Literal["json", "console"] = Field(default="console")
    log_file_enabled: bool = Field(default=True)
    log_file_path: str = Field(default="logs/app.log")
    log_file_max_bytes: int = Field(default=10485760)  # 10 MB
    log_file_backup_count: int = Field(default=5)

    # -------------------------------------------------------------------------
    # Audit Logging
    # -------------------------------------------------------------------------
    audit_log_enabled: bool = Field(default=True)

    # -------------------------------------------------------------------------
    # Domain Defaults
    # -------------------------------------------------------------------------
    default_role: str = Field(
        default="USER",
        description="Primary role assigned to self-registered users",
    )
    saved_view_preserve_unknown_keys: bool = Field(
        default=False,
        description="Keep filter keys outside the canonical shape when reconciling",
    )
    max_page_size: int = Field(
        default=100, ge=1, le=500, description="Upper bound for the pageSize query parameter"
    )
    public_report_categories: str = Field(
        default="Lost and found",
        description="Comma-separated category names whose reports appear in the public feed",
    )

    # -------------------------------------------------------------------------
    # Testing Configuration
    # -------------------------------------------------------------------------
    test_database_url: PostgresDsn | None = Field(
        default=None,
        description="Separate database for testing"
    )

    @field_validator("default_role")
    @classmethod
    def normalize_default_role(cls, v: str) -> str:
        """Role names are stored upper-case."""
        return v.strip().upper()

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def cors_origins_list(self) -> list[str]:
        """Get parsed CORS origins as list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def public_report_category_names(self) -> list[str]:
        """Categories exposed by the anonymous report feed."""
        return [name.strip() for name in self.public_report_categories.split(",") if name.strip()]

    @property
    def database_url_str(self) -> str:
        """Get database URL as string."""
        return str(self.database_url)

    @property
    def redis_url_str(self) -> str:
        """Get Redis URL as string."""
        return str(self.redis_url)

    @property
    def limiter_storage_uri(self) -> str:
        """Storage backend for slowapi, Redis unless overridden."""
        return self.rate_limit_storage_uri or self.redis_url_str


# Singleton instance of settings
# Import this instance throughout the application
settings = Settings()
