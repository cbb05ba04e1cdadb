"""
Application Configuration

Centralized configuration management using Pydantic settings.
Handles environment variables and application settings.
"""

from typing import List, Optional
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Destinations Service"
    VERSION: str = "0.1.0"
    DEBUG: bool = Field(False, description="Enable debug mode")
    ENVIRONMENT: str = Field("development", description="Deployment environment")
    HOST: str = Field("0.0.0.0", description="Bind host")
    PORT: int = Field(3001, description="Bind port")
    LOG_LEVEL: str = Field("INFO", description="Root log level")
    LOG_FILE: Optional[str] = Field(None, description="Optional JSON log file path")

    # Database
    DATABASE_URL: str = Field(
        "sqlite+aiosqlite:///./destinations.db",
        description="SQLAlchemy async database URL",
    )
    DATABASE_POOL_SIZE: int = Field(5, ge=1)
    DATABASE_MAX_OVERFLOW: int = Field(10, ge=0)
    DATABASE_ECHO: bool = Field(False)
    SLOW_QUERY_THRESHOLD_SECONDS: float = Field(1.0, gt=0)

    # Background jobs
    JOB_WORKER_COUNT: int = Field(1, ge=1, description="Concurrent job workers")
    JOB_TIMEOUT_SECONDS: Optional[float] = Field(
        300.0, description="Per-job execution limit, unset for no limit"
    )
    JOB_RETENTION_SECONDS: Optional[float] = Field(
        3600.0, description="How long finished jobs stay pollable"
    )
    JOB_SHUTDOWN_GRACE_SECONDS: float = Field(5.0, ge=0)
    BATCH_MAX_ITEMS: int = Field(1000, ge=1)

    # Pagination
    DEFAULT_PAGE_SIZE: int = Field(20, ge=1)
    MAX_PAGE_SIZE: int = Field(100, ge=1)

    # CORS
    CORS_ORIGINS: str = Field("*")
    CORS_METHODS: str = Field("*")
    CORS_HEADERS: str = Field("*")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    def get_cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list."""
        if self.CORS_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    def get_cors_methods_list(self) -> List[str]:
        """Get CORS methods as a list."""
        if self.CORS_METHODS == "*":
            return ["*"]
        return [method.strip() for method in self.CORS_METHODS.split(",")]

    def get_cors_headers_list(self) -> List[str]:
        """Get CORS headers as a list."""
        if self.CORS_HEADERS == "*":
            return ["*"]
        return [header.strip() for header in self.CORS_HEADERS.split(",")]


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
