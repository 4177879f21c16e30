"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field, computed_field, model_validator


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )
    allow_credentials: bool = True
    allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    )
    allow_headers: list[str] = Field(default=["*"])


class RedisConfig(BaseModel):
    """Redis configuration model."""

    enabled: bool = Field(default=False, description="Enable Redis service")
    url: str = Field(default="", description="Redis connection URL")
    password: str | None = Field(
        default=None, description="Password for Redis authentication"
    )
    decode_responses: bool = Field(
        default=True, description="Decode Redis responses to strings"
    )
    max_connections: int = Field(default=50, description="Connection pool size")
    socket_timeout: float = Field(default=2.0, description="Socket timeout in seconds")
    socket_connect_timeout: float = Field(
        default=2.0, description="Socket connect timeout in seconds"
    )

    @computed_field
    @property
    def connection_string(self) -> str:
        """Construct the Redis connection string with password if provided."""
        if self.password:
            if "@" in self.url:
                # URL already has auth info
                return self.url
            parts = self.url.split("://", 1)
            if len(parts) == 2:
                scheme, rest = parts
                return f"{scheme}://:{self.password}@{rest}"
        return self.url

    @property
    def sanitized_connection_string(self) -> str:
        """Connection string with the password masked, safe for logs."""
        if self.password:
            return self.connection_string.replace(self.password, "****")
        return self.connection_string


class CacheConfig(BaseModel):
    """Search result cache configuration."""

    enabled: bool = Field(default=True, description="Cache search results")
    search_ttl_seconds: int = Field(
        default=60, ge=1, description="TTL applied to cached search results"
    )
    key_prefix: str = Field(default="user-search", description="Cache key namespace")
    invalidation_tags: list[str] = Field(
        default_factory=lambda: ["users", "user-search", "index"],
        description="Tags flushed after any user or address mutation",
    )
    memory_maxsize: int = Field(
        default=10_000, ge=1, description="Entry cap for the in-memory fallback store"
    )
    l1_enabled: bool = Field(
        default=True, description="Keep a small in-process tier in front of the store"
    )
    l1_maxsize: int = Field(default=256, ge=1, description="Max entries in the L1 tier")
    l1_ttl_seconds: int = Field(
        default=5, ge=1, description="L1 TTL, capped at the search TTL"
    )


class SearchConfig(BaseModel):
    """Search and pagination bounds."""

    default_per_page: int = Field(default=10, description="Page size when none is given")
    min_per_page: int = Field(default=10, ge=1, description="Lower page size bound")
    max_per_page: int = Field(default=50, ge=1, description="Upper page size bound")
    default_collection_limit: int = Field(
        default=20, description="Row cap for collection searches"
    )
    max_collection_limit: int = Field(
        default=100, ge=1, description="Hard cap for collection searches"
    )
    stream_chunk_size: int = Field(
        default=1000, ge=1, description="Rows fetched per keyset chunk"
    )

    @model_validator(mode="after")
    def _check_bounds(self) -> SearchConfig:
        if self.min_per_page > self.max_per_page:
            raise ValueError("search.min_per_page must not exceed search.max_per_page")
        return self


class NotificationConfig(BaseModel):
    """Notification feed configuration."""

    dashboard_limit: int = Field(
        default=6, ge=1, description="Unread notifications shown on the dashboard"
    )
    feed_limit: int = Field(
        default=10, ge=1, description="Unread notifications returned by the feed"
    )


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="json", description="Log format")
    file: str | None = Field(default="logs/app.log", description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./user_directory.db",
        description="Database connection URL",
    )
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    echo: bool = Field(default=False, description="Echo SQL statements")
    password_env_var: str | None = Field(
        default=None,
        description="Environment variable name containing database password",
    )

    @computed_field
    @property
    def connection_string(self) -> str:
        """Construct the database connection string with password if provided."""
        from sqlalchemy.engine import make_url

        base_url = make_url(self.url)
        if not self.password_env_var:
            return self.url

        import os

        password = os.getenv(self.password_env_var)
        if not password:
            logger.warning(
                "Environment variable {} not set; using database URL as-is",
                self.password_env_var,
            )
            return self.url

        return base_url.set(password=password).render_as_string(hide_password=False)

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="localhost", description="Application host")
    port: int = Field(default=8000, description="Application port")
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )

    @property
    def base_url(self) -> str:
        """Construct the base URL from host and port."""
        scheme = "https" if self.environment == "production" else "http"
        return f"{scheme}://{self.host}:{self.port}"


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    redis: RedisConfig = Field(
        default_factory=RedisConfig, description="Redis configuration"
    )
    cache: CacheConfig = Field(
        default_factory=CacheConfig, description="Search cache configuration"
    )
    search: SearchConfig = Field(
        default_factory=SearchConfig, description="Search configuration"
    )
    notifications: NotificationConfig = Field(
        default_factory=NotificationConfig, description="Notification configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
