"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
The gateway route table has its own file but is parsed with the models here.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(default=["*"])
    allow_credentials: bool = False
    allow_methods: list[str] = Field(default=["*"])
    allow_headers: list[str] = Field(default=["*"])


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="plain", description="Log format")
    file: str | None = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./bookstore.db",
        description="Database connection URL",
    )
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    echo: bool = Field(default=False, description="Echo SQL statements")
    create_tables: bool = Field(
        default=True, description="Create missing tables on application startup"
    )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @computed_field
    @property
    def connection_string(self) -> str:
        """Render the URL with its password visible so it can be handed to the engine."""
        from sqlalchemy.engine import make_url

        return make_url(self.url).render_as_string(hide_password=False)


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="0.0.0.0", description="Application host")
    port: int = Field(default=8000, description="Application port")
    expose_error_details: bool = Field(
        default=True,
        description="Return the fault message in 500 response bodies",
    )
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )


class HostAndPort(BaseModel):
    """Downstream address of a gateway route."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    host: str
    port: int


class GatewayRoute(BaseModel):
    """One entry of the gateway route table.

    Keys may be written in snake_case or in camelCase
    (``upstreamPathTemplate``). Each route names a single downstream
    address.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    upstream_path_template: str
    upstream_http_method: list[str] = Field(
        default_factory=list, description="Allowed methods; empty means any"
    )
    downstream_path_template: str
    downstream_scheme: Literal["http", "https"] = "http"
    downstream_host_and_port: HostAndPort

    @field_validator("upstream_path_template", "downstream_path_template")
    @classmethod
    def _leading_slash(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError(f"path template must start with '/': {value!r}")
        return value

    @field_validator("upstream_http_method", mode="before")
    @classmethod
    def _normalize_methods(cls, value: str | list[str] | None) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        return [method.upper() for method in value]


class GatewayConfig(BaseModel):
    """Gateway process configuration."""

    host: str = Field(default="0.0.0.0", description="Gateway host")
    port: int = Field(default=8080, description="Gateway port")
    routes_file: str = Field(
        default="gateway.yaml", description="Path to the route table file"
    )
    timeout_seconds: float = Field(
        default=30.0, description="Timeout for proxied requests"
    )
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    gateway: GatewayConfig = Field(
        default_factory=GatewayConfig, description="Gateway configuration"
    )
