"""
Shared configuration management for the Model Catalog Gateway.

Settings come from the environment (prefix ``CATALOG_``) or a ``.env`` file;
keyword arguments win over both. A few keep the bare names existing deployments already export
(``OPENROUTER_KEY``, ``ADMIN_REFRESH_KEY``, ``IOS_MIN_VERSION``, ``PORT``).
"""

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    env: str = "local"
    log_level: str = "info"

    # Cache store (in-memory when unset)
    redis_url: Optional[str] = None

    # Upstream catalog
    upstream_base_url: str = "https://openrouter.ai/api/v1"
    upstream_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("upstream_api_key", "openrouter_key", "catalog_upstream_api_key"),
    )
    upstream_timeout_seconds: float = 10.0

    # Catalog refresh
    refresh_interval_seconds: float = 120.0
    catalog_single_flight: bool = Field(
        default=False,
        validation_alias="catalog_single_flight",
    )

    # Security
    admin_refresh_key: str = Field(
        default="",
        validation_alias=AliasChoices("admin_refresh_key", "catalog_admin_refresh_key"),
    )

    # Rate limiting
    rate_limit_window_seconds: float = 60.0
    rate_limit_max_requests: int = 60
    trust_forwarded_for: bool = False

    # Client app configuration
    ios_min_version: str = Field(
        default="1.0",
        validation_alias=AliasChoices("ios_min_version", "catalog_ios_min_version"),
    )


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int = Field(default=8080, validation_alias=AliasChoices("port", "catalog_port"))
    host: str = "0.0.0.0"


def get_config(service_name: str, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, **overrides)
