"""
Shared configuration management for the Posts Gateway.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


PRODUCTION = "production"
DEVELOPMENT = "development"
LOCAL = "local"


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="POSTS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: str = Field(default=LOCAL)
    log_level: str = Field(default="info")

    # Upstream placeholder API
    upstream_base_url: str = Field(default="https://jsonplaceholder.typicode.com")
    upstream_timeout_seconds: float = Field(default=5.0, gt=0)

    # In-process cache
    cache_ttl_seconds: int = Field(default=100, gt=0)
    cache_sweep_interval_seconds: int = Field(default=120, gt=0)

    def is_production(self) -> bool:
        return self.env == PRODUCTION

    def is_development(self) -> bool:
        return self.env == DEVELOPMENT

    def is_local(self) -> bool:
        return self.env == LOCAL


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
