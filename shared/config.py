"""
Shared configuration management for the Employee Directory Access Layer.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.retry import RetryConfig


class BaseConfig(BaseSettings):
    """Base configuration class with common settings.

    Every field is read from an ``ACCESS_``-prefixed environment variable
    (``ACCESS_LOG_LEVEL``, ``ACCESS_EMPLOYEE_API_URL``...) or from ``.env``.
    """

    model_config = SettingsConfigDict(
        env_prefix="ACCESS_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")
    log_json: bool = Field(default=True)

    # Upstream employee API
    employee_api_url: str = Field(default="http://localhost:8112")
    upstream_timeout_seconds: float = Field(default=10.0, gt=0)

    # Rate-limit retry policy for upstream calls
    retry_max_attempts: int = Field(default=4, ge=1)
    retry_base_delay_seconds: float = Field(default=20.0, ge=0)
    retry_multiplier: float = Field(default=1.5, ge=1.0)
    retry_max_delay_seconds: float = Field(default=60.0, ge=0)
    retry_jitter: bool = Field(default=False)

    def retry_config(self) -> RetryConfig:
        """Build the upstream retry configuration."""
        return RetryConfig(
            max_attempts=self.retry_max_attempts,
            base_delay=self.retry_base_delay_seconds,
            max_delay=self.retry_max_delay_seconds,
            exponential_base=self.retry_multiplier,
            jitter=self.retry_jitter
        )


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
