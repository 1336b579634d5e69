"""
Application settings using Pydantic.

Provides environment-based configuration loading with NOCWATCH_ prefix.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="NOCWATCH_",
    )

    # Debug
    debug: bool = False
    log_level: str = "INFO"

    # Grafana (alerting backend and CloudWatch proxy)
    grafana_url: str = "http://localhost:3000"
    grafana_token: str | None = None
    grafana_org_id: int | None = None

    # Data sources used for validation and rule queries
    cloudwatch_datasource_uid: str | None = None
    cloudwatch_datasource_name: str = "CloudWatch"
    prometheus_datasource_uid: str | None = None
    prometheus_datasource_name: str = "Prometheus"

    # Templates and output
    templates_dir: str = "templates"
    output_dir: str = "output"

    # Alert defaults
    default_contact_point: str = "default"

    # HTTP client settings
    http_timeout: float = 30.0


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
