"""psreadiness settings configuration.

Uses Pydantic Settings for type-safe configuration management
with support for environment variables and .env files.

The namespace classification rules (run-level zero names, the label
sync opt-out key) are fixed constants in
:mod:`psreadiness.readiness.classifier` and are deliberately not
exposed here.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from psreadiness.version import __version__


class KubernetesSettings(BaseSettings):
    """Kubernetes connection configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PSR_K8S_",
        extra="ignore",
    )

    in_cluster: bool = Field(
        default=False,
        description="Whether running inside a Kubernetes cluster",
    )
    kubeconfig: str | None = Field(
        default=None,
        description="Path to kubeconfig file (if not in-cluster)",
    )
    context: str | None = Field(
        default=None,
        description="Kubernetes context to use",
    )
    namespace_label_selector: str | None = Field(
        default=None,
        description="Label selector restricting which namespaces are evaluated",
    )
    api_timeout: int = Field(
        default=60,
        ge=1,
        description="Kubernetes API request timeout in seconds",
    )


class ReadinessSettings(BaseSettings):
    """Readiness evaluation and status target configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PSR_READINESS_",
        extra="ignore",
    )

    interval_seconds: float = Field(
        default=4 * 60 * 60,
        gt=0,
        description="Seconds between two evaluation passes",
    )
    initial_delay_seconds: float = Field(
        default=0,
        ge=0,
        description="Delay before the first evaluation pass",
    )

    # Resource whose status receives the conditions
    operator_group: str = Field(default="operator.openshift.io")
    operator_version: str = Field(default="v1")
    operator_plural: str = Field(default="kubeapiservers")
    operator_name: str = Field(
        default="cluster",
        description="Name of the cluster-scoped operator resource",
    )

    @field_validator("operator_group", "operator_version", "operator_plural", "operator_name")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject empty resource coordinates."""
        if not v.strip():
            msg = "Operator resource coordinates must not be empty"
            raise ValueError(msg)
        return v.strip()


class ObservabilitySettings(BaseSettings):
    """Observability configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PSR_OBSERVABILITY_",
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "console"] = Field(
        default="json",
        description="Log output format",
    )

    # Metrics
    metrics_enabled: bool = Field(
        default=True,
        description="Enable Prometheus metrics",
    )
    metrics_port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Port for metrics endpoint",
    )
    metrics_namespace: str = Field(
        default="psreadiness",
        description="Prefix for all exported metric names",
    )


class Settings(BaseSettings):
    """Main psreadiness configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PSR_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    # Application info
    version: str = Field(default=__version__)
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )

    # Nested settings
    kubernetes: KubernetesSettings = Field(default_factory=KubernetesSettings)
    readiness: ReadinessSettings = Field(default_factory=ReadinessSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @property
    def is_production(self) -> bool:
        """Whether the operator runs in the production environment."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Use this function to access settings throughout the application.
    Settings are cached after first load for performance.

    Returns:
        Settings: The application settings instance.
    """
    return Settings()


def reload_settings() -> Settings:
    """Force reload settings (clears cache).

    Use this when you need to reload settings from environment
    or .env file, such as during testing.

    Returns:
        Settings: Fresh settings instance.
    """
    get_settings.cache_clear()
    return get_settings()
