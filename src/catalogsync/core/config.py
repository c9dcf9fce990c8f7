"""Configuration loaders for the sync service.

Leverages pydantic-settings to hydrate runtime configuration from environment
variables, an optional ``.env`` file, or default values. Nested settings classes
mirror infrastructure concerns (search index, upstream catalog, sync tuning).
"""

from __future__ import annotations

from typing import Any

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseAppSettings(BaseSettings):
    """Base settings that looks at environment variables and an optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class OpenSearchSettings(BaseAppSettings):
    """Connection details for the OpenSearch cluster holding the index."""

    model_config = SettingsConfigDict(
        env_prefix="opensearch_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = "https://localhost:9200"
    username: str | None = None
    password: SecretStr | None = None
    verify_tls: bool = True
    timeout_seconds: float = Field(default=30.0, ge=0.1)
    page_size: int = Field(default=1000, ge=1, le=10000)
    scroll_keepalive: str = "1m"

    def auth(self) -> tuple[str, str] | None:
        """Return basic-auth credentials when a username is configured."""

        if not self.username:
            return None
        password = self.password.get_secret_value() if self.password else ""
        return (self.username, password)


class CatalogSettings(BaseAppSettings):
    """Upstream catalog feeds fetched on every sync run."""

    model_config = SettingsConfigDict(
        env_prefix="catalog_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    endpoints: list[str] = Field(default_factory=list)
    limit: int | None = Field(default=None, ge=1)
    timeout_seconds: float = Field(default=30.0, ge=0.1)


class SyncSettings(BaseAppSettings):
    """Tuning knobs for document preparation and reconciliation."""

    model_config = SettingsConfigDict(
        env_prefix="sync_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    index_name: str = "serc"
    max_characters: int = Field(default=32000, ge=1)
    prepare_concurrency: int = Field(default=8, ge=1)
    deadline_seconds: float | None = Field(default=None, gt=0)
    attachment_timeout_seconds: float = Field(default=60.0, ge=0.1)


class TelemetrySettings(BaseAppSettings):
    """Shared telemetry configuration."""

    model_config = SettingsConfigDict(
        env_prefix="otel_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    exporter_endpoint: str | None = None
    exporter_headers: str | None = None
    service_name: str = "catalogsync"


class AppSettings(BaseAppSettings):
    """Top level settings object used by the API and the CLI."""

    app_version: str = "0.1.0"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)

    opensearch: OpenSearchSettings = Field(default_factory=OpenSearchSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    @classmethod
    def load(cls, **kwargs: Any) -> AppSettings:
        """Helper factory that mirrors BaseSettings semantics."""

        return cls(**kwargs)
