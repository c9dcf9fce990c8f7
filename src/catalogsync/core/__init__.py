"""Configuration, logging, and HTTP plumbing shared by the API and the CLI."""

from . import config, errors, logging
from .config import (
    AppSettings,
    CatalogSettings,
    OpenSearchSettings,
    SyncSettings,
    TelemetrySettings,
)
from .errors import ConflictError, CoreError, SyncFailedError
from .logging import configure_logging, get_logger

__all__ = [
    "config",
    "errors",
    "logging",
    "configure_logging",
    "get_logger",
    "AppSettings",
    "CatalogSettings",
    "OpenSearchSettings",
    "SyncSettings",
    "TelemetrySettings",
    "CoreError",
    "ConflictError",
    "SyncFailedError",
]
