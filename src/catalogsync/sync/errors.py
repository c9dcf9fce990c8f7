"""Custom exception types for the sync pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class CatalogSyncError(Exception):
    """Base exception providing retry metadata."""

    message: str
    retryable: bool = True

    def __str__(self) -> str:
        return self.message

    def as_dict(self) -> dict[str, str]:
        return {"message": self.message, "retryable": str(self.retryable)}


class InvalidDocumentError(CatalogSyncError):
    """Raised when a source document lacks the fields needed to index it."""


class AttachmentFetchError(CatalogSyncError):
    """Raised when an attachment cannot be downloaded."""


class AttachmentDecodeError(AttachmentFetchError):
    """Raised when downloaded attachment bytes cannot be turned into text."""


class CatalogFetchError(CatalogSyncError):
    """Raised when an upstream catalog endpoint cannot be fetched or decoded."""


class SyncError(CatalogSyncError):
    """Raised when the document store is unreachable or rejects the batch."""


@dataclass(slots=True)
class PartialBatchFailure(CatalogSyncError):
    """Raised on request when a submitted batch contained failed items."""

    failures: list[Any] = field(default_factory=list)

    def as_dict(self) -> dict[str, str]:
        return {
            "message": self.message,
            "retryable": str(self.retryable),
            "failed_items": str(len(self.failures)),
        }
