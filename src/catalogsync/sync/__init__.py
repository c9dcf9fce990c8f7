"""Catalog fetching, document preparation, and index reconciliation."""

from .chunking import ChunkingConfig, chunk_text, split_text
from .errors import (
    AttachmentDecodeError,
    AttachmentFetchError,
    CatalogFetchError,
    CatalogSyncError,
    InvalidDocumentError,
    PartialBatchFailure,
    SyncError,
)
from .identity import assign_id
from .models import IndexDocument, SourceDocument, SyncPlan, SyncResult
from .pipeline import SyncPipeline
from .reconciler import Reconciler, plan_sync
from .text import normalize_text

__all__ = [
    "AttachmentDecodeError",
    "AttachmentFetchError",
    "CatalogFetchError",
    "CatalogSyncError",
    "ChunkingConfig",
    "IndexDocument",
    "InvalidDocumentError",
    "PartialBatchFailure",
    "Reconciler",
    "SourceDocument",
    "SyncError",
    "SyncPipeline",
    "SyncPlan",
    "SyncResult",
    "assign_id",
    "chunk_text",
    "normalize_text",
    "plan_sync",
    "split_text",
]
