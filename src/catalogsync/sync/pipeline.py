"""Async pipeline running one catalog-to-index sync."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from dataclasses import replace

import httpx
from prometheus_client import Counter, Histogram

from catalogsync.core.config import AppSettings

from .attachments import PdfAttachmentExtractor
from .catalog import CatalogFetcher, HttpCatalogFetcher
from .chunking import ChunkingConfig
from .errors import CatalogSyncError, InvalidDocumentError
from .models import IndexDocument, SkippedDocument, SourceDocument, SyncResult
from .preparer import DocumentPreparer
from .reconciler import Reconciler
from .store import OpenSearchDocumentStore

logger = logging.getLogger(__name__)

SYNC_RUNS = Counter(
    "catalogsync_runs_total",
    "Sync runs by outcome.",
    ["outcome"],
)
SYNC_DOCUMENTS = Counter(
    "catalogsync_documents_total",
    "Documents handled by sync runs.",
    ["action"],
)
SYNC_DURATION = Histogram(
    "catalogsync_run_duration_seconds",
    "Wall-clock duration of sync runs.",
)


class SyncPipeline:
    """Coordinates fetch, preparation, and reconciliation for a single run."""

    def __init__(
        self,
        *,
        fetcher: CatalogFetcher,
        preparer: DocumentPreparer,
        reconciler: Reconciler,
        endpoints: Sequence[str],
        catalog_limit: int | None = None,
        concurrency: int = 8,
        deadline_seconds: float | None = None,
        resources: Sequence[httpx.AsyncClient | OpenSearchDocumentStore] = (),
    ) -> None:
        if concurrency <= 0:
            msg = "concurrency must be greater than zero"
            raise ValueError(msg)
        self._fetcher = fetcher
        self._preparer = preparer
        self._reconciler = reconciler
        self._endpoints = list(endpoints)
        self._catalog_limit = catalog_limit
        self._concurrency = concurrency
        self._deadline_seconds = deadline_seconds
        self._resources = list(resources)

    @classmethod
    def from_settings(
        cls, settings: AppSettings, *, catalog_limit: int | None = None
    ) -> SyncPipeline:
        """Wire HTTP clients and the OpenSearch store from configuration."""

        http_client = httpx.AsyncClient(
            timeout=settings.catalog.timeout_seconds, follow_redirects=True
        )
        store = OpenSearchDocumentStore.from_settings(settings.opensearch)
        preparer = DocumentPreparer(
            extractor=PdfAttachmentExtractor(
                client=http_client,
                timeout=settings.sync.attachment_timeout_seconds,
            ),
            chunking_config=ChunkingConfig(max_characters=settings.sync.max_characters),
        )
        return cls(
            fetcher=HttpCatalogFetcher(client=http_client),
            preparer=preparer,
            reconciler=Reconciler(store=store, index=settings.sync.index_name),
            endpoints=settings.catalog.endpoints,
            catalog_limit=catalog_limit or settings.catalog.limit,
            concurrency=settings.sync.prepare_concurrency,
            deadline_seconds=settings.sync.deadline_seconds,
            resources=(http_client, store),
        )

    async def aclose(self) -> None:
        for resource in self._resources:
            if isinstance(resource, httpx.AsyncClient):
                await resource.aclose()
            else:
                await resource.close()

    async def run(self) -> SyncResult:
        """Execute one sync run and return what changed in the index.

        ``CatalogFetchError`` and ``SyncError`` propagate and abort the run;
        documents that cannot be prepared are reported in ``skipped``.
        """

        started = time.perf_counter()
        try:
            result = await self._run()
        except CatalogSyncError as exc:
            SYNC_RUNS.labels("failed").inc()
            logger.error(
                "sync run failed",
                extra={"error": exc.message, "error_type": type(exc).__name__},
            )
            raise
        finally:
            SYNC_DURATION.observe(time.perf_counter() - started)

        SYNC_RUNS.labels("partial" if result.has_failures else "succeeded").inc()
        SYNC_DOCUMENTS.labels("deleted").inc(len(result.deleted))
        SYNC_DOCUMENTS.labels("indexed").inc(len(result.indexed))
        SYNC_DOCUMENTS.labels("failed").inc(len(result.failures))
        SYNC_DOCUMENTS.labels("skipped").inc(len(result.skipped))
        logger.info(
            "sync run completed",
            extra={
                "index": self._reconciler.index,
                "deleted": len(result.deleted),
                "indexed": len(result.indexed),
                "failed": len(result.failures),
                "skipped": len(result.skipped),
            },
        )
        return result

    async def _run(self) -> SyncResult:
        deadline = None
        if self._deadline_seconds is not None:
            deadline = asyncio.get_running_loop().time() + self._deadline_seconds

        documents = await self._fetcher.fetch_all(self._endpoints)
        if self._catalog_limit is not None:
            documents = documents[: self._catalog_limit]

        prepared, skipped = await self._prepare_all(documents, deadline)
        result = await self._reconciler.sync(prepared)
        return replace(result, skipped=skipped)

    async def _prepare_all(
        self, documents: Sequence[SourceDocument], deadline: float | None
    ) -> tuple[list[IndexDocument], list[SkippedDocument]]:
        semaphore = asyncio.Semaphore(self._concurrency)

        async def prepare_one(document: SourceDocument) -> IndexDocument | SkippedDocument:
            async with semaphore:
                try:
                    return await self._preparer.prepare(document, deadline=deadline)
                except InvalidDocumentError as exc:
                    logger.warning(
                        "skipping invalid document",
                        extra={"type": document.type, "id": document.id, "reason": exc.message},
                    )
                    return SkippedDocument(
                        reason=exc.message, type=document.type, id=document.id
                    )

        outcomes = await asyncio.gather(*(prepare_one(document) for document in documents))

        prepared = [outcome for outcome in outcomes if isinstance(outcome, IndexDocument)]
        skipped = [outcome for outcome in outcomes if isinstance(outcome, SkippedDocument)]
        return prepared, skipped
