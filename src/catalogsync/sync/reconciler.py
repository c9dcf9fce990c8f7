"""Diff the index against a fresh catalog snapshot and apply the difference."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from .models import IndexDocument, SyncPlan, SyncResult
from .store import DocumentStore

logger = logging.getLogger(__name__)


def plan_sync(existing_ids: Iterable[str], documents: Sequence[IndexDocument]) -> SyncPlan:
    """Compute the mutations that make the index equal ``documents``.

    Every prepared document is upserted (full overwrite); only IDs present in
    the index but absent from the snapshot are deleted. Deletes are sorted so
    that identical inputs always produce the same batch.
    """

    fresh_ids = {document.os_id for document in documents}
    deletes = sorted(set(existing_ids) - fresh_ids)
    return SyncPlan(deletes=deletes, upserts=list(documents))


class Reconciler:
    """Apply a :class:`SyncPlan` to one index of a document store."""

    def __init__(self, *, store: DocumentStore, index: str) -> None:
        self._store = store
        self._index = index

    @property
    def index(self) -> str:
        return self._index

    async def sync(self, documents: Sequence[IndexDocument]) -> SyncResult:
        """Converge the index onto ``documents``.

        Raises ``SyncError`` when the store cannot be read or the batch cannot
        be submitted. Items rejected inside an accepted batch are returned in
        ``SyncResult.failures``.
        """

        existing_ids = await self._store.list_all_ids(self._index)
        plan = plan_sync(existing_ids, documents)

        if plan.is_empty:
            logger.info("index already empty and catalog empty; nothing to write")
            return SyncResult(deleted=[], indexed=[])

        written = await self._store.batch_write(
            self._index,
            plan.deletes,
            [(document.os_id, document.to_body()) for document in plan.upserts],
        )

        if written.failures:
            logger.warning(
                "batch completed with failed items",
                extra={"index": self._index, "failed": len(written.failures)},
            )

        return SyncResult(
            deleted=plan.deletes,
            indexed=plan.upsert_ids,
            results=written.response,
            failures=written.failures,
        )
