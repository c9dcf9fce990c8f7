"""OpenSearch REST adapter used as the document store."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Sequence
from typing import Any, Protocol

import httpx

from catalogsync.core.config import OpenSearchSettings

from .errors import SyncError
from .models import UNIQUE_ID_FIELD, BatchItemFailure, BatchWriteResult

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    async def list_all_ids(self, index: str) -> set[str]:
        ...

    async def batch_write(
        self,
        index: str,
        deletes: Iterable[str],
        upserts: Sequence[tuple[str, dict[str, Any]]],
    ) -> BatchWriteResult:
        ...


class OpenSearchDocumentStore:
    """Read document IDs and submit bulk mutations over the OpenSearch REST API."""

    def __init__(
        self,
        *,
        url: str,
        auth: tuple[str, str] | None = None,
        verify_tls: bool = True,
        timeout: float = 30.0,
        page_size: int = 1000,
        scroll_keepalive: str = "1m",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url.rstrip("/")
        self._page_size = page_size
        self._scroll_keepalive = scroll_keepalive
        self._client = client or httpx.AsyncClient(
            auth=auth, verify=verify_tls, timeout=timeout
        )

    @classmethod
    def from_settings(cls, settings: OpenSearchSettings) -> OpenSearchDocumentStore:
        return cls(
            url=settings.host,
            auth=settings.auth(),
            verify_tls=settings.verify_tls,
            timeout=settings.timeout_seconds,
            page_size=settings.page_size,
            scroll_keepalive=settings.scroll_keepalive,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def list_all_ids(self, index: str) -> set[str]:
        """Return every ``os_id`` in ``index``, draining all scroll pages.

        A missing index is reported as empty so the first run can create it
        through the bulk write.
        """

        try:
            response = await self._client.post(
                f"{self._url}/{index}/_search",
                params={"scroll": self._scroll_keepalive},
                json={
                    "size": self._page_size,
                    "_source": [UNIQUE_ID_FIELD],
                    "sort": ["_doc"],
                },
            )
            if response.status_code == 404:
                logger.info("index does not exist yet", extra={"index": index})
                return set()
            response.raise_for_status()

            ids: set[str] = set()
            body = response.json()
            scroll_id = body.get("_scroll_id")
            hits = _hits(body)
            try:
                while hits:
                    ids.update(_hit_id(hit) for hit in hits)
                    if not scroll_id:
                        break
                    response = await self._client.post(
                        f"{self._url}/_search/scroll",
                        json={"scroll": self._scroll_keepalive, "scroll_id": scroll_id},
                    )
                    response.raise_for_status()
                    body = response.json()
                    scroll_id = body.get("_scroll_id", scroll_id)
                    hits = _hits(body)
            finally:
                if scroll_id:
                    await self._clear_scroll(scroll_id)
        except httpx.HTTPStatusError as exc:
            logger.error(
                "opensearch rejected id listing",
                extra={"status": exc.response.status_code, "body": exc.response.text},
            )
            raise SyncError(
                "failed to read existing documents from the index", retryable=True
            ) from exc
        except httpx.HTTPError as exc:
            raise SyncError("failed to reach opensearch", retryable=True) from exc
        except ValueError as exc:
            raise SyncError(
                "opensearch returned an unreadable search response", retryable=False
            ) from exc

        return ids

    async def batch_write(
        self,
        index: str,
        deletes: Iterable[str],
        upserts: Sequence[tuple[str, dict[str, Any]]],
    ) -> BatchWriteResult:
        """Submit deletes then upserts as one ``_bulk`` request."""

        lines: list[str] = []
        for os_id in deletes:
            lines.append(json.dumps({"delete": {"_index": index, "_id": os_id}}))
        for os_id, body in upserts:
            lines.append(json.dumps({"index": {"_index": index, "_id": os_id}}))
            lines.append(json.dumps(body))
        payload = "\n".join(lines) + "\n"

        try:
            response = await self._client.post(
                f"{self._url}/_bulk",
                content=payload.encode("utf-8"),
                headers={"Content-Type": "application/x-ndjson"},
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "opensearch rejected bulk request",
                extra={"status": exc.response.status_code, "body": exc.response.text},
            )
            raise SyncError("failed to sync data to opensearch", retryable=True) from exc
        except httpx.HTTPError as exc:
            raise SyncError("failed to reach opensearch", retryable=True) from exc
        except ValueError as exc:
            raise SyncError(
                "opensearch returned an unreadable bulk response", retryable=False
            ) from exc

        return BatchWriteResult(response=body, failures=parse_bulk_failures(body))

    async def _clear_scroll(self, scroll_id: str) -> None:
        try:
            await self._client.request(
                "DELETE",
                f"{self._url}/_search/scroll",
                json={"scroll_id": [scroll_id]},
            )
        except httpx.HTTPError:
            logger.warning("failed to clear scroll context", exc_info=True)


def parse_bulk_failures(body: dict[str, Any]) -> list[BatchItemFailure]:
    """Collect the items of a ``_bulk`` response that did not succeed.

    Deleting a document that is already gone (404 ``not_found``) is treated as
    success because the index already matches the plan for that ID.
    """

    if not body.get("errors"):
        return []

    failures: list[BatchItemFailure] = []
    for item in body.get("items", []):
        for action, detail in item.items():
            status = int(detail.get("status", 0))
            if action == "delete" and status == 404 and "error" not in detail:
                continue
            if status >= 300 or "error" in detail:
                failures.append(
                    BatchItemFailure(
                        os_id=str(detail.get("_id", "")),
                        action=action,
                        status=status,
                        error=detail.get("error"),
                    )
                )
    return failures


def _hits(body: dict[str, Any]) -> list[dict[str, Any]]:
    return body.get("hits", {}).get("hits", [])


def _hit_id(hit: dict[str, Any]) -> str:
    source = hit.get("_source") or {}
    return str(source.get(UNIQUE_ID_FIELD) or hit["_id"])
