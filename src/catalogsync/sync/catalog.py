"""Fetch the full catalog from upstream JSON feeds."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Protocol

import httpx
from .errors import CatalogFetchError
from .models import SourceDocument

logger = logging.getLogger(__name__)


class CatalogFetcher(Protocol):
    async def fetch_all(self, endpoints: Sequence[str]) -> list[SourceDocument]:
        ...


class HttpCatalogFetcher:
    """Fetch every endpoint concurrently and flatten the results in endpoint order.

    Unlike attachments, a single broken endpoint fails the whole fetch: syncing
    a partial catalog would delete every document the missing feed owns.
    """

    def __init__(self, *, client: httpx.AsyncClient) -> None:
        self._client = client

    async def fetch_all(self, endpoints: Sequence[str]) -> list[SourceDocument]:
        outcomes = await asyncio.gather(
            *(self._fetch_endpoint(endpoint) for endpoint in endpoints),
            return_exceptions=True,
        )

        documents: list[SourceDocument] = []
        for endpoint, outcome in zip(endpoints, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, CatalogFetchError):
                    raise outcome
                raise CatalogFetchError(
                    f"unexpected error fetching {endpoint}", retryable=True
                ) from outcome
            documents.extend(outcome)

        logger.info(
            "catalog fetched",
            extra={"endpoints": len(endpoints), "documents": len(documents)},
        )
        return documents

    async def _fetch_endpoint(self, endpoint: str) -> list[SourceDocument]:
        try:
            response = await self._client.get(endpoint)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise CatalogFetchError(
                f"catalog endpoint {endpoint} responded with "
                f"{exc.response.status_code}",
                retryable=exc.response.status_code >= 500,
            ) from exc
        except httpx.HTTPError as exc:
            raise CatalogFetchError(
                f"failed to reach catalog endpoint {endpoint}", retryable=True
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise CatalogFetchError(
                f"catalog endpoint {endpoint} returned invalid JSON", retryable=False
            ) from exc

        if not isinstance(payload, list):
            raise CatalogFetchError(
                f"catalog endpoint {endpoint} did not return a list", retryable=False
            )

        documents: list[SourceDocument] = []
        for position, item in enumerate(payload):
            if not isinstance(item, dict):
                raise CatalogFetchError(
                    f"catalog endpoint {endpoint} item {position} is not an object",
                    retryable=False,
                )
            documents.append(SourceDocument.model_validate(item))
        return documents
