"""Download attachments and turn them into plain text."""

from __future__ import annotations

import asyncio
import io
import logging
from typing import Protocol

import httpx
from pypdf import PdfReader

from .errors import AttachmentDecodeError, AttachmentFetchError

logger = logging.getLogger(__name__)


class AttachmentDecoder(Protocol):
    def decode(self, data: bytes) -> str:
        ...


class AttachmentExtractor(Protocol):
    async def extract(self, url: str) -> str | None:
        ...


class PdfTextDecoder:
    """Extract the text layer of every page of a PDF, separated by blank lines."""

    def decode(self, data: bytes) -> str:
        if not data:
            raise AttachmentDecodeError("attachment is empty", retryable=False)
        try:
            reader = PdfReader(io.BytesIO(data))
            pages = [page.extract_text() or "" for page in reader.pages]
        except Exception as exc:  # pypdf raises PyPdfError and assorted builtin errors
            raise AttachmentDecodeError(
                f"unable to parse PDF: {exc}", retryable=False
            ) from exc
        return "\n\n".join(pages)


class PdfAttachmentExtractor:
    """Fetch an attachment over HTTP and decode it, returning ``None`` on failure.

    A broken attachment must never fail the surrounding sync run, so every
    download or decode problem is logged and collapsed to ``None``.
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient,
        decoder: AttachmentDecoder | None = None,
        timeout: float | None = None,
    ) -> None:
        self._client = client
        self._decoder = decoder or PdfTextDecoder()
        self._timeout = timeout

    async def extract(self, url: str) -> str | None:
        try:
            data = await self._download(url)
            return await asyncio.to_thread(self._decoder.decode, data)
        except AttachmentFetchError as exc:
            logger.warning(
                "attachment unavailable; indexing without file text",
                extra={"url": url, "reason": exc.message},
            )
            return None

    async def _download(self, url: str) -> bytes:
        request_kwargs = {} if self._timeout is None else {"timeout": self._timeout}
        try:
            response = await self._client.get(url, **request_kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise AttachmentFetchError(
                f"attachment responded with {exc.response.status_code}",
                retryable=exc.response.status_code >= 500,
            ) from exc
        except httpx.HTTPError as exc:
            raise AttachmentFetchError(
                f"failed to download attachment: {exc}", retryable=True
            ) from exc
        return response.content
