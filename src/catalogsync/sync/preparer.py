"""Per-document transformation from catalog record to index payload."""

from __future__ import annotations

import asyncio
import logging

from .attachments import AttachmentExtractor
from .chunking import ChunkingConfig, chunk_text
from .identity import assign_id
from .models import IndexDocument, SourceDocument
from .text import normalize_text

logger = logging.getLogger(__name__)


class DocumentPreparer:
    """Assign the namespaced ID, clean text fields, and chunk attachment text."""

    def __init__(
        self,
        *,
        extractor: AttachmentExtractor,
        chunking_config: ChunkingConfig | None = None,
    ) -> None:
        self._extractor = extractor
        self._chunking_config = chunking_config or ChunkingConfig()

    async def prepare(
        self, document: SourceDocument, *, deadline: float | None = None
    ) -> IndexDocument:
        """Build the :class:`IndexDocument` for ``document``.

        ``deadline`` is an event-loop timestamp; attachment extraction still
        running when it passes is abandoned and the document is indexed
        without ``file_text``. Raises ``InvalidDocumentError`` when no ID can
        be assigned.
        """

        os_id = assign_id(document)

        abstract = None
        if document.abstract:
            abstract = normalize_text(document.abstract)

        file_text = None
        if document.attachment_url:
            text = await self._extract(os_id, document.attachment_url, deadline)
            if text is not None:
                file_text = chunk_text(text, self._chunking_config.max_characters)

        return IndexDocument(
            os_id=os_id,
            source=document,
            abstract=abstract,
            file_text=file_text,
        )

    async def _extract(self, os_id: str, url: str, deadline: float | None) -> str | None:
        if deadline is None:
            return await self._extractor.extract(url)

        remaining = deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            logger.warning(
                "sync deadline passed; skipping attachment",
                extra={"os_id": os_id, "url": url},
            )
            return None
        try:
            return await asyncio.wait_for(self._extractor.extract(url), remaining)
        except asyncio.TimeoutError:
            logger.warning(
                "sync deadline reached during attachment extraction",
                extra={"os_id": os_id, "url": url},
            )
            return None
