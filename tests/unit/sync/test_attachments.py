from __future__ import annotations

import io

import httpx
import pytest
from pypdf import PdfWriter

from catalogsync.sync.attachments import PdfAttachmentExtractor, PdfTextDecoder
from catalogsync.sync.errors import AttachmentDecodeError

pytestmark = pytest.mark.unit

PDF_URL = "https://files.example.org/reports/rt-9.pdf"


class RecordingDecoder:
    def __init__(self, text: str = "decoded text") -> None:
        self._text = text
        self.payloads: list[bytes] = []

    def decode(self, data: bytes) -> str:
        self.payloads.append(data)
        return self._text


def make_client(handler) -> httpx.AsyncClient:  # noqa: ANN001 - transport callback
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def blank_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.mark.asyncio
async def test_extract_returns_decoded_text() -> None:
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, content=b"%PDF-1.7 bytes")

    decoder = RecordingDecoder()
    async with make_client(handler) as client:
        extractor = PdfAttachmentExtractor(client=client, decoder=decoder)
        text = await extractor.extract(PDF_URL)

    assert text == "decoded text"
    assert decoder.payloads == [b"%PDF-1.7 bytes"]
    assert requested == [PDF_URL]


@pytest.mark.asyncio
async def test_non_success_status_yields_none() -> None:
    decoder = RecordingDecoder()
    async with make_client(lambda request: httpx.Response(404)) as client:
        extractor = PdfAttachmentExtractor(client=client, decoder=decoder)
        assert await extractor.extract(PDF_URL) is None

    assert decoder.payloads == []


@pytest.mark.asyncio
async def test_transport_error_yields_none() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with make_client(handler) as client:
        extractor = PdfAttachmentExtractor(client=client, decoder=RecordingDecoder())
        assert await extractor.extract(PDF_URL) is None


@pytest.mark.asyncio
async def test_unparseable_pdf_yields_none() -> None:
    async with make_client(
        lambda request: httpx.Response(200, content=b"<html>not a pdf</html>")
    ) as client:
        extractor = PdfAttachmentExtractor(client=client)
        assert await extractor.extract(PDF_URL) is None


@pytest.mark.asyncio
async def test_each_call_fetches_again() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(200, content=b"data")

    async with make_client(handler) as client:
        extractor = PdfAttachmentExtractor(client=client, decoder=RecordingDecoder())
        await extractor.extract(PDF_URL)
        await extractor.extract(PDF_URL)

    assert calls == 2


def test_pdf_decoder_rejects_empty_payload() -> None:
    with pytest.raises(AttachmentDecodeError):
        PdfTextDecoder().decode(b"")


def test_pdf_decoder_reads_blank_document() -> None:
    assert PdfTextDecoder().decode(blank_pdf()).strip() == ""
