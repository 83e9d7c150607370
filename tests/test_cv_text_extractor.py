"""Tests for PDF text extraction."""

import asyncio
import threading
from io import BytesIO

import pytest
from pypdf import PdfWriter

from app.exceptions import CVExtractionError
from app.services.cv_text_extractor import CVTextExtractor


@pytest.fixture
def extractor():
    return CVTextExtractor(timeout=5)


def corrupt(pdf: bytes, positions, value: bytes = b"#") -> bytes:
    """Overwrite single bytes of a PDF at the given offsets."""
    data = bytearray(pdf)
    for position in positions:
        data[position % len(data)] = value[0]
    return bytes(data)


class TestCVTextExtractor:

    @pytest.mark.asyncio
    async def test_extracts_text_from_pdf(self, extractor, make_pdf):
        pdf = make_pdf("Ada Lovelace", "ada@example.com", "Python developer")
        text = await extractor.extract_text(pdf, "ada.pdf")
        assert "Ada Lovelace" in text
        assert "ada@example.com" in text

    @pytest.mark.asyncio
    async def test_output_is_cleaned(self, extractor, make_pdf):
        pdf = make_pdf("Skills:    Python", "SQL")
        text = await extractor.extract_text(pdf, "ada.pdf")
        assert "  " not in text
        assert text == text.strip()

    @pytest.mark.asyncio
    async def test_blank_pdf_gives_empty_text(self, extractor):
        writer = PdfWriter()
        writer.add_blank_page(width=612, height=792)
        buffer = BytesIO()
        writer.write(buffer)
        assert await extractor.extract_text(buffer.getvalue(), "blank.pdf") == ""

    @pytest.mark.asyncio
    async def test_empty_bytes_raise(self, extractor):
        with pytest.raises(CVExtractionError) as exc_info:
            await extractor.extract_text(b"", "empty.pdf")
        assert exc_info.value.filename == "empty.pdf"

    @pytest.mark.asyncio
    async def test_non_pdf_bytes_raise(self, extractor):
        with pytest.raises(CVExtractionError) as exc_info:
            await extractor.extract_text(b"this is not a pdf at all", "notes.pdf")
        assert exc_info.value.code == "EXTRACTION_ERROR"

    def test_read_text_is_usable_without_event_loop(self, extractor, make_pdf):
        assert "Ada Lovelace" in extractor.read_text(make_pdf("Ada Lovelace"), "ada.pdf")


class TestMalformedPdfs:
    """A broken upload must fail (or degrade) quickly, never stall the event loop."""

    @pytest.mark.asyncio
    async def test_parser_that_never_returns_times_out(self, make_pdf, monkeypatch):
        extractor = CVTextExtractor(timeout=0.2)
        release = threading.Event()

        def stuck_read(file_content, filename="cv.pdf"):
            release.wait(5)
            return ""

        monkeypatch.setattr(extractor, "read_text", stuck_read)
        try:
            with pytest.raises(CVExtractionError, match="Timed out") as exc_info:
                await asyncio.wait_for(extractor.extract_text(make_pdf("Ada"), "stuck.pdf"), timeout=2)
            assert exc_info.value.filename == "stuck.pdf"
        finally:
            release.set()

    @pytest.mark.asyncio
    async def test_event_loop_keeps_running_while_parsing(self, make_pdf, monkeypatch):
        extractor = CVTextExtractor(timeout=1)
        release = threading.Event()
        ticks = []

        def slow_read(file_content, filename="cv.pdf"):
            release.wait(0.3)
            return "Ada"

        async def ticker():
            for _ in range(3):
                ticks.append(1)
                await asyncio.sleep(0.01)

        monkeypatch.setattr(extractor, "read_text", slow_read)
        text, _ = await asyncio.gather(extractor.extract_text(make_pdf("Ada"), "slow.pdf"), ticker())

        assert text == "Ada"
        assert len(ticks) == 3

    @pytest.mark.parametrize("seed_offsets", [
        (9, 57, 113),
        (140, 160, 180, 200),
        (-60, -40, -20),
        (-30, -25, -12),
    ])
    @pytest.mark.asyncio
    async def test_corrupted_bytes_fail_or_return_within_bound(self, extractor, make_pdf, seed_offsets):
        pdf = corrupt(make_pdf("Ada Lovelace", "ada@example.com"), seed_offsets)
        try:
            text = await asyncio.wait_for(extractor.extract_text(pdf, "broken.pdf"), timeout=10)
        except CVExtractionError as e:
            assert e.filename == "broken.pdf"
        else:
            assert isinstance(text, str)

    @pytest.mark.asyncio
    async def test_truncated_pdf_is_handled_within_bound(self, extractor, make_pdf):
        pdf = make_pdf("Ada Lovelace", "ada@example.com")
        try:
            text = await asyncio.wait_for(extractor.extract_text(pdf[: len(pdf) // 2], "half.pdf"), timeout=10)
        except CVExtractionError as e:
            assert e.filename == "half.pdf"
        else:
            assert isinstance(text, str)
