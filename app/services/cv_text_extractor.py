"""Service for extracting plain text from uploaded PDF CVs."""
import asyncio
from io import BytesIO
from typing import Optional

import pypdf

from app.config import settings
from app.exceptions import CVExtractionError
from app.utils.cleaning import clean_cv_text
from app.utils.logging import get_logger

logger = get_logger(__name__)


class CVTextExtractor:
    """Turns PDF bytes into the cleaned text that is sent to the completion service."""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout or settings.cv_extraction_timeout

    async def extract_text(self, file_content: bytes, filename: str = "cv.pdf") -> str:
        """
        Extract and clean the text of one PDF.

        Parsing runs in the default thread pool and is bounded by ``timeout``
        seconds, so a malformed file cannot stall the event loop.

        Args:
            file_content: Raw bytes of the uploaded file
            filename: Original filename (for logging and error reporting)

        Returns:
            Cleaned text, possibly empty for image-only PDFs

        Raises:
            CVExtractionError: If the bytes are empty, not a readable PDF, or
                parsing does not finish in time
        """
        if not file_content:
            raise CVExtractionError(f"Empty file: {filename}", filename=filename)

        loop = asyncio.get_running_loop()
        try:
            text = await asyncio.wait_for(
                loop.run_in_executor(None, self.read_text, file_content, filename),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(
                f"Timed out reading PDF {filename}",
                extra={"file_name": filename, "timeout": self.timeout}
            )
            raise CVExtractionError(
                f"Timed out extracting text from {filename} after {self.timeout}s", filename=filename
            ) from e

        if not text:
            logger.warning(f"No extractable text in {filename}", extra={"file_name": filename})
        else:
            logger.debug(
                f"Extracted {len(text)} characters from {filename}",
                extra={"file_name": filename, "text_length": len(text)}
            )
        return text

    def read_text(self, file_content: bytes, filename: str = "cv.pdf") -> str:
        """Blocking part of :meth:`extract_text`: parse every page and clean the joined text."""
        try:
            pdf_reader = pypdf.PdfReader(BytesIO(file_content))
            text_parts = []
            for page in pdf_reader.pages:
                page_text = page.extract_text()
                if page_text:
                    text_parts.append(page_text)
        except Exception as e:
            logger.error(
                f"Failed to read PDF {filename}: {e}",
                extra={"file_name": filename, "error": str(e), "error_type": type(e).__name__}
            )
            raise CVExtractionError(f"Failed to extract text from {filename}: {e}", filename=filename) from e

        return clean_cv_text("\n".join(text_parts))
