"""Controller for CV upload requests."""
from typing import List, Optional

from fastapi import UploadFile

from app.config import settings
from app.exceptions import IntakeError
from app.models.cv_models import IngestionResponse, UploadBatch, UploadedFile
from app.services.cv_ingestion_service import CVIngestionService
from app.utils.cleaning import sanitize_filename
from app.utils.logging import get_logger

logger = get_logger(__name__)

SUCCESS_MESSAGE = "CVs processed in batches and saved to the database"
PARTIAL_MESSAGE = "CVs processed in batches; some batches failed and were not saved"


class CVController:
    """Validates an upload, runs the ingestion pipeline and shapes the response."""

    def __init__(self, ingestion_service: CVIngestionService):
        self.ingestion_service = ingestion_service

    async def upload_cvs(
        self,
        files: Optional[List[UploadFile]],
        vacancy_id: int,
        vacancy_title: str = "",
        vacancy_filter: str = "",
    ) -> IngestionResponse:
        """
        Handle a multi-file CV upload for one vacancy.

        Raises:
            IntakeError: No files, too many files, or a file above the size limit
            CVIngestionError: Any failure inside the pipeline
        """
        uploads = [f for f in (files or []) if f is not None and f.filename]
        if not uploads:
            raise IntakeError("No files were received")
        if len(uploads) > settings.cv_max_files:
            raise IntakeError(f"Too many files: at most {settings.cv_max_files} CVs per upload")

        batch = UploadBatch(
            files=[await self._read_upload(f) for f in uploads],
            vacancy_id=vacancy_id,
            vacancy_title=vacancy_title or "",
            vacancy_filter=vacancy_filter or "",
        )

        logger.info(
            f"Received {len(batch.files)} CV(s) for vacancy {vacancy_id}",
            extra={"vacancy_id": vacancy_id, "file_count": len(batch.files)}
        )

        result = await self.ingestion_service.ingest(batch)

        return IngestionResponse(
            success=True,
            message=PARTIAL_MESSAGE if result.failures else SUCCESS_MESSAGE,
            data=result.items,
            errors=result.failures,
        )

    async def _read_upload(self, file: UploadFile) -> UploadedFile:
        safe_filename = sanitize_filename(file.filename or "cv.pdf")
        content = await file.read()
        if len(content) > settings.max_file_size_bytes:
            logger.warning(
                f"File too large: {safe_filename}",
                extra={
                    "file_name": safe_filename,
                    "file_size_mb": round(len(content) / (1024 * 1024), 2),
                    "max_file_size_mb": settings.max_file_size_mb,
                }
            )
            raise IntakeError(
                f"File {safe_filename} exceeds the maximum size of {settings.max_file_size_mb}MB"
            )
        return UploadedFile(filename=safe_filename, content=content)
