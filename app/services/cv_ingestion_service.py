"""Orchestration of the CV ingestion pipeline."""
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import CompletionServiceError, CVExtractionError, IntakeError, PersistenceError
from app.extraction.completion_client import CompletionClient
from app.extraction.prompt_builder import build_cv_extraction_prompt
from app.extraction.record_normalizer import SeenPairs, normalize_records
from app.models.cv_models import BatchFailure, IngestionResult, UploadBatch
from app.repositories.vacancy_repo import VacancyRepository
from app.services.batcher import chunk_texts
from app.services.cv_persistence_service import CVPersistenceService
from app.services.cv_text_extractor import CVTextExtractor
from app.utils.logging import get_logger

logger = get_logger(__name__)


class CVIngestionService:
    """
    Runs one upload through extract → batch → prompt → complete → normalize → persist.

    Batches are processed strictly one after another, so at most one
    completion call is in flight. Behaviour on failures is controlled by:

    - ``skip_unreadable_files``: skip PDFs that cannot be read instead of
      failing the whole upload
    - ``abort_on_batch_failure``: stop at the first failed batch, or record it
      as a BatchFailure and continue with the next one
    - ``dedupe_before_persist``: skip records whose (email, vacancy) pair was
      already handled in this upload before touching the database; when off,
      duplicates are still written and only dropped from the result
    """

    def __init__(
        self,
        session: AsyncSession,
        text_extractor: Optional[CVTextExtractor] = None,
        completion_client: Optional[CompletionClient] = None,
        persistence_service: Optional[CVPersistenceService] = None,
        batch_size: Optional[int] = None,
        skip_unreadable_files: Optional[bool] = None,
        abort_on_batch_failure: Optional[bool] = None,
        dedupe_before_persist: Optional[bool] = None,
    ):
        self.session = session
        self.text_extractor = text_extractor or CVTextExtractor()
        self.completion_client = completion_client or CompletionClient()
        self.persistence_service = persistence_service or CVPersistenceService(session)
        self.vacancy_repo = VacancyRepository(session)
        self.batch_size = batch_size or settings.cv_batch_size
        self.skip_unreadable_files = (
            settings.cv_skip_unreadable_files if skip_unreadable_files is None else skip_unreadable_files
        )
        self.abort_on_batch_failure = (
            settings.cv_abort_on_batch_failure if abort_on_batch_failure is None else abort_on_batch_failure
        )
        self.dedupe_before_persist = (
            settings.cv_dedupe_before_persist if dedupe_before_persist is None else dedupe_before_persist
        )

    async def ingest(self, upload: UploadBatch) -> IngestionResult:
        """
        Ingest every CV of an upload against one vacancy.

        Raises:
            IntakeError: If the upload has no files
            CVExtractionError: If a PDF is unreadable and skipping is off
            CompletionServiceError, PersistenceError: If a batch fails and
                abort_on_batch_failure is on. Records of earlier batches
                stay committed.
        """
        if not upload.files:
            raise IntakeError("No files were received")

        result = IngestionResult(files_received=len(upload.files))
        vacancy_title = await self._resolve_vacancy_title(upload)

        texts = await self._extract_texts(upload, result)
        batches = chunk_texts(texts, self.batch_size)
        result.batches = len(batches)

        logger.info(
            f"Ingesting {len(texts)} CV(s) in {len(batches)} batch(es)",
            extra={
                "vacancy_id": upload.vacancy_id,
                "files_received": result.files_received,
                "files_skipped": len(result.files_skipped),
                "batch_count": len(batches),
                "batch_size": self.batch_size,
            }
        )

        seen = SeenPairs()
        for batch_index, batch in enumerate(batches):
            first_file = batch_index * self.batch_size
            try:
                await self._process_batch(batch, batch_index, upload, vacancy_title, seen, result)
            except (CompletionServiceError, PersistenceError) as e:
                logger.error(
                    f"Batch {batch_index + 1}/{len(batches)} failed: {e}",
                    extra={
                        "vacancy_id": upload.vacancy_id,
                        "batch_index": batch_index,
                        "error_type": type(e).__name__,
                        "abort": self.abort_on_batch_failure,
                    }
                )
                if self.abort_on_batch_failure:
                    raise
                result.failures.append(BatchFailure(
                    batch_index=batch_index,
                    first_file=first_file,
                    last_file=first_file + len(batch) - 1,
                    code=e.code,
                    error=str(e),
                ))

        logger.info(
            f"Ingestion finished with {len(result.items)} candidate(s)",
            extra={
                "vacancy_id": upload.vacancy_id,
                "candidates": len(result.items),
                "failed_batches": len(result.failures),
            }
        )
        return result

    async def _resolve_vacancy_title(self, upload: UploadBatch) -> str:
        if upload.vacancy_title.strip():
            return upload.vacancy_title
        vacancy = await self.vacancy_repo.get_by_id(upload.vacancy_id)
        if vacancy is None:
            logger.warning(
                "No vacancy title given and vacancy not found",
                extra={"vacancy_id": upload.vacancy_id}
            )
            return ""
        return vacancy.title

    async def _extract_texts(self, upload: UploadBatch, result: IngestionResult) -> List[str]:
        texts = []
        for uploaded in upload.files:
            try:
                texts.append(await self.text_extractor.extract_text(uploaded.content, uploaded.filename))
            except CVExtractionError:
                if not self.skip_unreadable_files:
                    raise
                logger.warning(
                    f"Skipping unreadable CV {uploaded.filename}",
                    extra={"file_name": uploaded.filename, "vacancy_id": upload.vacancy_id}
                )
                result.files_skipped.append(uploaded.filename)
        return texts

    async def _process_batch(
        self,
        batch: List[str],
        batch_index: int,
        upload: UploadBatch,
        vacancy_title: str,
        seen: SeenPairs,
        result: IngestionResult,
    ) -> None:
        prompt = build_cv_extraction_prompt(batch, vacancy_title, upload.vacancy_filter)
        raw_records = await self.completion_client.complete_json(prompt)
        records = normalize_records(raw_records)

        logger.info(
            f"Batch {batch_index + 1}: {len(records)} valid record(s) from {len(batch)} CV(s)",
            extra={
                "batch_index": batch_index,
                "cv_count": len(batch),
                "raw_records": len(raw_records),
                "valid_records": len(records),
            }
        )

        for record in records:
            if self.dedupe_before_persist and (record.email, upload.vacancy_id) in seen:
                logger.info(
                    "Skipping duplicate CV in upload",
                    extra={"email": record.email, "vacancy_id": upload.vacancy_id}
                )
                continue

            item = await self.persistence_service.persist_record(record, upload.vacancy_id)

            if seen.add(item.candidate.email or record.email, item.application.vacancy_id):
                result.items.append(item)
            else:
                logger.info(
                    "Duplicate candidate dropped from response",
                    extra={"email": record.email, "vacancy_id": upload.vacancy_id}
                )
