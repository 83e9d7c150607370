"""Errors raised by the CV ingestion pipeline."""
from typing import Optional


class CVIngestionError(Exception):
    """Base class for ingestion failures. Surfaced to clients as a generic 500."""
    code = "CV_INGESTION_ERROR"


class IntakeError(CVIngestionError):
    """The upload itself is unusable (no files, too many, too large)."""
    code = "INTAKE_ERROR"


class CVExtractionError(CVIngestionError):
    """A single uploaded file could not be turned into text."""
    code = "EXTRACTION_ERROR"

    def __init__(self, message: str, filename: Optional[str] = None):
        super().__init__(message)
        self.filename = filename


class CompletionServiceError(CVIngestionError):
    """The completion service failed or returned something that is not JSON."""
    code = "COMPLETION_SERVICE_ERROR"


class PersistenceError(CVIngestionError):
    """A database write failed for a reason other than a duplicate application."""
    code = "PERSISTENCE_ERROR"


class ApplicationExistsError(Exception):
    """An application for this candidate/vacancy pair already exists."""

    def __init__(self, candidate_id: int, vacancy_id: int):
        super().__init__(f"Application already exists for candidate {candidate_id} and vacancy {vacancy_id}")
        self.candidate_id = candidate_id
        self.vacancy_id = vacancy_id
