"""Pydantic models for request/response validation."""
from app.models.cv_models import (
    UploadedFile,
    UploadBatch,
    CandidateRecord,
    CandidateOut,
    ApplicationOut,
    IngestionItem,
    BatchFailure,
    IngestionResult,
    IngestionResponse,
    ErrorResponse,
)

__all__ = [
    "UploadedFile",
    "UploadBatch",
    "CandidateRecord",
    "CandidateOut",
    "ApplicationOut",
    "IngestionItem",
    "BatchFailure",
    "IngestionResult",
    "IngestionResponse",
    "ErrorResponse",
]
