"""Pydantic models for CV ingestion."""
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from app.utils.cleaning import normalize_email, truncate
from app.utils.logging import get_logger

logger = get_logger(__name__)

# Column widths of the candidates table
NAME_MAX_LENGTH = 150
PHONE_MAX_LENGTH = 30
OCCUPATION_MAX_LENGTH = 100


def _as_optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    return value or None


class UploadedFile(BaseModel):
    """One file of an upload, already read into memory."""
    filename: str
    content: bytes


class UploadBatch(BaseModel):
    """Everything one upload request hands to the ingestion pipeline."""
    files: List[UploadedFile]
    vacancy_id: int
    vacancy_title: str = ""
    vacancy_filter: str = ""


class CandidateRecord(BaseModel):
    """
    Candidate extracted from a CV by the completion service.

    The completion output is untrusted: every field except name and email is
    coerced to something storable instead of failing validation. Use
    :meth:`from_raw` to build instances from raw completion objects.
    """
    name: str
    email: str
    date_of_birth: Optional[date] = None
    phone: str = ""
    occupation: Optional[str] = None
    summary: Optional[str] = None
    experience: Optional[Any] = None
    skills: Optional[Any] = None
    languages: Optional[Any] = None
    education: Optional[Any] = None
    references: Optional[Any] = None
    general_experience: int = 0
    status: Optional[str] = None
    ai_reason: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def require_name(cls, v: Any) -> str:
        name = _as_optional_text(v)
        if not name:
            raise ValueError("name is required")
        return truncate(name, NAME_MAX_LENGTH)

    @field_validator("email", mode="before")
    @classmethod
    def require_email(cls, v: Any) -> str:
        email = normalize_email(v)
        if not email:
            raise ValueError("email is required")
        return email

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def parse_date_of_birth(cls, v: Any) -> Optional[date]:
        if isinstance(v, date):
            return v
        text = _as_optional_text(v)
        if not text:
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None

    @field_validator("phone", mode="before")
    @classmethod
    def coerce_phone(cls, v: Any) -> str:
        return truncate(_as_optional_text(v) or "", PHONE_MAX_LENGTH)

    @field_validator("occupation", mode="before")
    @classmethod
    def coerce_occupation(cls, v: Any) -> Optional[str]:
        return truncate(_as_optional_text(v), OCCUPATION_MAX_LENGTH)

    @field_validator("summary", "status", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Optional[str]:
        return _as_optional_text(v)

    @field_validator("experience", "skills", "languages", "education", "references", mode="before")
    @classmethod
    def pass_through_or_null(cls, v: Any) -> Any:
        if v is None or v == "":
            return None
        return v

    @field_validator("general_experience", mode="before")
    @classmethod
    def coerce_years(cls, v: Any) -> int:
        try:
            return max(int(float(v)), 0)
        except (TypeError, ValueError, OverflowError):
            return 0

    @field_validator("ai_reason", mode="before")
    @classmethod
    def coerce_reason(cls, v: Any) -> str:
        return _as_optional_text(v) or ""

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["CandidateRecord"]:
        """Validate one raw completion object, returning None when name or email is missing."""
        if not isinstance(raw, dict):
            return None

        data = dict(raw)
        data["phone"] = raw.get("phone_number") or raw.get("phone") or ""

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            logger.info(
                "Dropping extracted record without name or email",
                extra={"fields": sorted(str(k) for k in raw.keys()), "error_count": e.error_count()}
            )
            return None

    def candidate_fields(self) -> Dict[str, Any]:
        """Columns written to the candidates table."""
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "date_of_birth": self.date_of_birth,
            "occupation": self.occupation,
            "summary": self.summary,
            "experience": self.experience,
            "skills": self.skills,
            "languages": self.languages,
            "education": self.education,
        }


class CandidateOut(BaseModel):
    """Persisted candidate as returned to the client."""
    model_config = ConfigDict(from_attributes=True)

    candidate_id: int
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    occupation: Optional[str] = None
    summary: Optional[str] = None
    experience: Optional[Any] = None
    skills: Optional[Any] = None
    languages: Optional[Any] = None
    education: Optional[Any] = None
    notes: Optional[str] = None


class ApplicationOut(BaseModel):
    """Persisted application as returned to the client."""
    model_config = ConfigDict(from_attributes=True)

    application_id: int
    application_date: Optional[datetime] = None
    status: Optional[str] = None
    ai_reason: Optional[str] = None
    candidate_id: Optional[int] = None
    vacancy_id: Optional[int] = None


class IngestionItem(BaseModel):
    """One candidate and the application linking it to the vacancy."""
    candidate: CandidateOut
    application: ApplicationOut


class BatchFailure(BaseModel):
    """A batch that failed while the pipeline was told to keep going."""
    batch_index: int
    first_file: int
    last_file: int
    code: str
    error: str


class IngestionResult(BaseModel):
    """Outcome of one ingestion run."""
    items: List[IngestionItem] = Field(default_factory=list)
    failures: List[BatchFailure] = Field(default_factory=list)
    files_received: int = 0
    files_skipped: List[str] = Field(default_factory=list)
    batches: int = 0


class IngestionResponse(BaseModel):
    """Response body of a successful CV upload."""
    success: bool = True
    message: str
    data: List[IngestionItem]
    errors: List[BatchFailure] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Error response body."""
    error: str
    code: Optional[str] = None
