"""Structured CV extraction through the completion service."""
from app.extraction.prompt_builder import build_cv_extraction_prompt, CV_SEPARATOR
from app.extraction.completion_client import CompletionClient, parse_completion_payload
from app.extraction.record_normalizer import normalize_records, SeenPairs

__all__ = [
    "build_cv_extraction_prompt",
    "CV_SEPARATOR",
    "CompletionClient",
    "parse_completion_payload",
    "normalize_records",
    "SeenPairs",
]
