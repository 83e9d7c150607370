"""Utility modules."""
from app.utils.cleaning import (
    clean_cv_text,
    normalize_email,
    truncate,
    sanitize_filename,
)
from app.utils.logging import setup_logging, get_logger

__all__ = [
    "clean_cv_text",
    "normalize_email",
    "truncate",
    "sanitize_filename",
    "setup_logging",
    "get_logger",
]
