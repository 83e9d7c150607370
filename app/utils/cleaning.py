"""Utility functions for data cleaning and normalization."""
import re
from typing import Optional

_MULTI_WHITESPACE = re.compile(r'\s{2,}')
_BULLETS = re.compile(r'[•·]')
_MULTI_NEWLINE = re.compile(r'\n{2,}')


def clean_cv_text(text: Optional[str]) -> str:
    """
    Normalize text pulled out of a CV before it goes into a prompt.

    Steps, in order:
    - runs of two or more whitespace characters become a single space
    - bullet glyphs (•, ·) become "-"
    - runs of two or more newlines become a single newline
    - leading/trailing whitespace is trimmed

    The first step also swallows multi-line breaks, so the newline rule only
    applies to what survives it.
    """
    if not text:
        return ""

    text = _MULTI_WHITESPACE.sub(' ', text)
    text = _BULLETS.sub('-', text)
    text = _MULTI_NEWLINE.sub('\n', text)
    return text.strip()


def normalize_email(email: Optional[str]) -> Optional[str]:
    """Trim and lowercase an email, returning None when nothing is left."""
    if not isinstance(email, str):
        return None
    email = email.strip().lower()
    return email or None


def truncate(value: Optional[str], max_length: int) -> Optional[str]:
    """Cut a string to a column width."""
    if value is None:
        return None
    return value[:max_length]


def sanitize_filename(filename: str) -> str:
    """Sanitize filename to prevent directory traversal and special characters."""
    filename = filename.split('/')[-1].split('\\')[-1]
    filename = re.sub(r'[<>:"|?*]', '_', filename)

    if len(filename) > 255:
        name, ext = filename.rsplit('.', 1) if '.' in filename else (filename, '')
        filename = name[:250] + (f'.{ext}' if ext else '')

    return filename
