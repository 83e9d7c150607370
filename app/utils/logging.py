"""JSON-lines logging for the ingestion service and the folder CLI."""
import json
import logging
import sys
from typing import Any, Dict, Optional
from datetime import datetime, timezone

from app.config import settings
from app.utils.cleaning import truncate

SERVICE_NAME = "talenttrack-cv-ingestion"

# Longest string value an ``extra`` field may carry; prompts and completion
# previews are cut so a single line never holds whole CVs
MAX_EXTRA_LENGTH = 500

# Loggers of libraries that are chatty at the application level
QUIET_LOGGERS = {
    "httpx": logging.WARNING,
    "pypdf": logging.ERROR,
}


def mask_email(email: str) -> str:
    """Keep the first character and the domain: ``a***@example.com``."""
    local, sep, domain = email.partition("@")
    if not sep:
        return "***"
    return f"{local[:1]}***@{domain}"


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with ``extra`` fields merged in."""

    RESERVED_ATTRS = {
        'name', 'msg', 'args', 'created', 'filename', 'funcName',
        'levelname', 'levelno', 'lineno', 'module', 'msecs', 'message',
        'pathname', 'process', 'processName', 'relativeCreated', 'thread',
        'threadName', 'exc_info', 'exc_text', 'stack_info', 'taskName'
    }

    def __init__(self, service: str = SERVICE_NAME, mask_emails: bool = True):
        super().__init__()
        self.service = service
        self.mask_emails = mask_emails

    def _extra_value(self, key: str, value: Any) -> Any:
        if isinstance(value, str):
            if self.mask_emails and key == "email":
                return mask_email(value)
            if len(value) > MAX_EXTRA_LENGTH:
                return truncate(value, MAX_EXTRA_LENGTH) + "…"
        return value

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "service": self.service,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in self.RESERVED_ATTRS and key not in log_data:
                log_data[key] = self._extra_value(key, value)

        return json.dumps(log_data, default=str)


def setup_logging(level: Optional[str] = None) -> None:
    """
    Route all logging to stdout as JSON lines.

    Args:
        level: Level name overriding LOG_LEVEL, e.g. from a CLI flag
    """
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(JSONFormatter(mask_emails=settings.log_mask_emails))
    root_logger.addHandler(console_handler)

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(max(quiet_level, log_level))


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module."""
    return logging.getLogger(name)
