"""Tests for the JSON log formatter and logging setup."""

import json
import logging
import sys

import pytest

from app.utils.logging import MAX_EXTRA_LENGTH, JSONFormatter, mask_email, setup_logging


def make_record(message: str = "Batch 1: 5 valid record(s)", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="app.services.cv_ingestion_service",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestMaskEmail:

    def test_keeps_first_character_and_domain(self):
        assert mask_email("ada@example.com") == "a***@example.com"

    def test_value_without_at_sign_is_hidden(self):
        assert mask_email("not-an-email") == "***"


class TestJSONFormatter:

    def test_line_is_json_with_service_and_extras(self):
        line = JSONFormatter().format(make_record(batch_index=0, valid_records=5))
        data = json.loads(line)

        assert data["service"] == "talenttrack-cv-ingestion"
        assert data["level"] == "INFO"
        assert data["logger"] == "app.services.cv_ingestion_service"
        assert data["message"] == "Batch 1: 5 valid record(s)"
        assert data["batch_index"] == 0
        assert data["valid_records"] == 5

    def test_reserved_attributes_are_not_repeated(self):
        data = json.loads(JSONFormatter().format(make_record()))
        assert "msg" not in data
        assert "args" not in data
        assert "levelno" not in data

    def test_email_extra_is_masked(self):
        data = json.loads(JSONFormatter().format(make_record(email="ada@example.com")))
        assert data["email"] == "a***@example.com"

    def test_masking_can_be_turned_off(self):
        data = json.loads(JSONFormatter(mask_emails=False).format(make_record(email="ada@example.com")))
        assert data["email"] == "ada@example.com"

    def test_long_previews_are_cut(self):
        data = json.loads(JSONFormatter().format(make_record(response_preview="x" * 5000)))
        assert len(data["response_preview"]) == MAX_EXTRA_LENGTH + 1
        assert data["response_preview"].endswith("…")

    def test_non_serializable_extras_fall_back_to_str(self):
        data = json.loads(JSONFormatter().format(make_record(path=object())))
        assert data["path"].startswith("<object")

    def test_exception_is_included(self):
        try:
            raise ValueError("bad pdf")
        except ValueError:
            record = make_record()
            record.exc_info = sys.exc_info()
        data = json.loads(JSONFormatter().format(record))
        assert "ValueError: bad pdf" in data["exception"]


class TestSetupLogging:

    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        quiet = {name: logging.getLogger(name).level for name in ("httpx", "pypdf")}
        yield
        root.handlers[:] = handlers
        root.setLevel(level)
        for name, quiet_level in quiet.items():
            logging.getLogger(name).setLevel(quiet_level)

    def test_single_json_handler_at_requested_level(self):
        setup_logging("debug")
        root = logging.getLogger()

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_library_loggers_are_quietened(self):
        setup_logging("DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("pypdf").level == logging.ERROR
