"""
Unit tests for structured JSON logging.
"""

import json
import logging
import sys

import pytest

from telemetry.service import (
    JSONFormatter,
    configure_logging,
    get_request_id,
    request_id_var,
    set_request_id,
)


def _record(message="Scanned page", level=logging.INFO, **attrs):
    record = logging.LogRecord(
        name="session.scanner",
        level=level,
        pathname=__file__,
        lineno=12,
        msg=message,
        args=(),
        exc_info=None,
        func="scan_standalone_keys",
    )
    for name, value in attrs.items():
        setattr(record, name, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestJSONFormatter:
    """Tests for the JSONFormatter class."""

    def test_base_fields(self):
        entry = json.loads(JSONFormatter().format(_record()))

        assert entry["level"] == "INFO"
        assert entry["message"] == "Scanned page"
        assert entry["logger"] == "session.scanner"
        assert entry["function"] == "scan_standalone_keys"
        assert entry["line"] == 12
        assert entry["timestamp"].endswith("Z")

    def test_extra_data_is_merged(self):
        record = _record(extra_data={"match": "sess:*", "page_size": 3})

        entry = json.loads(JSONFormatter().format(record))

        assert entry["match"] == "sess:*"
        assert entry["page_size"] == 3

    def test_request_id_is_included(self):
        token = request_id_var.set("req-123")
        try:
            entry = json.loads(JSONFormatter().format(_record()))
        finally:
            request_id_var.reset(token)

        assert entry["request_id"] == "req-123"

    def test_exception_is_formatted(self):
        try:
            raise ValueError("bad payload")
        except ValueError:
            record = _record(level=logging.ERROR, exc_info=sys.exc_info())

        entry = json.loads(JSONFormatter().format(record))

        assert "ValueError: bad payload" in entry["exception"]


class TestConfigureLogging:
    """Tests for root logger configuration."""

    def test_installs_single_json_handler(self, restore_root_logger):
        class _Settings:
            log_level = "DEBUG"

        configure_logging(_Settings())

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, JSONFormatter)

    def test_defaults_to_info(self, restore_root_logger):
        configure_logging()

        assert restore_root_logger.level == logging.INFO


class TestRequestId:
    """Tests for request ID helpers."""

    def test_set_and_get(self):
        token = request_id_var.set("")
        try:
            set_request_id("req-abc")
            assert get_request_id() == "req-abc"
        finally:
            request_id_var.reset(token)
