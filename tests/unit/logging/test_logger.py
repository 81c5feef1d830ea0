# tests/unit/logging/test_logger.py
"""Tests for logging/logger.py: formatters and setup."""

from __future__ import annotations

import json
import logging

from realtycrm.logging.context import clear_context, set_operation_context, set_session_context
from realtycrm.logging.logger import JsonFormatter, TextFormatter, setup_logging


def _record(msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("realtycrm.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_basic_fields(self):
        out = json.loads(JsonFormatter().format(_record()))
        assert out["level"] == "INFO"
        assert out["logger"] == "realtycrm.test"
        assert out["message"] == "hello"
        assert "context" not in out

    def test_context_injected(self):
        set_session_context("agent-1", "s1")
        set_operation_context("query", "leads")
        out = json.loads(JsonFormatter().format(_record()))
        assert out["context"]["principal"] == "agent-1"
        assert out["context"]["query_key"] == "leads"

    def test_extra_data(self):
        out = json.loads(JsonFormatter().format(_record(data={"count": 3})))
        assert out["data"] == {"count": 3}


class TestTextFormatter:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_plain(self):
        line = TextFormatter().format(_record("cache hit"))
        assert "[INFO" in line
        assert line.endswith("- cache hit")

    def test_with_context(self):
        set_session_context("agent-1", "s1")
        set_operation_context("create_lead")
        line = TextFormatter().format(_record())
        assert "<agent-1>" in line
        assert "[create_lead]" in line


class TestSetup:
    def teardown_method(self):
        root = logging.getLogger("realtycrm")
        for handler in root.handlers:
            handler.close()
        root.handlers.clear()
        root.setLevel(logging.NOTSET)

    def test_setup_replaces_handlers(self):
        setup_logging("DEBUG")
        setup_logging("WARNING")
        root = logging.getLogger("realtycrm")
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING

    def test_setup_with_file(self, tmp_path):
        log_file = tmp_path / "logs" / "crm.log"
        setup_logging("INFO", log_format="json", log_file=str(log_file))
        root = logging.getLogger("realtycrm")
        assert len(root.handlers) == 2
        assert log_file.parent.is_dir()
