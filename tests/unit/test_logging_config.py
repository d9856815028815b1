"""
Unit tests for logging configuration.
"""

import logging
import sys
import threading
from unittest.mock import MagicMock

import pytest

from logging_config import JSONFormatter, PlainFormatter, SupabaseHandler, setup_logging, split_tag


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(message, level=logging.INFO, **extra):
    record = logging.LogRecord("oauth.middleware", level, __file__, 10, message, None, None)
    for name, value in extra.items():
        setattr(record, name, value)
    return record


class TestSplitTag:

    def test_tagged(self):
        assert split_tag("[CALLBACK] GET /callback -> 200") == ("CALLBACK", "GET /callback -> 200")

    def test_untagged(self):
        assert split_tag("plain message") == (None, "plain message")


class TestJSONFormatter:
    """Tests for structured log entries."""

    def test_request_entry(self):
        """Test request fields attached by the middleware are carried over."""
        record = _record(
            "[CALLBACK] GET /callback -> 200 (success)",
            method="GET", path="/callback", status_code=200, outcome="success", duration_ms=12.5,
        )

        entry = JSONFormatter("github-oauth-provider").format(record)

        assert entry["service"] == "github-oauth-provider"
        assert entry["tag"] == "CALLBACK"
        assert entry["message"] == "GET /callback -> 200 (success)"
        assert entry["logger"] == "oauth.middleware"
        assert entry["request"] == {
            "method": "GET",
            "path": "/callback",
            "status_code": 200,
            "outcome": "success",
            "duration_ms": 12.5,
        }

    def test_plain_entry(self):
        entry = JSONFormatter("svc").format(_record("[STARTUP] ready"))

        assert entry["tag"] == "STARTUP"
        assert "request" not in entry
        assert "exception" not in entry

    def test_exception_text(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record("[CALLBACK] failed", level=logging.ERROR)
            record.exc_info = sys.exc_info()

        entry = JSONFormatter("svc").format(record)

        assert "ValueError: boom" in entry["exception"]


class TestSupabaseHandler:
    """Tests for batched log shipping."""

    def test_emit_does_not_insert(self):
        """Test emitting only queues, even with a full batch."""
        client = MagicMock()
        handler = SupabaseHandler(client, "svc", batch_size=1, flush_interval=60)

        caller = threading.current_thread()
        inserting_threads = []
        client.table.side_effect = lambda table: inserting_threads.append(threading.current_thread()) or MagicMock()

        handler.emit(_record("[AUTH] one"))
        handler.close()

        assert inserting_threads
        assert caller not in inserting_threads

    def test_close_sends_queued_entries(self):
        client = MagicMock()
        handler = SupabaseHandler(client, "svc", batch_size=50, flush_interval=60)

        handler.emit(_record("[TOKEN] one"))
        handler.emit(_record("[TOKEN] two"))
        handler.close()

        client.table.assert_called_with("logs")
        logs = client.table.return_value.insert.call_args[0][0]
        assert [entry["message"] for entry in logs] == ["one", "two"]
        assert logs[0]["service"] == "svc"

    def test_insert_failure_does_not_raise(self, capsys):
        client = MagicMock()
        client.table.side_effect = RuntimeError("db down")
        handler = SupabaseHandler(client, "svc", batch_size=50, flush_interval=60)

        handler.emit(_record("message"))
        handler.close()

        assert "Failed to send 1 log entries to Supabase: db down" in capsys.readouterr().err


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_stderr_only(self, restore_root_logger):
        root = setup_logging("svc", level="DEBUG")

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, PlainFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_with_supabase(self, restore_root_logger):
        root = setup_logging("svc", supabase_client=MagicMock())

        assert len(root.handlers) == 2
        assert isinstance(root.handlers[1], SupabaseHandler)
