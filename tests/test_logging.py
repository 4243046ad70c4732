"""
Tests for the trace-id logging setup.
"""

import logging

from campbook.common.logging import TraceIdFilter, get_trace_id, setup_logging, trace_context


def _record() -> logging.LogRecord:
    return logging.LogRecord("campbook.test", logging.INFO, __file__, 1, "hello", None, None)


class TestTraceContext:
    """Tests for trace_context."""

    def test_incoming_id_is_kept(self) -> None:
        with trace_context("abc123") as trace_id:
            assert trace_id == "abc123"
            assert get_trace_id() == "abc123"

    def test_blank_id_is_replaced(self) -> None:
        with trace_context("  ") as trace_id:
            assert len(trace_id) == 32

    def test_previous_id_restored_on_exit(self) -> None:
        assert get_trace_id() == "-"
        with trace_context("outer"):
            with trace_context("inner"):
                assert get_trace_id() == "inner"
            assert get_trace_id() == "outer"
        assert get_trace_id() == "-"

    def test_filter_stamps_current_id(self) -> None:
        record = _record()
        with trace_context("req-1"):
            assert TraceIdFilter().filter(record)
        assert record.trace_id == "req-1"


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_level_by_name(self) -> None:
        setup_logging("debug")
        assert logging.getLogger().level == logging.DEBUG
        setup_logging(logging.INFO)
        assert logging.getLogger().level == logging.INFO

    def test_filter_installed_once(self) -> None:
        setup_logging()
        setup_logging()
        for handler in logging.getLogger().handlers:
            assert sum(isinstance(f, TraceIdFilter) for f in handler.filters) <= 1

    def test_server_access_log_quieted(self) -> None:
        setup_logging()
        assert logging.getLogger("uvicorn.access").level == logging.WARNING
