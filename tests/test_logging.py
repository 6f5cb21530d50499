"""Tests for the structured logging system (sitephase_kernel/logging_config.py)."""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from sitephase_kernel.exceptions import ProjectNotFoundError
from sitephase_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
    configure_logging(level=logging.DEBUG)


@pytest.fixture
def log_stream():
    """Configure logging onto an in-memory stream and return a line reader."""
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    configure_logging(handler=handler)

    def _lines() -> list[dict]:
        return [json.loads(line) for line in stream.getvalue().splitlines() if line]

    return _lines


class _DriverError(Exception):
    def __init__(self, message, code):
        super().__init__(message)
        self.code = code


# ---------------------------------------------------------------------------
# StructuredFormatter
# ---------------------------------------------------------------------------


class TestStructuredFormatter:

    def test_one_json_object_per_record(self, log_stream):
        log = get_logger("batch.executor")
        log.info("batch_run_started")
        log.warning("batch_item_failed", extra={"item_key": "p-1"})

        first, second = log_stream()
        assert first["message"] == "batch_run_started"
        assert first["logger"] == "sitephase.batch.executor"
        assert first["level"] == "INFO"
        assert "ts" in first
        assert second["item_key"] == "p-1"

    def test_debug_dropped_at_default_level(self, log_stream):
        get_logger("test").debug("noise")
        assert log_stream() == []

    def test_bound_context_wins_over_extra(self, log_stream):
        with LogContext.bind(project_id="from-context"):
            get_logger("test").info("msg", extra={"project_id": "from-extra"})
        assert log_stream()[0]["project_id"] == "from-context"

    def test_domain_values_serialized(self, log_stream):
        uid = uuid4()
        get_logger("test").info(
            "draw_due_date_updated",
            extra={"invoice_id": uid, "due_date": date(2024, 1, 31), "total": Decimal("12.50")},
        )
        record = log_stream()[0]
        assert record["invoice_id"] == str(uid)
        assert record["due_date"] == "2024-01-31"
        assert record["total"] == "12.50"

    def test_domain_exception_fields(self, log_stream):
        try:
            raise ProjectNotFoundError("p-17")
        except ProjectNotFoundError:
            get_logger("test").error("project_error", exc_info=True)

        record = log_stream()[0]
        assert record["exc_type"] == "ProjectNotFoundError"
        assert record["exc_code"] == "PROJECT_NOT_FOUND"
        assert record["exc_project_id"] == "p-17"
        assert "traceback" in record

    def test_non_text_error_code_not_reported(self, log_stream):
        try:
            raise _DriverError("database is locked", 5)
        except _DriverError:
            get_logger("test").error("store_error", exc_info=True)

        record = log_stream()[0]
        assert record["exc_message"] == "database is locked"
        assert "exc_code" not in record

    def test_formatter_usable_standalone(self):
        record = logging.LogRecord("sitephase.x", logging.INFO, "", 0, "hello", (), None)
        assert json.loads(StructuredFormatter().format(record))["message"] == "hello"


# ---------------------------------------------------------------------------
# LogContext
# ---------------------------------------------------------------------------


class TestLogContext:

    def test_empty_by_default(self):
        assert LogContext.get_all() == {}

    def test_set_stores_text(self):
        project = uuid4()
        LogContext.set(project_id=project, as_of=date(2024, 2, 3))
        assert LogContext.get_all() == {"project_id": str(project), "as_of": "2024-02-03"}

    def test_set_ignores_none_and_unknown(self):
        LogContext.set(job_name="phases.progression")
        LogContext.set(job_name=None, actor="someone")
        assert LogContext.get_all() == {"job_name": "phases.progression"}

    def test_bind_nests_and_restores(self):
        with LogContext.bind(job_name="draws.sync_due_dates", as_of=date(2024, 2, 3)):
            with LogContext.bind(project_id="p-1"):
                assert LogContext.get_all() == {
                    "job_name": "draws.sync_due_dates",
                    "as_of": "2024-02-03",
                    "project_id": "p-1",
                }
            assert "project_id" not in LogContext.get_all()
        assert LogContext.get_all() == {}

    def test_bind_restores_previous_value(self):
        LogContext.set(project_id="outer")
        with LogContext.bind(project_id="inner"):
            assert LogContext.get_all()["project_id"] == "inner"
        assert LogContext.get_all()["project_id"] == "outer"

    def test_bind_restores_after_exception(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(correlation_id="run-1"):
                raise RuntimeError("boom")
        assert LogContext.get_all() == {}

    def test_clear(self):
        LogContext.set(correlation_id="x", as_of="2024-01-01")
        LogContext.clear()
        assert LogContext.get_all() == {}


# ---------------------------------------------------------------------------
# configure_logging
# ---------------------------------------------------------------------------


class TestConfigureLogging:

    def test_second_call_is_noop(self):
        configure_logging(handler=logging.StreamHandler(StringIO()))
        configure_logging(handler=logging.StreamHandler(StringIO()))
        assert len(logging.getLogger("sitephase").handlers) == 1

    def test_does_not_propagate_to_root(self):
        configure_logging(handler=logging.StreamHandler(StringIO()))
        assert logging.getLogger("sitephase").propagate is False

    def test_child_loggers_share_configuration(self):
        stream = StringIO()
        configure_logging(handler=logging.StreamHandler(stream), level=logging.DEBUG)
        get_logger("services.draw_sync").debug("hierarchy_test")
        record = json.loads(stream.getvalue().splitlines()[0])
        assert record["logger"] == "sitephase.services.draw_sync"

    def test_level_name_accepted(self):
        stream = StringIO()
        configure_logging(handler=logging.StreamHandler(stream), level="WARNING")
        get_logger("test").info("dropped")
        get_logger("test").warning("kept")
        messages = [json.loads(line)["message"] for line in stream.getvalue().splitlines()]
        assert messages == ["kept"]
