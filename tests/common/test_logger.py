# tests/common/test_logger.py
"""
Unit tests for eato/common/logger.py.
"""

import json
import logging
from unittest.mock import patch

import pytest

from eato.common.constants import TypeMsg
from eato.common.logger import (
    ColoredFormatter,
    JsonFormatter,
    _get_caller_info,
    get_logger,
    log_debug,
    log_error,
    log_info,
    log_warning,
)


def _record(level: int = logging.INFO, msg: str = "Test message") -> logging.LogRecord:
    record = logging.LogRecord(
        name="test_logger",
        level=level,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    record.module = "test_module"
    record.funcName = "test_function"
    return record


class TestJsonFormatter:
    def test_format_basic_record(self) -> None:
        data = json.loads(JsonFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["message"] == "Test message"
        assert data["module"] == "test_module"
        assert data["line"] == 10
        assert data["timestamp"].endswith("Z")

    def test_format_with_extra_data(self) -> None:
        record = _record(logging.WARNING)
        record.extra_data = {"booking_id": "b-1"}

        data = json.loads(JsonFormatter().format(record))

        assert data["extra"] == {"booking_id": "b-1"}


class TestColoredFormatter:
    def test_includes_level_and_caller(self) -> None:
        record = _record(logging.ERROR, "Boom")
        record.extra_data = {
            "caller_function": "create_booking",
            "caller_module": "eato.services.bookings.service",
            "caller_file": "service.py",
            "caller_line": 42,
        }

        result = ColoredFormatter().format(record)

        assert "[ERROR]" in result
        assert "Boom" in result
        assert "create_booking()" in result
        assert "service.py:42" in result


class TestGetLogger:
    def test_logger_is_cached(self) -> None:
        assert get_logger("eato.test.cached") is get_logger("eato.test.cached")

    def test_logger_does_not_propagate(self) -> None:
        logger = get_logger("eato.test.propagate")
        assert logger.propagate is False
        assert logger.handlers


class TestCallerInfo:
    def test_reports_calling_function(self) -> None:
        def helper():
            return _get_caller_info()

        def caller():
            return helper()

        info = caller()
        assert info["caller_function"] == "caller"
        assert info["caller_file"] == "test_logger.py"


class TestLogHelpers:
    @pytest.mark.asyncio
    async def test_log_info_routes_by_type(self) -> None:
        logger = get_logger("eato.test.helpers")
        with patch.object(logger, "warning") as warning, patch.object(logger, "debug") as debug:
            await log_info("careful", type_msg=TypeMsg.WARNING, logger_name="eato.test.helpers")
            await log_debug("details", logger_name="eato.test.helpers")

        warning.assert_called_once()
        assert warning.call_args[0][0] == "careful"
        debug.assert_called_once()

    @pytest.mark.asyncio
    async def test_log_warning_passes_extra(self) -> None:
        logger = get_logger("eato.test.extra")
        with patch.object(logger, "warning") as warning:
            await log_warning("skipped", logger_name="eato.test.extra", extra={"to": "a@b.c"})

        extra = warning.call_args[1]["extra"]["extra_data"]
        assert extra["to"] == "a@b.c"

    @pytest.mark.asyncio
    async def test_log_error_with_traceback(self) -> None:
        logger = get_logger("eato.test.error")
        with patch.object(logger, "error") as error:
            await log_error("failed", logger_name="eato.test.error", exc_info=True)

        assert error.call_args[1]["exc_info"] is True
