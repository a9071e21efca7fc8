"""
Tests for logging setup, error taxonomy and the error handler.
"""

import logging

import pytest

from timeline.utils.error_handler import (
    DataLoadError,
    ErrorHandler,
    ErrorSeverity,
    HeaderError,
    TimeExpressionError,
)
from utils.error_handler import ErrorHandler as LoggingSetup
from utils.error_handler import parse_log_level


def test_parse_log_level():
    assert parse_log_level('debug') == logging.DEBUG
    assert parse_log_level('WARNING') == logging.WARNING
    assert parse_log_level(logging.ERROR) == logging.ERROR
    assert parse_log_level(None) == logging.INFO
    assert parse_log_level('chatty', logging.WARNING) == logging.WARNING


def test_setup_logging_writes_file(tmp_path):
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    log_file = tmp_path / 'lens.log'
    try:
        LoggingSetup().setup_logging(logging.DEBUG, str(log_file))
        logging.getLogger('TimelineLens.test').info("hello from the test")
        for handler in root.handlers:
            handler.flush()
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)

    assert "hello from the test" in log_file.read_text(encoding='utf-8')


def test_log_execution_reraises():
    setup = LoggingSetup()

    @setup.log_execution()
    def explode():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        explode()


def test_header_error_details():
    error = HeaderError("bad header", "/tmp/t.csv", ["Colour"], ["Sha1"])
    assert isinstance(error, DataLoadError)
    assert error.severity == ErrorSeverity.CRITICAL
    assert "Unrecognized columns: Colour" in error.details
    assert "Missing columns: Sha1" in error.details
    assert "File: /tmp/t.csv" in error.details


def test_time_expression_error_is_a_warning():
    error = TimeExpressionError("last fortnight")
    assert error.severity == ErrorSeverity.WARNING
    assert error.message.startswith("Invalid time. Try:")
    assert "'last fortnight'" in error.details


def test_handler_logs_by_severity(caplog):
    handler = ErrorHandler()
    caplog.set_level(logging.INFO, logger='timeline.utils.error_handler')

    assert handler.handle_error(DataLoadError("cannot open"), "loading timeline") == "cannot open"
    handler.handle_error(TimeExpressionError("x"))
    message = handler.handle_error(ValueError("oops"), "parsing")

    assert message == "An unexpected error occurred while parsing"
    records = [r for r in caplog.records if r.name == 'timeline.utils.error_handler']
    assert [r.levelno for r in records] == [logging.CRITICAL, logging.WARNING, logging.ERROR]
    assert "Error in loading timeline:" in records[0].getMessage()
