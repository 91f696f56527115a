# tests/test_logger.py
"""Test logging setup and the conversion warnings report"""

import io
import logging

import pytest

from lyrics_helper.core import get_logger, log_conversion_warning, setup_logging, shutdown_logging
from lyrics_helper.core.logger import ErrorOnlyFilter, TqdmLoggingHandler
from lyrics_helper.model import ConversionWarning


@pytest.fixture(autouse=True)
def restore_root_logger():
    """setup_logging replaces root handlers; put pytest's back afterwards"""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    shutdown_logging()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


class TestSetupLogging:
    """Test handler configuration"""

    def test_console_only(self, tmp_path):
        setup_logging(None, "WARNING")

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], TqdmLoggingHandler)
        assert handlers[0].level == logging.WARNING
        assert list(tmp_path.iterdir()) == []

    def test_log_files_created(self, tmp_path):
        log_dir = tmp_path / "logs"

        setup_logging(log_dir)

        names = sorted(p.name.split("_2")[0] for p in log_dir.iterdir())
        assert names == ["conversion_warnings", "log_errors", "log_full"]
        assert len(logging.getLogger().handlers) == 4

    def test_setup_twice_does_not_duplicate(self, tmp_path):
        setup_logging(tmp_path)
        setup_logging(tmp_path)

        assert len(logging.getLogger().handlers) == 4

    def test_shutdown_removes_handlers(self, tmp_path):
        setup_logging(tmp_path)

        shutdown_logging()

        assert logging.getLogger().handlers == []


class TestReports:
    """Test what ends up in the log files"""

    def test_conversion_warning_report(self, tmp_path):
        setup_logging(tmp_path)
        logger = get_logger("lyrics_helper.test")

        log_conversion_warning(logger, ConversionWarning("Bad timestamp", "parser:lrc", 12))
        log_conversion_warning(logger, ConversionWarning("Lossy output", "serializer:txt"))
        logger.warning("Not a conversion warning")
        shutdown_logging()

        report = next(tmp_path.glob("conversion_warnings_*.log")).read_text(encoding="utf-8")
        assert report == (
            "[parser:lrc] line 12\nBad timestamp\n\n"
            "[serializer:txt]\nLossy output\n\n"
        )

    def test_error_log_only_has_errors(self, tmp_path):
        setup_logging(tmp_path)
        logger = get_logger("lyrics_helper.test")

        logger.info("just info")
        logger.error("it broke")
        shutdown_logging()

        errors = next(tmp_path.glob("log_errors_*.log")).read_text(encoding="utf-8")
        full = next(tmp_path.glob("log_full_*.log")).read_text(encoding="utf-8")
        assert "it broke" in errors
        assert "just info" not in errors
        assert "just info" in full

    def test_error_filter(self):
        record = logging.LogRecord("x", logging.WARNING, __file__, 1, "msg", None, None)

        assert ErrorOnlyFilter().filter(record) is False
        record.levelno = logging.CRITICAL
        assert ErrorOnlyFilter().filter(record) is True


class TestTqdmLoggingHandler:
    def test_writes_to_stream(self):
        stream = io.StringIO()
        handler = TqdmLoggingHandler(stream)
        handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))

        handler.emit(logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None))

        assert stream.getvalue() == "INFO hello\n"
