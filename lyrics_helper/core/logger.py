"""
Logging configuration for lyrics-helper.

This module sets up the logging system with multiple outputs:
    - Console: Colored, tqdm-compatible output
    - log_full_*.log: Complete log of all events (DEBUG and above)
    - log_errors_*.log: Only ERROR and CRITICAL level messages
    - conversion_warnings_*.log: Non-fatal conversion warnings, one per entry

File outputs are only created when a log directory is given. Library code
never configures handlers itself: it only obtains loggers with get_logger()
and leaves configuration to the application (the CLI or the host UI).

Usage:
    from lyrics_helper.core.logger import setup_logging, get_logger

    setup_logging(log_dir)  # Call once at startup
    logger = get_logger(__name__)  # Get logger for each module

    logger.info("Starting conversion")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from tqdm import tqdm

if TYPE_CHECKING:
    from lyrics_helper.model.result import ConversionWarning


LOG_FULL_PREFIX = "log_full"
LOG_ERRORS_PREFIX = "log_errors"
CONVERSION_WARNINGS_PREFIX = "conversion_warnings"

# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


# ANSI color codes
class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    BOLD = "\033[1m"


class ColoredConsoleFormatter(logging.Formatter):
    """
    Custom formatter that adds colors to console output.

    Colors:
        - DEBUG: Blue
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Bold Red
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.BLUE,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        colored_levelname = f"{color}{record.levelname}{Colors.RESET}"
        return f"{colored_levelname}: {record.getMessage()}"


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes to console without breaking tqdm progress bars.

    Host applications that drive conversions from a tqdm loop get log lines
    printed above the bar instead of through it.

    Attributes:
        stream: The output stream. None means whatever sys.stderr is at
                emit time.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream or sys.stderr)
        except Exception:
            self.handleError(record)


class ConversionWarningHandler(logging.Handler):
    """
    Handler that captures conversion warnings for the warnings report file.

    Listens for log records carrying conversion warning fields and writes
    them to conversion_warnings_*.log in a simple, human-readable format:

        [parser:lrc] line 12
        Unparseable timestamp '[1:xx.00]', line skipped

    The handler looks for these extra fields in log records:
        - 'conversion_warning_source': Component that produced the warning
        - 'conversion_warning_message': The warning text
        - 'conversion_warning_line': 1-based source line number (optional)

    Only records containing these fields are written to the report.

    Attributes:
        report_path: Path to the report file.
        report_file: Open file handle (opened by open()).
    """

    def __init__(self, report_path: Path) -> None:
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None

    def open(self) -> None:
        """
        Open the report file for writing.

        Called by setup_logging() after the handler is created.
        File is opened in write mode (overwrites existing content).
        """
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        if not hasattr(record, "conversion_warning_source"):
            return

        if self.report_file is None:
            return

        try:
            source = getattr(record, "conversion_warning_source", "unknown")
            message = getattr(record, "conversion_warning_message", record.getMessage())
            line_number = getattr(record, "conversion_warning_line", None)

            if line_number is not None:
                header = f"[{source}] line {line_number}"
            else:
                header = f"[{source}]"

            self.report_file.write(f"{header}\n")
            self.report_file.write(f"{message}\n\n")
            self.report_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """
        Close the report file handle.

        Safe to call multiple times.
        """
        if self.report_file is not None:
            try:
                self.report_file.close()
            except OSError:
                pass
            self.report_file = None
        super().close()


class ErrorOnlyFilter(logging.Filter):
    """Filter that only allows ERROR and CRITICAL level records."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def setup_logging(log_dir: Path | None = None, level: str = "INFO") -> None:
    """
    Configure the logging system for the application.

    This function should be called ONCE at application startup, after
    the configuration is loaded but before any conversions run.

    Args:
        log_dir: Directory where log files will be created. When None,
                 only console output is configured.
        level: Console log level name ("DEBUG", "INFO", "WARNING", ...).

    Behavior:
        1. Configure root logger level to DEBUG and drop existing handlers
        2. Add the colored tqdm-compatible console handler at `level`
        3. If log_dir is given:
           - Create it if it doesn't exist
           - Add the full log file handler (DEBUG)
           - Add the error-only log file handler
           - Add the conversion warnings report handler

    Thread Safety:
        This function is NOT thread-safe. Call it once from the main
        thread before starting any worker threads.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Remove any existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    console_handler.setFormatter(ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    if log_dir is None:
        return

    log_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    full_handler = logging.FileHandler(
        log_dir / f"{LOG_FULL_PREFIX}_{timestamp}.log", mode="w", encoding="utf-8"
    )
    full_handler.setLevel(logging.DEBUG)
    full_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    root_logger.addHandler(full_handler)

    error_handler = logging.FileHandler(
        log_dir / f"{LOG_ERRORS_PREFIX}_{timestamp}.log", mode="w", encoding="utf-8"
    )
    error_handler.setLevel(logging.DEBUG)  # Filter handles the level restriction
    error_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    error_handler.addFilter(ErrorOnlyFilter())
    root_logger.addHandler(error_handler)

    warnings_handler = ConversionWarningHandler(
        log_dir / f"{CONVERSION_WARNINGS_PREFIX}_{timestamp}.log"
    )
    warnings_handler.open()
    root_logger.addHandler(warnings_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.
              This creates a hierarchy like 'lyrics_helper.converters.lrc'.

    Returns:
        logging.Logger: A logger instance configured by setup_logging().

    Note:
        Loggers obtained before setup_logging() is called propagate to
        whatever the host application configured (or nothing at all).
    """
    return logging.getLogger(name)


def log_conversion_warning(logger: logging.Logger, warning: "ConversionWarning") -> None:
    """
    Log a non-fatal conversion warning.

    Attaches the extra fields ConversionWarningHandler uses to write
    the warning to conversion_warnings_*.log.

    Args:
        logger: The logger to use for the message.
        warning: The warning to record.
    """
    logger.warning(
        str(warning),
        extra={
            "conversion_warning_source": warning.source,
            "conversion_warning_message": warning.message,
            "conversion_warning_line": warning.line_number,
        }
    )


def shutdown_logging() -> None:
    """
    Properly shut down the logging system.

    Flushes and closes every handler on the root logger and removes them.
    Typically called in a finally block at application exit.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except OSError:
            pass
        root_logger.removeHandler(handler)
