"""
Core module for lyrics-helper.

This module provides the foundational components used throughout the application:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading and validation
    - logger: Logging system with multiple outputs

Usage:
    from lyrics_helper.core import (
        Config, load_config,
        setup_logging, get_logger,
        LyricsHelperError, ConfigError, ConversionError
    )
"""

from lyrics_helper.core.config import (
    Config,
    LoggingConfig,
    load_config,
    parse_config,
)
from lyrics_helper.core.exceptions import (
    ConfigError,
    ConversionError,
    LyricsHelperError,
    LyricsParseError,
    MetadataKeyError,
    UnsupportedFormatError,
)
from lyrics_helper.core.logger import (
    get_logger,
    log_conversion_warning,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "LoggingConfig",
    "load_config",
    "parse_config",
    # Exceptions
    "LyricsHelperError",
    "ConfigError",
    "ConversionError",
    "UnsupportedFormatError",
    "LyricsParseError",
    "MetadataKeyError",
    # Logger
    "setup_logging",
    "get_logger",
    "log_conversion_warning",
    "shutdown_logging",
]
