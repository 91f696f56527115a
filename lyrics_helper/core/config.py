"""
Configuration management for lyrics-helper.

This module handles loading, validating, and providing access to the
processor configuration stored in config.yaml.

The configuration file contains:
    - Metadata stripper switches, keyword/regex rules and scan limits
    - Syllable smoothing parameters
    - The OpenCC variant used by the Chinese script converter
    - Which post-processors run by default
    - Logging level and optional log directory

Every section is optional; missing values fall back to the defaults of
the corresponding option dataclass.

Example config.yaml:
    metadata_stripper:
      enabled: true
      keyword_case_sensitive: false
      enable_regex: true
      regex_case_sensitive: false
      keywords: ["作词", "作曲", "Lyrics by"]
      regex_patterns: ["^TME享有"]
      header_scan_limit: 20
      footer_scan_limit: "25%"

    syllable_smoothing:
      factor: 0.15
      iterations: 5
      duration_threshold_ms: 50
      gap_threshold_ms: 100

    chinese_conversion:
      variant: s2t

    processors:
      metadata_stripper: true
      syllable_smoother: false
      agent_recognizer: true
      chinese_converter: false

    logging:
      level: INFO
      directory: null
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from lyrics_helper.core.exceptions import ConfigError
from lyrics_helper.model.options import (
    ChineseConversionOptions,
    ChineseConversionVariant,
    MetadataStripperFlags,
    MetadataStripperOptions,
    ProcessorSelection,
    ScanLimit,
    SyllableSmoothingOptions,
)


# Default configuration file name (looked up in current working directory)
CONFIG_FILENAME = "config.yaml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class LoggingConfig:
    """
    Logging configuration.

    Attributes:
        level: Console log level name.
        directory: Directory for log files, None for console-only logging.
    """
    level: str = "INFO"
    directory: Path | None = None


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    Created by load_config() and treated as immutable.

    Attributes:
        metadata_stripper: Options for the metadata stripper.
        syllable_smoothing: Options for the syllable smoother.
        chinese_conversion: Options for the Chinese script converter.
        processors: Default post-processor selection.
        logging: Logging settings.
    """
    metadata_stripper: MetadataStripperOptions = field(default_factory=MetadataStripperOptions)
    syllable_smoothing: SyllableSmoothingOptions = field(default_factory=SyllableSmoothingOptions)
    chinese_conversion: ChineseConversionOptions = field(default_factory=ChineseConversionOptions)
    processors: ProcessorSelection = field(default_factory=ProcessorSelection)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration from config.yaml.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for config.yaml in the current working
                     directory and returns defaults when it is absent.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If an explicit config file is not found, the file has
                     invalid YAML syntax, or a field has an invalid value.
                     The error message indicates the specific problem.
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    if not config_path.exists():
        if explicit:
            raise ConfigError(
                f"Configuration file not found: {config_path}",
                details={"file_path": str(config_path)}
            )
        return Config()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    return parse_config(content, source=str(config_path))


def parse_config(content: str, source: str = "<string>") -> Config:
    """
    Parse configuration from YAML text.

    Args:
        content: YAML document text. An empty document yields defaults.
        source: Name used in error details.

    Raises:
        ConfigError: On invalid YAML or invalid values.
    """
    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": source, "original_error": str(e)}
        ) from e

    if raw_config is None:
        return Config()

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": source}
        )

    return Config(
        metadata_stripper=_parse_stripper_config(_section(raw_config, "metadata_stripper")),
        syllable_smoothing=_parse_smoothing_config(_section(raw_config, "syllable_smoothing")),
        chinese_conversion=_parse_chinese_config(_section(raw_config, "chinese_conversion")),
        processors=_parse_processors_config(_section(raw_config, "processors")),
        logging=_parse_logging_config(_section(raw_config, "logging")),
    )


def _section(raw_config: dict[str, Any], name: str) -> dict[str, Any]:
    """Return a section dictionary, {} when missing."""
    section = raw_config.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(
            f"Section '{name}' must be a dictionary",
            details={"section": name}
        )
    return section


def _parse_bool(section: dict[str, Any], name: str, field_name: str, default: bool) -> bool:
    value = section.get(name, default)
    if not isinstance(value, bool):
        raise ConfigError(
            f"'{field_name}' must be true or false",
            details={"field": field_name, "value": value}
        )
    return value


def _parse_string_list(section: dict[str, Any], name: str, field_name: str) -> tuple[str, ...]:
    value = section.get(name)
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(
            f"'{field_name}' must be a list of strings",
            details={"field": field_name}
        )
    return tuple(value)


def _parse_non_negative_int(section: dict[str, Any], name: str, field_name: str, default: int) -> int:
    value = section.get(name, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(
            f"'{field_name}' must be a non-negative integer",
            details={"field": field_name, "value": value}
        )
    return value


def _parse_scan_limit(section: dict[str, Any], name: str, field_name: str) -> ScanLimit:
    raw = section.get(name)
    if raw is None:
        return ScanLimit()
    try:
        return ScanLimit.parse(raw)
    except ValueError as e:
        raise ConfigError(
            f"'{field_name}' must be a line count, a fraction or a percentage",
            details={"field": field_name, "value": raw, "original_error": str(e)}
        ) from e


def _parse_stripper_config(section: dict[str, Any]) -> MetadataStripperOptions:
    """
    Parse the metadata_stripper section.

    Boolean switches are folded into MetadataStripperFlags.
    """
    flags = MetadataStripperFlags.NONE
    switches = (
        ("enabled", MetadataStripperFlags.ENABLED, True),
        ("keyword_case_sensitive", MetadataStripperFlags.KEYWORD_CASE_SENSITIVE, False),
        ("enable_regex", MetadataStripperFlags.ENABLE_REGEX_STRIPPING, True),
        ("regex_case_sensitive", MetadataStripperFlags.REGEX_CASE_SENSITIVE, False),
    )
    for name, flag, default in switches:
        if _parse_bool(section, name, f"metadata_stripper.{name}", default):
            flags |= flag

    return MetadataStripperOptions(
        flags=flags,
        keywords=_parse_string_list(section, "keywords", "metadata_stripper.keywords"),
        regex_patterns=_parse_string_list(
            section, "regex_patterns", "metadata_stripper.regex_patterns"
        ),
        header_scan_limit=_parse_scan_limit(
            section, "header_scan_limit", "metadata_stripper.header_scan_limit"
        ),
        footer_scan_limit=_parse_scan_limit(
            section, "footer_scan_limit", "metadata_stripper.footer_scan_limit"
        ),
    )


def _parse_smoothing_config(section: dict[str, Any]) -> SyllableSmoothingOptions:
    """
    Parse the syllable_smoothing section.

    Raises:
        ConfigError: If factor is not a number within 0.0-0.5 or a
                     threshold/iteration count is not a non-negative integer.
    """
    defaults = SyllableSmoothingOptions()

    factor = section.get("factor", defaults.factor)
    if isinstance(factor, bool) or not isinstance(factor, (int, float)) or not 0.0 <= factor <= 0.5:
        raise ConfigError(
            "'syllable_smoothing.factor' must be a number between 0.0 and 0.5",
            details={"field": "syllable_smoothing.factor", "value": factor}
        )

    return SyllableSmoothingOptions(
        factor=float(factor),
        iterations=_parse_non_negative_int(
            section, "iterations", "syllable_smoothing.iterations", defaults.iterations
        ),
        duration_threshold_ms=_parse_non_negative_int(
            section, "duration_threshold_ms",
            "syllable_smoothing.duration_threshold_ms", defaults.duration_threshold_ms
        ),
        gap_threshold_ms=_parse_non_negative_int(
            section, "gap_threshold_ms",
            "syllable_smoothing.gap_threshold_ms", defaults.gap_threshold_ms
        ),
    )


def _parse_chinese_config(section: dict[str, Any]) -> ChineseConversionOptions:
    variant = section.get("variant", ChineseConversionOptions().variant.value)
    try:
        parsed = ChineseConversionVariant.from_str(variant) if isinstance(variant, str) else None
    except ValueError:
        parsed = None
    if parsed is None:
        raise ConfigError(
            "'chinese_conversion.variant' must be an OpenCC configuration name (s2t, t2s, s2twp, ...)",
            details={"field": "chinese_conversion.variant", "value": variant}
        )
    return ChineseConversionOptions(variant=parsed)


def _parse_processors_config(section: dict[str, Any]) -> ProcessorSelection:
    defaults = ProcessorSelection()
    return ProcessorSelection(
        metadata_stripper=_parse_bool(
            section, "metadata_stripper", "processors.metadata_stripper",
            defaults.metadata_stripper
        ),
        syllable_smoother=_parse_bool(
            section, "syllable_smoother", "processors.syllable_smoother",
            defaults.syllable_smoother
        ),
        agent_recognizer=_parse_bool(
            section, "agent_recognizer", "processors.agent_recognizer",
            defaults.agent_recognizer
        ),
        chinese_converter=_parse_bool(
            section, "chinese_converter", "processors.chinese_converter",
            defaults.chinese_converter
        ),
    )


def _parse_logging_config(section: dict[str, Any]) -> LoggingConfig:
    level = section.get("level", "INFO")
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        raise ConfigError(
            f"'logging.level' must be one of {', '.join(LOG_LEVELS)}",
            details={"field": "logging.level", "value": level}
        )

    directory = section.get("directory")
    if directory is not None:
        if not isinstance(directory, str) or not directory.strip():
            raise ConfigError(
                "'logging.directory' must be a non-empty string or null",
                details={"field": "logging.directory"}
            )
        directory = Path(directory.strip()).expanduser().resolve()

    return LoggingConfig(level=level.upper(), directory=directory)
