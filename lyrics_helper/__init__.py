"""
lyrics-helper: Convert and post-process timed lyrics.

This package converts lyric documents between formats through a
format-independent model and cleans them up on the way.

Architecture:
    A conversion runs in three stages:

    PARSE (converters/): Text to canonical model
        - LRC, enhanced LRC, TTML and plain text parsers
        - Malformed content becomes warnings, not errors
        - Optional translation/romanization LRC merged by timestamp

    PROCESS (processors/): Fixed-order post-processors, each optional
        - Metadata stripper: drop credit lines at the start and end
        - Syllable smoother: even out syllable timing jitter
        - Agent recognizer: turn "Alice:" markers into agent ids
        - Chinese converter: OpenCC Simplified/Traditional conversion

    SERIALIZE (converters/): Canonical model to text
        - Data the target format cannot carry is reported as warnings

Modules:
    core/        - Configuration, logging, exceptions
    model/       - Canonical lyric model, metadata keys, options, results
    processors/  - Rule cache and the three post-processors
    converters/  - Format converters, LRC merge, conversion orchestrator
    metadata/    - Metadata manager with pinned entries
    cli.py       - Command-line interface

Usage:
    Command Line:
        lyrics-helper song.lrc --to ttml
        lyrics-helper song.ttml -o song.lrc --no-strip

    Python API:
        from lyrics_helper import ConversionRequest, LyricFormat, convert

        result = convert(ConversionRequest(
            text=lrc_text,
            source_format=LyricFormat.LRC,
            target_format=LyricFormat.TTML,
        ))
        print(result.output_text)
        for warning in result.warnings:
            print(warning)

Configuration:
    Optional config.yaml in the current directory:

        metadata_stripper:
          enabled: true
          keywords: ["作词", "作曲"]
          header_scan_limit: 20

        syllable_smoothing:
          factor: 0.15
          iterations: 5

        processors:
          syllable_smoother: true

Dependencies:
    - rapidfuzz: Fuzzy singer name matching
    - opencc: Chinese script conversion
    - click: CLI framework
    - rich-click: CLI colors
    - tqdm: Progress-bar-safe console logging
    - pyyaml: Configuration and default rule files
"""

__version__ = "0.1.0"
__author__ = "lyrics-helper"
__license__ = "MIT"

# Convenience imports for common usage
from lyrics_helper.converters import (
    ConversionRequest,
    LyricFormat,
    convert,
    get_converter,
    parse_lyrics,
    serialize_lyrics,
)
from lyrics_helper.core import (
    Config,
    ConfigError,
    ConversionError,
    LyricsHelperError,
    LyricsParseError,
    UnsupportedFormatError,
    get_logger,
    load_config,
    setup_logging,
)
from lyrics_helper.metadata import MetadataManager
from lyrics_helper.model import ConversionResult, ConversionWarning, ParsedLyrics

__all__ = [
    # Version
    "__version__",
    # Core
    "Config",
    "load_config",
    "setup_logging",
    "get_logger",
    # Exceptions
    "LyricsHelperError",
    "ConfigError",
    "ConversionError",
    "UnsupportedFormatError",
    "LyricsParseError",
    # Conversion
    "LyricFormat",
    "ConversionRequest",
    "ConversionResult",
    "ConversionWarning",
    "ParsedLyrics",
    "convert",
    "get_converter",
    "parse_lyrics",
    "serialize_lyrics",
    "MetadataManager",
]
