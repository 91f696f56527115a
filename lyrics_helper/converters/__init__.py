"""
Lyric format converters and the conversion pipeline.

Components:
    - base: LyricFormat and the LyricConverter interface
    - lrc / enhanced_lrc / ttml / plain_text: Per-format converters
    - registry: get_converter(format)
    - merge: Translation/romanization LRC merge and export
    - orchestrator: parse -> processors -> serialize

Usage:
    from lyrics_helper.converters import ConversionRequest, LyricFormat, convert

    result = convert(ConversionRequest(text, LyricFormat.LRC, LyricFormat.TTML))
"""

from lyrics_helper.converters.base import LyricConverter, LyricFormat
from lyrics_helper.converters.enhanced_lrc import EnhancedLrcConverter
from lyrics_helper.converters.lrc import LrcConverter
from lyrics_helper.converters.merge import extract_auxiliary_lrc, merge_auxiliary_lrc
from lyrics_helper.converters.orchestrator import (
    ConversionRequest,
    apply_processor,
    convert,
    parse_lyrics,
    serialize_lyrics,
)
from lyrics_helper.converters.plain_text import PlainTextConverter
from lyrics_helper.converters.registry import get_converter
from lyrics_helper.converters.ttml import TtmlConverter

__all__ = [
    "LyricFormat",
    "LyricConverter",
    "LrcConverter",
    "EnhancedLrcConverter",
    "TtmlConverter",
    "PlainTextConverter",
    "get_converter",
    "merge_auxiliary_lrc",
    "extract_auxiliary_lrc",
    "ConversionRequest",
    "parse_lyrics",
    "apply_processor",
    "serialize_lyrics",
    "convert",
]
