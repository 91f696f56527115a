"""
Canonical lyric model for lyrics-helper.

Components:
    - lyrics: Lines, tracks, words, syllables and the invariant checker
    - metadata: Canonical/custom metadata keys and editable entries
    - options: Processor options and the processor selection
    - result: Parsed documents, warnings and conversion results

Usage:
    from lyrics_helper.model import LyricLine, LyricTrack, ContentType

    line = LyricLine(start_time=0, end_time=1000)
    line.add_track(ContentType.MAIN, LyricTrack.from_text("Hello", 0, 1000))
"""

from lyrics_helper.model.lyrics import (
    AnnotatedTrack,
    ContentType,
    LyricLine,
    LyricSyllable,
    LyricTrack,
    Word,
    validate_lines,
)
from lyrics_helper.model.metadata import (
    CanonicalMetadataKey,
    CustomMetadataKey,
    MetadataEntry,
    MetadataKey,
    parse_metadata_key,
)
from lyrics_helper.model.options import (
    DEFAULT_STRIPPER_FLAGS,
    PIPELINE_ORDER,
    ChineseConversionOptions,
    ChineseConversionVariant,
    MetadataStripperFlags,
    MetadataStripperOptions,
    ProcessorSelection,
    ProcessorType,
    ScanLimit,
    SyllableSmoothingOptions,
)
from lyrics_helper.model.result import ConversionResult, ConversionWarning, ParsedLyrics

__all__ = [
    # Lyrics
    "ContentType",
    "LyricSyllable",
    "Word",
    "LyricTrack",
    "AnnotatedTrack",
    "LyricLine",
    "validate_lines",
    # Metadata
    "CanonicalMetadataKey",
    "CustomMetadataKey",
    "MetadataKey",
    "MetadataEntry",
    "parse_metadata_key",
    # Options
    "MetadataStripperFlags",
    "DEFAULT_STRIPPER_FLAGS",
    "ScanLimit",
    "MetadataStripperOptions",
    "SyllableSmoothingOptions",
    "ChineseConversionVariant",
    "ChineseConversionOptions",
    "ProcessorType",
    "ProcessorSelection",
    "PIPELINE_ORDER",
    # Results
    "ConversionWarning",
    "ParsedLyrics",
    "ConversionResult",
]
