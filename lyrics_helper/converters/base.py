"""
Converter interface and format identifiers.

Every supported lyric format provides a LyricConverter with a parser
(text -> ParsedLyrics) and a serializer (ParsedLyrics -> text). Parsers
record malformed or ambiguous constructs as ConversionWarnings on the
returned document instead of raising; serializers return the warnings
for data the target format cannot carry.

Usage:
    from lyrics_helper.converters import LyricFormat, get_converter

    converter = get_converter(LyricFormat.LRC)
    lyrics = converter.parse(text)
    output, warnings = converter.serialize(lyrics)
"""

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path

from lyrics_helper.core.exceptions import UnsupportedFormatError
from lyrics_helper.model.result import ConversionWarning, ParsedLyrics


class LyricFormat(Enum):
    """Supported lyric formats."""

    LRC = "lrc"
    ENHANCED_LRC = "enhanced_lrc"
    TTML = "ttml"
    TXT = "txt"

    @classmethod
    def from_str(cls, raw: str) -> "LyricFormat":
        """
        Resolve a format from its name or a file extension.

        Accepts e.g. "lrc", "LRC", ".lrc", "elrc", "enhanced-lrc",
        "ttml", "xml", "txt", "text".

        Raises:
            UnsupportedFormatError: If raw names no supported format.
        """
        normalized = raw.strip().lower().lstrip(".").replace("-", "_")
        fmt = _FORMAT_ALIASES.get(normalized)
        if fmt is None:
            raise UnsupportedFormatError(
                f"Unsupported lyric format: {raw!r}",
                details={"format": raw, "supported": [f.value for f in cls]},
            )
        return fmt

    @classmethod
    def from_path(cls, path: Path) -> "LyricFormat":
        """Resolve a format from a file name's extension."""
        if not path.suffix:
            raise UnsupportedFormatError(
                f"Cannot infer lyric format from file name without extension: {path.name}",
                details={"path": str(path)},
            )
        return cls.from_str(path.suffix)

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]


_FORMAT_ALIASES = {
    "lrc": LyricFormat.LRC,
    "enhanced_lrc": LyricFormat.ENHANCED_LRC,
    "elrc": LyricFormat.ENHANCED_LRC,
    "ttml": LyricFormat.TTML,
    "xml": LyricFormat.TTML,
    "txt": LyricFormat.TXT,
    "text": LyricFormat.TXT,
    "plain": LyricFormat.TXT,
}

_EXTENSIONS = {
    LyricFormat.LRC: ".lrc",
    LyricFormat.ENHANCED_LRC: ".lrc",
    LyricFormat.TTML: ".ttml",
    LyricFormat.TXT: ".txt",
}


class LyricConverter(ABC):
    """
    Abstract base class for format converters.

    Subclasses set `format` and implement parse() and serialize().
    Converters are stateless; one instance may be reused freely.
    """

    format: LyricFormat

    @property
    def warning_source(self) -> str:
        return self.format.value

    def parser_warning(self, message: str, line_number: int | None = None) -> ConversionWarning:
        return ConversionWarning(
            message=message,
            source=f"parser:{self.warning_source}",
            line_number=line_number,
        )

    def serializer_warning(self, message: str, line_number: int | None = None) -> ConversionWarning:
        return ConversionWarning(
            message=message,
            source=f"serializer:{self.warning_source}",
            line_number=line_number,
        )

    @abstractmethod
    def parse(self, text: str) -> ParsedLyrics:
        """
        Parse text into the canonical model.

        Never raises for malformed content; problems are recorded in the
        returned document's warnings.
        """
        pass

    @abstractmethod
    def serialize(self, lyrics: ParsedLyrics) -> tuple[str, list[ConversionWarning]]:
        """
        Serialize a document.

        Returns:
            (text, warnings) where warnings enumerate data the format
            could not represent.
        """
        pass
