"""
Converter lookup by LyricFormat.
"""

from lyrics_helper.converters.base import LyricConverter, LyricFormat
from lyrics_helper.converters.enhanced_lrc import EnhancedLrcConverter
from lyrics_helper.converters.lrc import LrcConverter
from lyrics_helper.converters.plain_text import PlainTextConverter
from lyrics_helper.converters.ttml import TtmlConverter
from lyrics_helper.core.exceptions import UnsupportedFormatError

_CONVERTERS: dict[LyricFormat, LyricConverter] = {
    LyricFormat.LRC: LrcConverter(),
    LyricFormat.ENHANCED_LRC: EnhancedLrcConverter(),
    LyricFormat.TTML: TtmlConverter(),
    LyricFormat.TXT: PlainTextConverter(),
}


def get_converter(fmt: LyricFormat | str) -> LyricConverter:
    """
    Return the converter for a format.

    Args:
        fmt: A LyricFormat or any name/extension LyricFormat.from_str accepts.

    Raises:
        UnsupportedFormatError: If no converter handles the format.
    """
    if isinstance(fmt, str):
        fmt = LyricFormat.from_str(fmt)
    converter = _CONVERTERS.get(fmt)
    if converter is None:
        raise UnsupportedFormatError(
            f"No converter registered for {fmt}",
            details={"format": str(fmt)},
        )
    return converter
