"""
Chinese script converter.

Converts lyric text between Simplified and Traditional Chinese, their
Taiwan and Hong Kong standards, and Japanese shinjitai, using OpenCC.

Every syllable of every track (main, translation, romanization,
background) is converted on its own, so syllable boundaries and timings
stay exactly as they were. Phrase conversions of the "p" variants
therefore only apply to phrases that fit inside one syllable, which is
always the case for line-timed lyrics.

Text without Han characters passes through unchanged.

Usage:
    options = ChineseConversionOptions(ChineseConversionVariant.S2TWP)
    convert_chinese_script(lyrics.lines, options)
"""

from functools import lru_cache

import opencc

from lyrics_helper.core.logger import get_logger
from lyrics_helper.model.lyrics import LyricLine
from lyrics_helper.model.options import ChineseConversionOptions, ChineseConversionVariant

logger = get_logger(__name__)


@lru_cache(maxsize=None)
def get_opencc_converter(variant: ChineseConversionVariant) -> opencc.OpenCC:
    """OpenCC converter for a variant. Dictionaries are loaded once per process."""
    logger.debug(f"Loading OpenCC configuration '{variant.value}'")
    return opencc.OpenCC(variant.value)


def convert_text(text: str, variant: ChineseConversionVariant) -> str:
    if not text:
        return text
    return get_opencc_converter(variant).convert(text)


def convert_chinese_script(lines: list[LyricLine], options: ChineseConversionOptions) -> int:
    """
    Convert the script of every syllable in place.

    Args:
        lines: Lines to modify.
        options: Converter options.

    Returns:
        Number of syllables whose text changed.
    """
    changed = 0
    for line in lines:
        for annotated in line.tracks:
            for syllable in annotated.track.syllables():
                converted = convert_text(syllable.text, options.variant)
                if converted != syllable.text:
                    syllable.text = converted
                    changed += 1

    if changed:
        logger.debug(f"Chinese converter ({options.variant.value}) changed {changed} syllables")
    return changed
