"""
Attach translation/romanization LRC files to existing lines.

Translations often come as a separate LRC stream sharing the main
lyrics' timestamps. Each entry of such a stream is attached to the main
line whose start time is closest, provided the difference is within a
tolerance.

Usage:
    warnings = merge_auxiliary_lrc(lyrics, translation_text, ContentType.TRANSLATION)
    exported = extract_auxiliary_lrc(lyrics, ContentType.TRANSLATION)
"""

import bisect

from lyrics_helper.converters.lrc import LrcConverter
from lyrics_helper.converters.timestamps import format_lrc_timestamp
from lyrics_helper.core.logger import get_logger
from lyrics_helper.model.lyrics import ContentType, LyricTrack
from lyrics_helper.model.result import ConversionWarning, ParsedLyrics

logger = get_logger(__name__)

DEFAULT_TOLERANCE_MS = 500

_AUXILIARY_TYPES = (ContentType.TRANSLATION, ContentType.ROMANIZATION)


def _check_content_type(content_type: ContentType) -> None:
    if content_type not in _AUXILIARY_TYPES:
        raise ValueError(
            f"Auxiliary LRC must be a translation or romanization, got {content_type.value}"
        )


def merge_auxiliary_lrc(
    lyrics: ParsedLyrics,
    lrc_text: str,
    content_type: ContentType,
    tolerance_ms: int = DEFAULT_TOLERANCE_MS,
) -> list[ConversionWarning]:
    """
    Merge an LRC stream into lyrics as translation or romanization tracks.

    Args:
        lyrics: Document to modify in place.
        lrc_text: LRC text of the auxiliary stream.
        content_type: ContentType.TRANSLATION or ContentType.ROMANIZATION.
        tolerance_ms: Maximum start time difference for a match.

    Returns:
        Parser warnings of the auxiliary stream, plus one warning per
        entry that matched no line and per line matched twice.

    Raises:
        ValueError: If content_type is not an auxiliary content type.
    """
    _check_content_type(content_type)
    source = f"merge:{content_type.value}"

    auxiliary = LrcConverter().parse(lrc_text)
    warnings = list(auxiliary.warnings)

    lines = lyrics.lines
    starts = [line.start_time for line in lines]
    matched: set[int] = set()
    merged = 0

    for aux_index, aux_line in enumerate(auxiliary.lines, start=1):
        text = aux_line.main_text()
        if not text.strip():
            continue

        target = _closest_line_index(starts, aux_line.start_time)
        if target is None or abs(starts[target] - aux_line.start_time) > tolerance_ms:
            warnings.append(
                ConversionWarning(
                    message=f"No line near {format_lrc_timestamp(aux_line.start_time)} for: {text}",
                    source=source,
                    line_number=aux_index,
                )
            )
            continue

        if target in matched:
            warnings.append(
                ConversionWarning(
                    message=f"Line {target + 1} matched more than once, keeping: {text}",
                    source=source,
                    line_number=aux_index,
                )
            )
        matched.add(target)

        line = lines[target]
        line.set_track(
            content_type,
            LyricTrack.from_text(text, line.start_time, line.end_time),
        )
        merged += 1

    logger.debug(f"Merged {merged} {content_type.value} entries into {len(lines)} lines")
    return warnings


def _closest_line_index(starts: list[int], time: int) -> int | None:
    """Index of the start closest to time; the earlier one wins ties."""
    if not starts:
        return None
    position = bisect.bisect_left(starts, time)
    candidates = [i for i in (position - 1, position) if 0 <= i < len(starts)]
    return min(candidates, key=lambda i: (abs(starts[i] - time), i))


def extract_auxiliary_lrc(lyrics: ParsedLyrics, content_type: ContentType) -> str:
    """
    Render the translation or romanization tracks of lyrics as LRC.

    Lines without a track of content_type are left out.

    Raises:
        ValueError: If content_type is not an auxiliary content type.
    """
    _check_content_type(content_type)
    output = []
    for line in lyrics.lines:
        track = line.track_of(content_type)
        if track is None or not track.text.strip():
            continue
        output.append(f"[{format_lrc_timestamp(line.start_time)}]{track.text}")
    text = "\n".join(output)
    return text + "\n" if text else ""
