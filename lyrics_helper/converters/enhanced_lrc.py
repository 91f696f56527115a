"""
Enhanced LRC converter.

LRC with inline "<mm:ss.xx>" word timestamps:

    [00:12.00]<00:12.00>Hel<00:12.40>lo <00:12.90>world<00:13.60>

A segment "<t>text" is a syllable from t to the next inline timestamp
(or the line end). Empty segments only close the previous syllable, so
a gap is written as an explicit end timestamp. A space after a segment's
text separates words.

Lossy: background tracks, agents, untimed syllables inside a word-timed
line and sub-centisecond precision.
"""

from lyrics_helper.converters.base import LyricFormat
from lyrics_helper.converters.lrc import LrcConverter, has_inline_timestamps, parse_inline_syllables
from lyrics_helper.converters.timestamps import format_lrc_timestamp
from lyrics_helper.model.lyrics import LyricLine, LyricTrack


def _needs_inline_timestamps(track: LyricTrack, line: LyricLine) -> bool:
    syllables = list(track.syllables())
    if len(syllables) > 1:
        return any(s.is_timed for s in syllables)
    if len(syllables) == 1 and syllables[0].is_timed:
        only = syllables[0]
        return (only.start_time, only.end_time) != (line.start_time, line.end_time)
    return False


class EnhancedLrcConverter(LrcConverter):
    """Word-timed (enhanced) LRC."""

    format = LyricFormat.ENHANCED_LRC
    word_timed = True

    def _build_track(self, text: str, start: int, end: int) -> tuple[LyricTrack, int]:
        if not has_inline_timestamps(text):
            return LyricTrack.from_text(text, start, end), 0
        syllables, out_of_order = parse_inline_syllables(text, start, end)
        return LyricTrack.from_syllables(syllables), out_of_order

    def _render_track(self, track: LyricTrack, line: LyricLine) -> tuple[str, int]:
        if not _needs_inline_timestamps(track, line):
            return track.text, 0

        syllables = list(track.syllables())
        parts: list[str] = []
        untimed = 0

        for index, syllable in enumerate(syllables):
            if index > 0 and syllable.leading_space:
                parts.append(" ")
            if not syllable.is_timed:
                untimed += 1
                parts.append(syllable.text)
                continue

            parts.append(f"<{format_lrc_timestamp(syllable.start_time)}>{syllable.text}")

            following = syllables[index + 1] if index + 1 < len(syllables) else None
            if following is None or following.start_time != syllable.end_time:
                parts.append(f"<{format_lrc_timestamp(syllable.end_time)}>")

        return "".join(parts), untimed
