"""
LRC converter.

Parsing:
    - Time tags "[mm:ss.xx]", "[mm:ss.xxx]", "[mm:ss]"; several tags on
      one line repeat the text at every tag.
    - Metadata tags "[key:value]". ti/ar/al/au/by/length and the other
      well-known names map to canonical keys, anything else becomes a
      custom key. "[offset:+/-ms]" is folded into every timestamp
      (a positive offset makes lyrics appear earlier).
    - Entries sharing a timestamp: the first non-empty text is the main
      line, the second its translation, the third its romanization.
    - An empty timed entry ("[01:02.00]") ends the preceding line.
    - A line ends at the next entry's time; the last line ends at its
      own start.

Serializing writes metadata tags, then each line followed by its
translation and romanization at the same timestamp, plus an empty timed
entry whenever a line's end differs from the next line's start.

Lossy: syllable timings, background tracks, agents, additional
translation/romanization tracks and sub-centisecond precision.
"""

import itertools
import re
from dataclasses import dataclass, field

from lyrics_helper.converters.base import LyricConverter, LyricFormat
from lyrics_helper.converters.timestamps import (
    LRC_TIME_PATTERN,
    format_lrc_timestamp,
    parse_lrc_timestamp,
)
from lyrics_helper.core.logger import get_logger
from lyrics_helper.model.lyrics import ContentType, LyricLine, LyricSyllable, LyricTrack
from lyrics_helper.model.metadata import CanonicalMetadataKey, MetadataKey, parse_metadata_key
from lyrics_helper.model.result import ConversionWarning, ParsedLyrics

logger = get_logger(__name__)

_TAG_RE = re.compile(r"\[([^\[\]]*)\]")
_METADATA_TAG_RE = re.compile(r"^\s*([A-Za-z#][\w #-]*?)\s*:(.*)$", re.DOTALL)
_TIME_LIKE_RE = re.compile(r"^\s*[\d:.\-+]+\s*$")
_INLINE_TIME_RE = re.compile(rf"<({LRC_TIME_PATTERN})>")

_LRC_TAGS: dict[CanonicalMetadataKey, str] = {
    CanonicalMetadataKey.TITLE: "ti",
    CanonicalMetadataKey.ARTIST: "ar",
    CanonicalMetadataKey.ALBUM: "al",
    CanonicalMetadataKey.LYRICIST: "au",
    CanonicalMetadataKey.LRC_EDITOR: "by",
    CanonicalMetadataKey.LENGTH: "length",
}

# Content types written as extra same-timestamp entries, in entry order
AUXILIARY_TYPES = (ContentType.TRANSLATION, ContentType.ROMANIZATION)


def lrc_tag_for_key(key: MetadataKey) -> str:
    if isinstance(key, CanonicalMetadataKey):
        return _LRC_TAGS.get(key, key.value)
    return key.name


def has_inline_timestamps(text: str) -> bool:
    return _INLINE_TIME_RE.search(text) is not None


def parse_inline_syllables(text: str, line_start: int, line_end: int) -> tuple[list[LyricSyllable], int]:
    """
    Split enhanced-LRC text into timed syllables.

    "<t>text" starts a syllable at t that ends at the next inline
    timestamp, or at line_end after the last one. Segments without text
    only close the previous syllable. Whitespace at the end of a segment
    (or a whitespace-only segment) puts leading_space on the next
    syllable. Text before the first inline timestamp starts at
    line_start.

    Returns:
        (syllables, out_of_order) where out_of_order counts closing
        timestamps earlier than their syllable's start (clamped).
    """
    parts = _INLINE_TIME_RE.split(text)
    syllables: list[LyricSyllable] = []
    out_of_order = 0
    pending_space = False

    def close_previous(time: int) -> None:
        nonlocal out_of_order
        if syllables and syllables[-1].end_time is None:
            previous = syllables[-1]
            if time < previous.start_time:
                out_of_order += 1
                time = previous.start_time
            previous.end_time = time

    leading = parts[0]
    if leading.strip():
        syllables.append(LyricSyllable(text=leading.strip(), start_time=line_start))
        pending_space = leading[-1].isspace()

    for stamp, segment in zip(parts[1::2], parts[2::2]):
        time = parse_lrc_timestamp(stamp)
        close_previous(time)

        content = segment.strip()
        if not content:
            if segment:
                pending_space = True
            continue

        syllables.append(
            LyricSyllable(
                text=content,
                start_time=time,
                leading_space=bool(syllables) and (pending_space or segment[0].isspace()),
            )
        )
        pending_space = segment[-1].isspace()

    if syllables and syllables[-1].end_time is None:
        close_previous(max(line_end, syllables[-1].start_time))

    return syllables, out_of_order


@dataclass
class _Entry:
    time: int
    text: str
    line_number: int


@dataclass
class _PendingLine:
    start: int
    texts: list[str]
    line_number: int
    end: int | None = None
    extra: list[str] = field(default_factory=list)


class LrcConverter(LyricConverter):
    """Line-timed LRC."""

    format = LyricFormat.LRC

    # Whether inline "<mm:ss.xx>" word timestamps are kept as syllables
    word_timed = False

    def parse(self, text: str) -> ParsedLyrics:
        lyrics = ParsedLyrics()
        entries: list[_Entry] = []
        offset = 0

        for line_number, raw_line in enumerate(text.lstrip("\ufeff").splitlines(), start=1):
            stripped = raw_line.strip()
            if not stripped:
                continue

            times: list[int] = []
            rest = stripped
            is_metadata = False
            invalid_tag = False

            while rest.startswith("["):
                match = _TAG_RE.match(rest)
                if match is None:
                    break
                body = match.group(1)
                time = parse_lrc_timestamp(body)
                if time is not None:
                    times.append(time)
                    rest = rest[match.end():]
                    continue
                if _TIME_LIKE_RE.match(body):
                    invalid_tag = True
                    break
                if not times:
                    metadata_match = _METADATA_TAG_RE.match(body)
                    if metadata_match:
                        is_metadata = True
                        key, value = metadata_match.group(1), metadata_match.group(2).strip()
                        offset = self._apply_metadata_tag(lyrics, key, value, offset, line_number)
                break

            if invalid_tag:
                lyrics.warnings.append(
                    self.parser_warning(f"Invalid timestamp, line skipped: {stripped}", line_number)
                )
                continue
            if is_metadata:
                continue
            if not times:
                lyrics.warnings.append(
                    self.parser_warning(f"Line has no timestamp, skipped: {stripped}", line_number)
                )
                continue

            for time in times:
                entries.append(_Entry(time=time, text=rest.strip(), line_number=line_number))

        if offset:
            entries = self._apply_offset(entries, offset, lyrics)

        lyrics.lines = self._build_lines(entries, lyrics)
        return lyrics

    def _apply_metadata_tag(
        self,
        lyrics: ParsedLyrics,
        key: str,
        value: str,
        offset: int,
        line_number: int,
    ) -> int:
        if key.strip().lower() == "offset":
            try:
                return int(value)
            except ValueError:
                lyrics.warnings.append(
                    self.parser_warning(f"Invalid offset value: {value!r}", line_number)
                )
                return offset
        if value:
            lyrics.add_metadata(parse_metadata_key(key.strip()), value)
        return offset

    def _apply_offset(self, entries: list[_Entry], offset: int, lyrics: ParsedLyrics) -> list[_Entry]:
        clamped = 0
        for entry in entries:
            shifted = entry.time - offset
            if shifted < 0:
                clamped += 1
                shifted = 0
            entry.time = shifted
        if clamped:
            lyrics.warnings.append(
                self.parser_warning(f"Offset {offset} ms moved {clamped} timestamps before 0, clamped")
            )
        return entries

    def _build_lines(self, entries: list[_Entry], lyrics: ParsedLyrics) -> list[LyricLine]:
        entries = sorted(entries, key=lambda e: e.time)
        pending: list[_PendingLine] = []
        open_line: _PendingLine | None = None

        for time, group in itertools.groupby(entries, key=lambda e: e.time):
            group = list(group)
            if open_line is not None:
                open_line.end = time
                open_line = None

            texted = [e for e in group if e.text]
            if not texted:
                continue

            open_line = _PendingLine(
                start=time,
                texts=[e.text for e in texted[:3]],
                line_number=texted[0].line_number,
                extra=[e.text for e in texted[3:]],
            )
            pending.append(open_line)

        lines: list[LyricLine] = []
        inline_dropped = 0
        out_of_order = 0

        for item in pending:
            end = item.end if item.end is not None else item.start
            line = LyricLine(start_time=item.start, end_time=end)
            content_types = (ContentType.MAIN,) + AUXILIARY_TYPES
            for content_type, entry_text in zip(content_types, item.texts):
                if not self.word_timed and has_inline_timestamps(entry_text):
                    inline_dropped += 1
                track, problems = self._build_track(entry_text, item.start, end)
                out_of_order += problems
                line.add_track(content_type, track)
            for extra_text in item.extra:
                lyrics.warnings.append(
                    self.parser_warning(
                        f"More than three entries share a timestamp, dropped: {extra_text}",
                        item.line_number,
                    )
                )
            lines.append(line)

        if inline_dropped:
            lyrics.warnings.append(
                self.parser_warning(f"Ignored inline word timestamps on {inline_dropped} entries")
            )
        if out_of_order:
            lyrics.warnings.append(
                self.parser_warning(f"Clamped {out_of_order} out-of-order word timestamps")
            )
        return lines

    def _build_track(self, text: str, start: int, end: int) -> tuple[LyricTrack, int]:
        """Build a track from entry text. Inline word timestamps are removed."""
        if has_inline_timestamps(text):
            syllables, _ = parse_inline_syllables(text, start, end)
            text = LyricTrack.from_syllables(syllables).text
        return LyricTrack.from_text(text, start, end), 0

    def _render_track(self, track: LyricTrack, line: LyricLine) -> tuple[str, int]:
        """Render a track's text. Returns (text, untimed syllables dropped)."""
        return track.text, 0

    def serialize(self, lyrics: ParsedLyrics) -> tuple[str, list[ConversionWarning]]:
        warnings: list[ConversionWarning] = []
        output: list[str] = []

        for key, values in lyrics.metadata.items():
            tag = lrc_tag_for_key(key)
            for value in values:
                output.append(f"[{tag}:{' '.join(value.splitlines())}]")

        written = [line for line in lyrics.lines if not line.is_empty()]
        if len(written) < len(lyrics.lines):
            warnings.append(
                self.serializer_warning(f"Dropped {len(lyrics.lines) - len(written)} empty lines")
            )
        warnings.extend(self._lossy_warnings(lyrics, written))

        overlapping = 0
        shared_starts = 0
        untimed = 0

        for index, line in enumerate(written):
            stamp = format_lrc_timestamp(line.start_time)
            main = line.main_track or LyricTrack()
            main_text, dropped = self._render_track(main, line)
            untimed += dropped
            output.append(f"[{stamp}]{main_text}")

            for content_type in AUXILIARY_TYPES:
                track = line.track_of(content_type)
                if track is not None and track.text.strip():
                    text, dropped = self._render_track(track, line)
                    untimed += dropped
                    output.append(f"[{stamp}]{text}")

            if index + 1 < len(written):
                next_start = written[index + 1].start_time
                if format_lrc_timestamp(next_start) == stamp:
                    shared_starts += 1
            else:
                next_start = line.start_time

            if line.end_time != next_start:
                if line.end_time > next_start and index + 1 < len(written):
                    overlapping += 1
                else:
                    output.append(f"[{format_lrc_timestamp(line.end_time)}]")

        if overlapping:
            warnings.append(
                self.serializer_warning(f"Dropped end times of {overlapping} lines overlapping the next line")
            )
        if shared_starts:
            warnings.append(
                self.serializer_warning(
                    f"{shared_starts} lines share a start time with the next line and will read back as translations"
                )
            )
        if untimed:
            warnings.append(
                self.serializer_warning(f"Merged {untimed} untimed syllables into the preceding syllable")
            )

        text = "\n".join(output)
        return (text + "\n" if text else ""), warnings

    def _lossy_warnings(self, lyrics: ParsedLyrics, lines: list[LyricLine]) -> list[ConversionWarning]:
        """Enumerate data in lines the LRC flavour cannot carry."""
        warnings: list[ConversionWarning] = []

        if not self.word_timed:
            syllable_timed = sum(
                1 for line in lines
                if any(a.track.is_syllable_timed for a in line.tracks)
            )
            if syllable_timed:
                warnings.append(
                    self.serializer_warning(f"Dropped syllable timings of {syllable_timed} lines")
                )

        background = sum(1 for line in lines if line.tracks_of(ContentType.BACKGROUND))
        if background:
            warnings.append(
                self.serializer_warning(f"Dropped background vocals of {background} lines")
            )

        if any(line.agent for line in lines) or lyrics.agents:
            warnings.append(self.serializer_warning("Dropped agent assignments"))

        no_main = sum(1 for line in lines if not line.main_text().strip())
        if no_main:
            warnings.append(
                self.serializer_warning(
                    f"{no_main} lines without main text will read back with their translation as main text"
                )
            )

        extra_tracks = sum(
            1 for line in lines
            if any(len(line.tracks_of(ct)) > 1 for ct in (ContentType.MAIN,) + AUXILIARY_TYPES)
        )
        if extra_tracks:
            warnings.append(
                self.serializer_warning(f"Dropped additional tracks of {extra_tracks} lines")
            )

        if any(self._has_sub_centisecond_times(line) for line in lines):
            warnings.append(
                self.serializer_warning("Truncated timestamps to centisecond precision")
            )
        return warnings

    def _has_sub_centisecond_times(self, line: LyricLine) -> bool:
        if line.start_time % 10 or line.end_time % 10:
            return True
        if not self.word_timed:
            return False
        for annotated in line.tracks:
            for syllable in annotated.track.syllables():
                for time in (syllable.start_time, syllable.end_time):
                    if time is not None and time % 10:
                        return True
        return False
