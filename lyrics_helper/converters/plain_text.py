"""
Plain text converter.

One non-blank input line per LyricLine, without timing: line times are
0 and syllables are untimed. Serializing writes the main text only.

Lossy: all timing, translations, romanizations, background tracks,
agents and metadata.
"""

from lyrics_helper.converters.base import LyricConverter, LyricFormat
from lyrics_helper.model.lyrics import ContentType, LyricLine, LyricTrack
from lyrics_helper.model.result import ConversionWarning, ParsedLyrics


class PlainTextConverter(LyricConverter):
    """Untimed plain text."""

    format = LyricFormat.TXT

    def parse(self, text: str) -> ParsedLyrics:
        lyrics = ParsedLyrics()
        for raw_line in text.lstrip("\ufeff").splitlines():
            content = raw_line.strip()
            if not content:
                continue
            line = LyricLine(start_time=0, end_time=0)
            line.add_track(ContentType.MAIN, LyricTrack.from_text(content))
            lyrics.lines.append(line)
        return lyrics

    def serialize(self, lyrics: ParsedLyrics) -> tuple[str, list[ConversionWarning]]:
        warnings: list[ConversionWarning] = []

        output = [line.main_text() for line in lyrics.lines if line.main_text().strip()]
        skipped = len(lyrics.lines) - len(output)
        if skipped:
            warnings.append(self.serializer_warning(f"Dropped {skipped} lines without main text"))

        timed = any(
            line.start_time or line.end_time
            or any(s.is_timed for a in line.tracks for s in a.track.syllables())
            for line in lyrics.lines
        )
        if timed:
            warnings.append(self.serializer_warning("Dropped all timing information"))

        for content_type, label in (
            (ContentType.TRANSLATION, "translations"),
            (ContentType.ROMANIZATION, "romanizations"),
            (ContentType.BACKGROUND, "background vocals"),
        ):
            count = sum(1 for line in lyrics.lines if line.tracks_of(content_type))
            if count:
                warnings.append(self.serializer_warning(f"Dropped {label} of {count} lines"))

        if any(line.agent for line in lyrics.lines) or lyrics.agents:
            warnings.append(self.serializer_warning("Dropped agent assignments"))
        if lyrics.metadata:
            warnings.append(
                self.serializer_warning(f"Dropped {len(lyrics.metadata)} metadata keys")
            )

        text = "\n".join(output)
        return (text + "\n" if text else ""), warnings
