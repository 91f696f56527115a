"""
Canonical lyric model for lyrics-helper.

This module defines the format-independent representation every parser
produces and every serializer consumes:

    LyricLine
        AnnotatedTrack (one per content role)
            LyricTrack
                Word
                    LyricSyllable

All times are integer milliseconds. Syllable times are optional because
some formats (plain text) carry no timing at all.

Invariants (checked by validate_lines, never enforced by raising):
    - line.start_time <= line.end_time
    - lines are sorted by start_time
    - a timed syllable has start_time <= end_time
    - timed syllables within a word are non-decreasing and non-overlapping
    - word start times within a track are non-decreasing
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum


class ContentType(Enum):
    """Role a track plays within a line."""

    MAIN = "main"
    TRANSLATION = "translation"
    ROMANIZATION = "romanization"
    BACKGROUND = "background"


@dataclass
class LyricSyllable:
    """
    Smallest timed unit of lyric text.

    Attributes:
        text: Syllable text without surrounding separator whitespace.
        start_time: Start in milliseconds, None when untimed.
        end_time: End in milliseconds, None when untimed.
        leading_space: True when a space separates this syllable from
                       the previous one in display text.
    """

    text: str
    start_time: int | None = None
    end_time: int | None = None
    leading_space: bool = False

    @property
    def is_timed(self) -> bool:
        return self.start_time is not None and self.end_time is not None

    @property
    def duration(self) -> int | None:
        if not self.is_timed:
            return None
        return self.end_time - self.start_time


@dataclass
class Word:
    """Ordered run of syllables displayed without separators."""

    syllables: list[LyricSyllable] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(syllable.text for syllable in self.syllables)

    @property
    def start_time(self) -> int | None:
        for syllable in self.syllables:
            if syllable.start_time is not None:
                return syllable.start_time
        return None

    @property
    def end_time(self) -> int | None:
        for syllable in reversed(self.syllables):
            if syllable.end_time is not None:
                return syllable.end_time
        return None


@dataclass
class LyricTrack:
    """
    Ordered sequence of words forming one rendition of a line.

    Attributes:
        words: The words of the track.
        language: Optional BCP-47 language tag (used by translations).
    """

    words: list[Word] = field(default_factory=list)
    language: str | None = None

    @classmethod
    def from_text(
        cls,
        text: str,
        start_time: int | None = None,
        end_time: int | None = None,
        language: str | None = None,
    ) -> "LyricTrack":
        """
        Build a line-timed track from plain text.

        The whole text becomes a single syllable carrying the given times,
        which keeps display text exact (internal spacing is preserved).
        """
        if not text:
            return cls(words=[], language=language)
        syllable = LyricSyllable(text=text, start_time=start_time, end_time=end_time)
        return cls(words=[Word(syllables=[syllable])], language=language)

    @classmethod
    def from_syllables(
        cls,
        syllables: list[LyricSyllable],
        language: str | None = None,
    ) -> "LyricTrack":
        """
        Group syllables into words.

        A syllable with leading_space set starts a new word; all others
        attach to the current word.
        """
        words: list[Word] = []
        for syllable in syllables:
            if not words or syllable.leading_space:
                words.append(Word())
            words[-1].syllables.append(syllable)
        return cls(words=words, language=language)

    def syllables(self) -> Iterator[LyricSyllable]:
        """Iterate over all syllables of all words in order."""
        for word in self.words:
            yield from word.syllables

    @property
    def text(self) -> str:
        parts: list[str] = []
        for index, syllable in enumerate(self.syllables()):
            if index > 0 and syllable.leading_space:
                parts.append(" ")
            parts.append(syllable.text)
        return "".join(parts)

    @property
    def start_time(self) -> int | None:
        for syllable in self.syllables():
            if syllable.start_time is not None:
                return syllable.start_time
        return None

    @property
    def end_time(self) -> int | None:
        end_time = None
        for syllable in self.syllables():
            if syllable.end_time is not None:
                end_time = syllable.end_time
        return end_time

    @property
    def is_syllable_timed(self) -> bool:
        """True when the track holds more than one timed syllable."""
        return sum(1 for s in self.syllables() if s.is_timed) > 1


@dataclass
class AnnotatedTrack:
    """A LyricTrack tagged with the role it plays in its line."""

    content_type: ContentType
    track: LyricTrack


@dataclass
class LyricLine:
    """
    One displayed lyric line.

    Attributes:
        start_time: Line start in milliseconds.
        end_time: Line end in milliseconds (>= start_time).
        tracks: Annotated tracks owned by this line.
        agent: Singer/agent id (e.g. "v1"), None when unknown.
    """

    start_time: int
    end_time: int
    tracks: list[AnnotatedTrack] = field(default_factory=list)
    agent: str | None = None

    def add_track(self, content_type: ContentType, track: LyricTrack) -> None:
        self.tracks.append(AnnotatedTrack(content_type=content_type, track=track))

    def set_track(self, content_type: ContentType, track: LyricTrack) -> None:
        """Replace the first track of content_type, or add it when missing."""
        for annotated in self.tracks:
            if annotated.content_type is content_type:
                annotated.track = track
                return
        self.add_track(content_type, track)

    def tracks_of(self, content_type: ContentType) -> list[LyricTrack]:
        return [a.track for a in self.tracks if a.content_type is content_type]

    def track_of(self, content_type: ContentType) -> LyricTrack | None:
        tracks = self.tracks_of(content_type)
        return tracks[0] if tracks else None

    @property
    def main_track(self) -> LyricTrack | None:
        return self.track_of(ContentType.MAIN)

    def main_text(self) -> str:
        track = self.main_track
        return track.text if track is not None else ""

    def is_empty(self) -> bool:
        return all(not a.track.text.strip() for a in self.tracks)


def validate_lines(lines: list[LyricLine]) -> list[str]:
    """
    Check the structural invariants of a line sequence.

    Args:
        lines: The lines to check.

    Returns:
        List of human-readable problems, empty when the sequence is valid.
        Never raises.
    """
    problems: list[str] = []
    previous_start: int | None = None

    for line_index, line in enumerate(lines, start=1):
        if line.start_time > line.end_time:
            problems.append(
                f"line {line_index}: start {line.start_time} after end {line.end_time}"
            )
        if previous_start is not None and line.start_time < previous_start:
            problems.append(f"line {line_index}: lines are not sorted by start time")
        previous_start = line.start_time

        for annotated in line.tracks:
            role = annotated.content_type.value
            previous_word_start: int | None = None
            for word in annotated.track.words:
                word_start = word.start_time
                if (
                    word_start is not None
                    and previous_word_start is not None
                    and word_start < previous_word_start
                ):
                    problems.append(f"line {line_index} ({role}): words out of order")
                if word_start is not None:
                    previous_word_start = word_start

                previous_end: int | None = None
                for syllable in word.syllables:
                    if not syllable.is_timed:
                        continue
                    if syllable.start_time > syllable.end_time:
                        problems.append(
                            f"line {line_index} ({role}): syllable '{syllable.text}' "
                            f"starts after it ends"
                        )
                    if previous_end is not None and syllable.start_time < previous_end:
                        problems.append(
                            f"line {line_index} ({role}): syllable '{syllable.text}' "
                            f"overlaps its predecessor"
                        )
                    previous_end = syllable.end_time

    return problems
