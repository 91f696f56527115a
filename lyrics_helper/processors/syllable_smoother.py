"""
Syllable timing smoother.

Word-timed lyrics scraped from providers carry jitter: tiny gaps between
syllables that are sung legato, and neighbouring syllables of nearly the
same length whose boundaries wobble by a few milliseconds. The smoother
evens these out without touching deliberate pauses.

For every track and every iteration, consecutive timed syllables (a, b)
of the flattened track are adjusted when both hold:

    0 <= gap = b.start - a.end <= gap_threshold_ms
    |duration(a) - duration(b)| <= duration_threshold_ms

1. Gap closing: both boundaries move toward each other by
   int(gap * factor). With factor <= 0.5 they can meet but never cross.
2. Duration balancing: the shared boundary pair moves by
   int((duration(b) - duration(a)) * factor / 2) toward the longer
   syllable. The move is at most a quarter of the difference, so
   neither syllable can end before it starts.

The first syllable's start and the last syllable's end never move, and
line start/end times are not touched. Untimed syllables break adjacency.
"""

from lyrics_helper.core.logger import get_logger
from lyrics_helper.model.lyrics import LyricLine, LyricSyllable, LyricTrack
from lyrics_helper.model.options import SyllableSmoothingOptions

logger = get_logger(__name__)

MAX_FACTOR = 0.5


def _timed_runs(track: LyricTrack) -> list[list[LyricSyllable]]:
    """Split a track's syllables into runs of consecutive timed syllables."""
    runs: list[list[LyricSyllable]] = [[]]
    for syllable in track.syllables():
        if syllable.is_timed:
            runs[-1].append(syllable)
        elif runs[-1]:
            runs.append([])
    return [run for run in runs if len(run) > 1]


def _smooth_pair(
    a: LyricSyllable,
    b: LyricSyllable,
    factor: float,
    options: SyllableSmoothingOptions,
) -> int:
    gap = b.start_time - a.end_time
    if gap < 0 or gap > options.gap_threshold_ms:
        return 0

    duration_a = a.end_time - a.start_time
    duration_b = b.end_time - b.start_time
    if abs(duration_a - duration_b) > options.duration_threshold_ms:
        return 0

    adjusted = 0

    shift = int(gap * factor)
    if shift:
        a.end_time += shift
        b.start_time -= shift
        adjusted += 1

    duration_a = a.end_time - a.start_time
    duration_b = b.end_time - b.start_time
    delta = int((duration_b - duration_a) * factor / 2)
    if delta:
        a.end_time += delta
        b.start_time += delta
        adjusted += 1

    return adjusted


def smooth_track(track: LyricTrack, options: SyllableSmoothingOptions) -> int:
    """
    Smooth one track in place.

    Returns:
        Number of boundary adjustments made.
    """
    factor = min(max(options.factor, 0.0), MAX_FACTOR)
    if factor == 0.0 or options.iterations <= 0:
        return 0

    runs = _timed_runs(track)
    adjusted = 0
    for _ in range(options.iterations):
        changed = 0
        for run in runs:
            for a, b in zip(run, run[1:]):
                changed += _smooth_pair(a, b, factor, options)
        adjusted += changed
        if not changed:
            break
    return adjusted


def smooth_syllable_timings(lines: list[LyricLine], options: SyllableSmoothingOptions) -> int:
    """
    Smooth syllable timings of every track of every line in place.

    Args:
        lines: Lines to modify.
        options: Smoothing options. A factor outside 0.0-0.5 is clamped.

    Returns:
        Total number of boundary adjustments.
    """
    if not 0.0 <= options.factor <= MAX_FACTOR:
        logger.warning(
            f"Smoothing factor {options.factor} outside 0.0-{MAX_FACTOR}, clamping"
        )

    adjusted = 0
    for line in lines:
        for annotated in line.tracks:
            adjusted += smooth_track(annotated.track, options)

    if adjusted:
        logger.debug(f"Syllable smoother made {adjusted} adjustments")
    return adjusted
