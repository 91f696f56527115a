"""
Time expression parsing and formatting shared by the converters.

All functions work in integer milliseconds.

LRC:  "mm:ss.xx" (centiseconds), "mm:ss.xxx", "mm:ss" and the
      non-standard "mm:ss:xx" are accepted; output is always "mm:ss.xx".
TTML: "hh:mm:ss.fff", "mm:ss.fff", "ss.fff" and "12.5s" are accepted;
      output is "mm:ss.fff", or "h:mm:ss.fff" from one hour on.
"""

import re

LRC_TIME_PATTERN = r"\d+:[0-5]?\d(?:[.:]\d{1,3})?"

_LRC_TIME_RE = re.compile(r"^\s*(\d+):(\d{1,2})(?:[.:](\d{1,3}))?\s*$")

_TTML_CLOCK_RE = re.compile(r"^\s*(?:(?:(\d+):)?(\d+):)?(\d+)(?:\.(\d+))?s?\s*$")


def _fraction_to_ms(fraction: str | None) -> int:
    if not fraction:
        return 0
    # "5" -> 500 ms, "05" -> 50 ms, "005" -> 5 ms
    return int(fraction[:3].ljust(3, "0"))


def parse_lrc_timestamp(text: str) -> int | None:
    """
    Parse an LRC time tag body into milliseconds.

    Returns:
        Milliseconds, or None when text is not a valid time tag.
    """
    match = _LRC_TIME_RE.match(text)
    if match is None:
        return None
    minutes, seconds, fraction = match.groups()
    if int(seconds) >= 60:
        return None
    return (int(minutes) * 60 + int(seconds)) * 1000 + _fraction_to_ms(fraction)


def format_lrc_timestamp(ms: int) -> str:
    """Format milliseconds as "mm:ss.xx", truncating to centiseconds."""
    ms = max(0, ms)
    minutes, remainder = divmod(ms, 60_000)
    seconds, millis = divmod(remainder, 1000)
    return f"{minutes:02d}:{seconds:02d}.{millis // 10:02d}"


def parse_ttml_time(text: str | None) -> int | None:
    """
    Parse a TTML clock or offset time expression into milliseconds.

    Returns:
        Milliseconds, or None when text is missing or malformed.
    """
    if text is None:
        return None
    match = _TTML_CLOCK_RE.match(text)
    if match is None:
        return None
    hours, minutes, seconds, fraction = match.groups()
    if minutes is not None and int(seconds) >= 60:
        return None
    total_seconds = int(hours or 0) * 3600 + int(minutes or 0) * 60 + int(seconds)
    return total_seconds * 1000 + _fraction_to_ms(fraction)


def format_ttml_time(ms: int) -> str:
    ms = max(0, ms)
    hours, remainder = divmod(ms, 3_600_000)
    minutes, remainder = divmod(remainder, 60_000)
    seconds, millis = divmod(remainder, 1000)
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}.{millis:03d}"
    return f"{minutes:02d}:{seconds:02d}.{millis:03d}"
