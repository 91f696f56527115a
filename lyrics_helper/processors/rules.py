"""
Compiled matching rules with a process-wide cache.

Regex rules come from user configuration and are matched against every
line of every converted document. Compiling them once per
(pattern, case_sensitive) pair and reusing the compiled pattern keeps
repeated conversions cheap.

The cache grows for the lifetime of the process. The set of patterns is
bounded by user configuration, not by document size.

Usage:
    from lyrics_helper.processors.rules import get_regex_cache

    matcher = get_regex_cache().get_or_compile(r"^NOTE:", case_sensitive=True)
    if matcher is not None and matcher.search(text):
        ...
"""

import re
import threading

from lyrics_helper.core.logger import get_logger

logger = get_logger(__name__)


class RegexCache:
    """
    Thread-safe cache of compiled regex rules.

    Keyed by (pattern, case_sensitive). Compiled re.Pattern objects are
    immutable, so the cached object itself is handed out on every hit.

    The lock is held only for the lookup and for the insert; compilation
    runs outside it. When two threads compile the same pattern
    concurrently, the first insert wins and both get the same object.

    Example:
        cache = RegexCache()
        pattern = cache.get_or_compile("^note:", case_sensitive=False)
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._patterns: dict[tuple[str, bool], re.Pattern] = {}

    def get_or_compile(self, pattern: str, case_sensitive: bool) -> re.Pattern | None:
        """
        Return the compiled matcher for pattern.

        Args:
            pattern: Regular expression source.
            case_sensitive: False compiles with re.IGNORECASE.

        Returns:
            The compiled pattern, or None when pattern is malformed.
            Malformed patterns are logged and not cached.
        """
        key = (pattern, case_sensitive)

        with self._lock:
            cached = self._patterns.get(key)
        if cached is not None:
            return cached

        flags = 0 if case_sensitive else re.IGNORECASE
        try:
            compiled = re.compile(pattern, flags)
        except re.error as e:
            logger.warning(f"Failed to compile regex rule '{pattern}': {e}")
            return None

        with self._lock:
            return self._patterns.setdefault(key, compiled)

    def clear(self) -> None:
        with self._lock:
            self._patterns.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._patterns)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._patterns


_default_cache = RegexCache()


def get_regex_cache() -> RegexCache:
    """Return the process-wide regex cache."""
    return _default_cache
