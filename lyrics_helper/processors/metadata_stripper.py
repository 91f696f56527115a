"""
Metadata line stripper.

Lyrics from providers often open and close with credit lines that are
not sung ("作词：...", "Composed by: ...", "TME享有本翻译作品的著作权").
This processor removes a contiguous header run and a contiguous footer
run of such lines, leaving interior lines alone even when they happen to
match a rule.

Algorithm:
    1. Disabled by flag -> no-op.
    2. No keywords and no regex patterns configured -> use the shipped
       default rules (default_stripper_rules.yaml).
    3. Build StrippingRules: keywords case-folded unless keyword matching
       is case-sensitive; regexes compiled through the rule cache (blank
       and malformed patterns dropped).
    4. Header: within the first header_scan_limit lines, the LAST
       matching line decides the cut, so a non-matching line sandwiched
       between credits is stripped too.
    5. Footer: within the last footer_scan_limit lines (never before the
       header cut) the FIRST matching line decides the cut.
    6. Keep the slice between the cuts. When the cuts cross, every line
       was classified as metadata and the sequence is cleared.

Usage:
    removed = strip_descriptive_metadata_lines(lines, options)
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import yaml

from lyrics_helper.core.logger import get_logger
from lyrics_helper.model.lyrics import LyricLine
from lyrics_helper.model.options import MetadataStripperFlags, MetadataStripperOptions
from lyrics_helper.processors.rules import RegexCache, get_regex_cache

logger = get_logger(__name__)

DEFAULT_RULES_PATH = Path(__file__).with_name("default_stripper_rules.yaml")

# Opening/closing pairs unwrapped before the keyword check
_WRAPPER_PAIRS = (("[", "]"), ("(", ")"), ("（", "）"), ("【", "】"))

_KEYWORD_SEPARATORS = (":", "：")


@lru_cache(maxsize=1)
def load_default_rules() -> tuple[tuple[str, ...], tuple[str, ...]]:
    """
    Load the shipped default rules.

    Returns:
        (keywords, regex_patterns) read from default_stripper_rules.yaml.
        The file is read once per process.
    """
    with open(DEFAULT_RULES_PATH, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    keywords = tuple(str(k) for k in raw.get("keywords") or ())
    patterns = tuple(str(p) for p in raw.get("regex_patterns") or ())
    return keywords, patterns


@dataclass(frozen=True)
class StrippingRules:
    """
    Read-only matching rules prepared from MetadataStripperOptions.

    Attributes:
        keywords: Keywords, case-folded unless keyword_case_sensitive.
        keyword_case_sensitive: Whether keyword matching keeps case.
        regexes: Compiled regex rules (empty when regex stripping is off).
    """

    keywords: tuple[str, ...]
    keyword_case_sensitive: bool
    regexes: tuple

    @classmethod
    def from_options(
        cls,
        options: MetadataStripperOptions,
        cache: RegexCache | None = None,
    ) -> "StrippingRules":
        cache = cache if cache is not None else get_regex_cache()
        flags = options.flags

        regexes = []
        if MetadataStripperFlags.ENABLE_REGEX_STRIPPING in flags:
            regex_case_sensitive = MetadataStripperFlags.REGEX_CASE_SENSITIVE in flags
            for pattern in options.regex_patterns:
                if not pattern.strip():
                    continue
                compiled = cache.get_or_compile(pattern, regex_case_sensitive)
                if compiled is not None:
                    regexes.append(compiled)

        keyword_case_sensitive = MetadataStripperFlags.KEYWORD_CASE_SENSITIVE in flags
        keywords = tuple(
            keyword if keyword_case_sensitive else keyword.casefold()
            for keyword in options.keywords
            if keyword.strip()
        )

        return cls(
            keywords=keywords,
            keyword_case_sensitive=keyword_case_sensitive,
            regexes=tuple(regexes),
        )

    @property
    def has_rules(self) -> bool:
        return bool(self.keywords) or bool(self.regexes)


def _text_for_keyword_check(text: str) -> str:
    """
    Normalize a line before keyword matching.

    A line wrapped in a bracket pair is unwrapped one level ("[ti:Title]"
    -> "ti:Title"). A line that opens with a bracket but does not close
    with one has everything up to the first closing bracket removed
    ("[00:01.00] Artist: A" -> "Artist: A", "(Alice) Lyricist: A" ->
    "Lyricist: A").
    """
    text = text.strip()
    for opener, closer in _WRAPPER_PAIRS:
        if not text.startswith(opener):
            continue
        if text.endswith(closer) and len(text) >= 2:
            return text[len(opener):-len(closer)]
        close_index = text.find(closer)
        if close_index != -1:
            return text[close_index + len(closer):].lstrip()
        return text
    return text


def line_matches_rules(line_text: str, rules: StrippingRules) -> bool:
    """
    Check whether a line is descriptive metadata.

    Keyword rule: the normalized line starts with a keyword and the rest
    (after leading whitespace) starts with ':' or '：'.
    Regex rule: any regex matches anywhere in the raw line text.
    """
    if rules.keywords:
        candidate = _text_for_keyword_check(line_text)
        if not rules.keyword_case_sensitive:
            candidate = candidate.casefold()
        for keyword in rules.keywords:
            if candidate.startswith(keyword):
                remainder = candidate[len(keyword):].lstrip()
                if remainder.startswith(_KEYWORD_SEPARATORS):
                    return True

    return any(regex.search(line_text) for regex in rules.regexes)


def _find_first_lyric_index(lines: list[LyricLine], rules: StrippingRules, limit: int) -> int:
    last_match: int | None = None
    for index, line in enumerate(lines[:limit]):
        if line_matches_rules(line.main_text(), rules):
            last_match = index
    return 0 if last_match is None else last_match + 1


def _find_footer_cut_index(
    lines: list[LyricLine],
    first_lyric_index: int,
    rules: StrippingRules,
    limit: int,
) -> int:
    if first_lyric_index >= len(lines):
        return first_lyric_index

    scan_start = max(len(lines) - limit, first_lyric_index)
    for index in range(scan_start, len(lines)):
        if line_matches_rules(lines[index].main_text(), rules):
            return index
    return len(lines)


def strip_descriptive_metadata_lines(
    lines: list[LyricLine],
    options: MetadataStripperOptions,
    cache: RegexCache | None = None,
) -> int:
    """
    Remove header and footer metadata lines in place.

    Args:
        lines: Line sequence to modify.
        options: Stripper options.
        cache: Regex cache to compile rules with (process-wide by default).

    Returns:
        Number of removed lines.
    """
    if MetadataStripperFlags.ENABLED not in options.flags:
        logger.debug("Metadata stripper disabled, skipping")
        return 0

    keywords = options.keywords
    patterns = options.regex_patterns
    if not keywords and not patterns:
        logger.debug("No stripping rules configured, using default rules")
        keywords, patterns = load_default_rules()

    rules = StrippingRules.from_options(
        MetadataStripperOptions(
            flags=options.flags,
            keywords=tuple(keywords),
            regex_patterns=tuple(patterns),
            header_scan_limit=options.header_scan_limit,
            footer_scan_limit=options.footer_scan_limit,
        ),
        cache=cache,
    )

    if not lines or not rules.has_rules:
        return 0

    original_count = len(lines)
    header_limit = options.header_scan_limit.calculate(original_count)
    footer_limit = options.footer_scan_limit.calculate(original_count)

    first_lyric_index = _find_first_lyric_index(lines, rules, header_limit)
    footer_cut_index = _find_footer_cut_index(lines, first_lyric_index, rules, footer_limit)

    if first_lyric_index < footer_cut_index:
        del lines[footer_cut_index:]
        del lines[:first_lyric_index]
    elif first_lyric_index > 0 or footer_cut_index < original_count:
        lines.clear()

    removed = original_count - len(lines)
    if removed:
        logger.debug(f"Metadata stripper removed {removed} of {original_count} lines")
    return removed
