"""Test configuration and fixtures"""

import pytest
from pathlib import Path

from lyrics_helper.model import (
    ContentType,
    LyricLine,
    LyricSyllable,
    LyricTrack,
    MetadataStripperFlags,
    MetadataStripperOptions,
    ParsedLyrics,
)
from lyrics_helper.processors import RegexCache


def make_lines(texts, step=1000):
    """Line-timed lines, one per text, each `step` ms long"""
    lines = []
    for index, text in enumerate(texts):
        start = index * step
        line = LyricLine(start_time=start, end_time=start + step)
        line.add_track(ContentType.MAIN, LyricTrack.from_text(text, start, start + step))
        lines.append(line)
    return lines


def make_syllable_line(parts, start=None, end=None):
    """
    Word-timed line from (text, start, end, leading_space) tuples.

    Line times default to the first syllable start and last syllable end.
    """
    syllables = [
        LyricSyllable(text=text, start_time=s, end_time=e, leading_space=space)
        for text, s, e, space in parts
    ]
    line = LyricLine(
        start_time=parts[0][1] if start is None else start,
        end_time=parts[-1][2] if end is None else end,
    )
    line.add_track(ContentType.MAIN, LyricTrack.from_syllables(syllables))
    return line


def texts_of(lines):
    return [line.main_text() for line in lines]


@pytest.fixture
def regex_cache():
    """Fresh regex cache, isolated from the process-wide one"""
    return RegexCache()


@pytest.fixture
def keyword_options():
    """Stripper options factory with ENABLED plus extra flags"""
    def build(keywords=(), patterns=(), flags=MetadataStripperFlags.NONE, **kwargs):
        return MetadataStripperOptions(
            flags=MetadataStripperFlags.ENABLED | flags,
            keywords=tuple(keywords),
            regex_patterns=tuple(patterns),
            **kwargs,
        )
    return build


@pytest.fixture
def sample_lrc():
    """Plain LRC with metadata, a translation and an end marker"""
    return (
        "[ti:Test Song]\n"
        "[ar:Test Artist]\n"
        "[00:01.00]Hello world\n"
        "[00:01.00]你好世界\n"
        "[00:03.50]Second line\n"
        "[00:06.00]\n"
    )


@pytest.fixture
def sample_elrc():
    """Enhanced LRC with word timestamps"""
    return (
        "[00:12.00]<00:12.00>Hel<00:12.40>lo <00:12.90>world<00:13.60>\n"
        "[00:14.00]<00:14.00>Good<00:14.50>bye<00:15.00>\n"
        "[00:16.00]\n"
    )


@pytest.fixture
def sample_ttml():
    """Apple/AMLL style TTML with agents, background and translation"""
    return (
        '<tt xmlns="http://www.w3.org/ns/ttml" '
        'xmlns:ttm="http://www.w3.org/ns/ttml#metadata" '
        'xmlns:amll="http://www.example.com/ns/amll" xml:lang="en">'
        '<head><metadata>'
        '<ttm:agent type="person" xml:id="v1"><ttm:name type="full">Alice</ttm:name></ttm:agent>'
        '<ttm:agent type="person" xml:id="v2"/>'
        '<amll:meta key="musicName" value="Duet"/>'
        '<amll:meta key="artists" value="Alice"/>'
        '<amll:meta key="artists" value="Bob"/>'
        '</metadata></head>'
        '<body dur="00:06.000"><div begin="00:01.000" end="00:06.000">'
        '<p begin="00:01.000" end="00:03.000" ttm:agent="v1">'
        '<span begin="00:01.000" end="00:01.500">Hel</span>'
        '<span begin="00:01.500" end="00:02.000">lo</span> '
        '<span begin="00:02.000" end="00:03.000">world</span>'
        '<span ttm:role="x-bg" begin="00:02.500" end="00:03.000">'
        '<span begin="00:02.500" end="00:03.000">(ooh)</span></span>'
        '<span ttm:role="x-translation" xml:lang="zh-CN">你好世界</span>'
        '</p>'
        '<p begin="00:04.000" end="00:06.000" ttm:agent="v2">Plain line</p>'
        '</div></body></tt>'
    )


@pytest.fixture
def empty_lyrics():
    return ParsedLyrics()


@pytest.fixture
def lyric_file(tmp_path):
    """Factory writing a lyric file into tmp_path"""
    def write(name, content):
        path = Path(tmp_path) / name
        path.write_text(content, encoding="utf-8")
        return path
    return write
