# tests/test_merge.py
"""Test translation/romanization LRC merge and export"""

import pytest

from lyrics_helper.converters import LrcConverter, extract_auxiliary_lrc, merge_auxiliary_lrc
from lyrics_helper.model import ContentType


@pytest.fixture
def main_lyrics():
    return LrcConverter().parse("[00:01.00]Hello\n[00:03.00]World\n[00:05.00]\n")


class TestMerge:
    """Test matching auxiliary entries to lines"""

    def test_merge_translation(self, main_lyrics):
        translation = "[00:01.10]你好\n[00:03.00]世界\n"

        warnings = merge_auxiliary_lrc(main_lyrics, translation, ContentType.TRANSLATION)

        assert warnings == []
        first, second = main_lyrics.lines
        track = first.track_of(ContentType.TRANSLATION)
        assert track.text == "你好"
        assert (track.start_time, track.end_time) == (1000, 3000)
        assert second.track_of(ContentType.TRANSLATION).text == "世界"

    def test_unmatched_entry_warns(self, main_lyrics):
        romanization = "[00:01.00]ni hao\n[00:09.00]extra\n"

        warnings = merge_auxiliary_lrc(main_lyrics, romanization, ContentType.ROMANIZATION)

        assert len(warnings) == 1
        assert warnings[0].source == "merge:romanization"
        assert warnings[0].line_number == 2
        assert "extra" in warnings[0].message
        assert main_lyrics.lines[1].track_of(ContentType.ROMANIZATION) is None

    def test_double_match_keeps_last(self, main_lyrics):
        translation = "[00:01.00]A\n[00:01.20]B\n"

        warnings = merge_auxiliary_lrc(main_lyrics, translation, ContentType.TRANSLATION)

        assert len(warnings) == 1
        assert "more than once" in warnings[0].message
        assert main_lyrics.lines[0].tracks_of(ContentType.TRANSLATION)[0].text == "B"
        assert len(main_lyrics.lines[0].tracks_of(ContentType.TRANSLATION)) == 1

    def test_tie_goes_to_earlier_line(self):
        lyrics = LrcConverter().parse("[00:01.00]A\n[00:02.00]B\n[00:03.00]\n")

        merge_auxiliary_lrc(lyrics, "[00:01.50]between\n", ContentType.TRANSLATION, tolerance_ms=500)

        assert lyrics.lines[0].track_of(ContentType.TRANSLATION).text == "between"
        assert lyrics.lines[1].track_of(ContentType.TRANSLATION) is None

    def test_tolerance(self, main_lyrics):
        warnings = merge_auxiliary_lrc(
            main_lyrics, "[00:01.20]close\n", ContentType.TRANSLATION, tolerance_ms=100
        )

        assert len(warnings) == 1
        assert main_lyrics.lines[0].track_of(ContentType.TRANSLATION) is None

    def test_parser_warnings_forwarded(self, main_lyrics):
        warnings = merge_auxiliary_lrc(main_lyrics, "no timestamp\n", ContentType.TRANSLATION)

        assert [w.source for w in warnings] == ["parser:lrc"]

    def test_main_content_type_rejected(self, main_lyrics):
        with pytest.raises(ValueError):
            merge_auxiliary_lrc(main_lyrics, "[00:01.00]x\n", ContentType.MAIN)

    def test_merge_into_empty_document(self):
        lyrics = LrcConverter().parse("")

        warnings = merge_auxiliary_lrc(lyrics, "[00:01.00]orphan\n", ContentType.TRANSLATION)

        assert len(warnings) == 1


class TestExtract:
    """Test exporting auxiliary tracks as LRC"""

    def test_extract_translation(self, main_lyrics):
        merge_auxiliary_lrc(main_lyrics, "[00:01.00]你好\n[00:03.00]世界\n", ContentType.TRANSLATION)

        assert extract_auxiliary_lrc(main_lyrics, ContentType.TRANSLATION) == (
            "[00:01.00]你好\n[00:03.00]世界\n"
        )

    def test_extract_missing_track(self, main_lyrics):
        assert extract_auxiliary_lrc(main_lyrics, ContentType.ROMANIZATION) == ""

    def test_extract_rejects_background(self, main_lyrics):
        with pytest.raises(ValueError):
            extract_auxiliary_lrc(main_lyrics, ContentType.BACKGROUND)
