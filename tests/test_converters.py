# tests/test_converters.py
"""Test format converters"""

from pathlib import Path

import pytest

from conftest import make_lines, make_syllable_line
from lyrics_helper.converters import (
    EnhancedLrcConverter,
    LrcConverter,
    LyricFormat,
    PlainTextConverter,
    TtmlConverter,
    get_converter,
)
from lyrics_helper.core import UnsupportedFormatError
from lyrics_helper.model import (
    CanonicalMetadataKey,
    ContentType,
    CustomMetadataKey,
    LyricTrack,
    ParsedLyrics,
)


def _sources(warnings):
    return [w.source for w in warnings]


class TestLyricFormat:
    """Test format resolution"""

    @pytest.mark.parametrize("raw,expected", [
        ("lrc", LyricFormat.LRC),
        ("LRC", LyricFormat.LRC),
        (".lrc", LyricFormat.LRC),
        ("elrc", LyricFormat.ENHANCED_LRC),
        ("enhanced-lrc", LyricFormat.ENHANCED_LRC),
        ("ttml", LyricFormat.TTML),
        ("xml", LyricFormat.TTML),
        ("text", LyricFormat.TXT),
    ])
    def test_from_str(self, raw, expected):
        assert LyricFormat.from_str(raw) is expected

    def test_unknown_format(self):
        with pytest.raises(UnsupportedFormatError) as exc_info:
            LyricFormat.from_str("qrc")
        assert exc_info.value.details["format"] == "qrc"

    def test_from_path(self):
        assert LyricFormat.from_path(Path("song.TTML")) is LyricFormat.TTML
        with pytest.raises(UnsupportedFormatError):
            LyricFormat.from_path(Path("song"))

    def test_registry(self):
        assert isinstance(get_converter(LyricFormat.LRC), LrcConverter)
        assert isinstance(get_converter("elrc"), EnhancedLrcConverter)
        assert isinstance(get_converter("ttml"), TtmlConverter)
        assert isinstance(get_converter(".txt"), PlainTextConverter)
        with pytest.raises(UnsupportedFormatError):
            get_converter("srt")


class TestLrcParsing:
    """Test LRC parsing"""

    def test_lines_metadata_and_translation(self, sample_lrc):
        lyrics = LrcConverter().parse(sample_lrc)

        assert lyrics.warnings == []
        assert lyrics.metadata == {
            CanonicalMetadataKey.TITLE: ["Test Song"],
            CanonicalMetadataKey.ARTIST: ["Test Artist"],
        }
        first, second = lyrics.lines
        assert (first.start_time, first.end_time) == (1000, 3500)
        assert first.main_text() == "Hello world"
        assert first.track_of(ContentType.TRANSLATION).text == "你好世界"
        assert (second.start_time, second.end_time) == (3500, 6000)

    def test_repeated_time_tags(self):
        text = "[00:01.00][00:05.00]Chorus\n[00:03.00]Verse\n"

        lyrics = LrcConverter().parse(text)

        assert [(l.start_time, l.end_time, l.main_text()) for l in lyrics.lines] == [
            (1000, 3000, "Chorus"),
            (3000, 5000, "Verse"),
            (5000, 5000, "Chorus"),
        ]

    def test_malformed_lines_become_warnings(self):
        text = "[00:01.00]Good\n[00:61.00]Bad seconds\nno tag at all\n[00:02.00]Also good\n"

        lyrics = LrcConverter().parse(text)

        assert [l.main_text() for l in lyrics.lines] == ["Good", "Also good"]
        assert [(w.source, w.line_number) for w in lyrics.warnings] == [
            ("parser:lrc", 2),
            ("parser:lrc", 3),
        ]

    def test_metadata_keys(self):
        text = "[by:Editor]\n[mood:happy]\n[length:03:30]\n[00:01.00]Line\n"

        lyrics = LrcConverter().parse(text)

        assert lyrics.metadata[CanonicalMetadataKey.LRC_EDITOR] == ["Editor"]
        assert lyrics.metadata[CustomMetadataKey("mood")] == ["happy"]
        assert lyrics.metadata[CanonicalMetadataKey.LENGTH] == ["03:30"]

    def test_offset(self):
        lyrics = LrcConverter().parse("[offset:500]\n[00:01.00]A\n[00:02.00]B\n")

        assert [l.start_time for l in lyrics.lines] == [500, 1500]
        assert CustomMetadataKey("offset") not in lyrics.metadata

    def test_offset_clamped(self):
        lyrics = LrcConverter().parse("[offset:2000]\n[00:01.00]A\n")

        assert lyrics.lines[0].start_time == 0
        assert len(lyrics.warnings) == 1

    def test_fourth_entry_dropped(self):
        text = "[00:01.00]Main\n[00:01.00]Translation\n[00:01.00]Roman\n[00:01.00]Extra\n"

        lyrics = LrcConverter().parse(text)

        line = lyrics.lines[0]
        assert line.track_of(ContentType.ROMANIZATION).text == "Roman"
        assert len(line.tracks) == 3
        assert "Extra" in lyrics.warnings[0].message

    def test_inline_timestamps_ignored(self):
        lyrics = LrcConverter().parse("[00:01.00]<00:01.00>Hel<00:01.50>lo\n[00:02.00]\n")

        assert lyrics.lines[0].main_text() == "Hello"
        assert not lyrics.lines[0].main_track.is_syllable_timed
        assert len(lyrics.warnings) == 1

    def test_bom_and_blank_lines(self):
        lyrics = LrcConverter().parse("\ufeff[00:01.00]A\n\n   \n[00:02.00]B\n")

        assert [l.main_text() for l in lyrics.lines] == ["A", "B"]
        assert lyrics.warnings == []


class TestLrcSerializing:
    """Test LRC output"""

    def test_round_trip_is_exact(self, sample_lrc):
        converter = LrcConverter()

        text, warnings = converter.serialize(converter.parse(sample_lrc))

        assert text == sample_lrc
        assert warnings == []

    def test_end_marker_for_gap(self):
        lyrics = ParsedLyrics(lines=make_lines(["A", "B"], step=1000))
        lyrics.lines[0].end_time = 800

        text, _ = LrcConverter().serialize(lyrics)

        assert text == "[00:00.00]A\n[00:00.80]\n[00:01.00]B\n[00:02.00]\n"

    def test_lossy_warnings(self):
        line = make_syllable_line([("Hel", 1000, 1500, False), ("lo", 1500, 2005, False)])
        line.add_track(ContentType.BACKGROUND, LyricTrack.from_text("ooh", 1000, 2000))
        line.agent = "v1"
        lyrics = ParsedLyrics(lines=[line], agents={"v1": "Alice"})

        text, warnings = LrcConverter().serialize(lyrics)

        assert text == "[00:01.00]Hello\n[00:02.00]\n"
        messages = " ".join(w.message for w in warnings)
        assert "syllable timings" in messages
        assert "background" in messages
        assert "agent" in messages
        assert "centisecond" in messages
        assert set(_sources(warnings)) == {"serializer:lrc"}

    def test_empty_lines_dropped(self):
        lyrics = ParsedLyrics(lines=make_lines(["A", "", "B"]))

        text, warnings = LrcConverter().serialize(lyrics)

        assert text == "[00:00.00]A\n[00:01.00]\n[00:02.00]B\n[00:03.00]\n"
        assert any("empty" in w.message for w in warnings)

    def test_empty_document(self, empty_lyrics):
        assert LrcConverter().serialize(empty_lyrics) == ("", [])


class TestEnhancedLrc:
    """Test word-timed LRC"""

    def test_parse_syllables(self, sample_elrc):
        lyrics = EnhancedLrcConverter().parse(sample_elrc)

        first = lyrics.lines[0]
        assert (first.start_time, first.end_time) == (12000, 14000)
        track = first.main_track
        assert track.text == "Hello world"
        assert [w.text for w in track.words] == ["Hello", "world"]
        assert [(s.start_time, s.end_time) for s in track.syllables()] == [
            (12000, 12400), (12400, 12900), (12900, 13600),
        ]
        assert lyrics.lines[1].main_track.text == "Goodbye"

    def test_round_trip_is_exact(self, sample_elrc):
        converter = EnhancedLrcConverter()

        text, warnings = converter.serialize(converter.parse(sample_elrc))

        assert text == sample_elrc
        assert warnings == []

    def test_gap_between_syllables(self):
        body = "<00:01.00>a<00:01.20> <00:01.50>b<00:02.00>"
        converter = EnhancedLrcConverter()

        lyrics = converter.parse(f"[00:01.00]{body}\n[00:03.00]\n")
        text, _ = converter.serialize(lyrics)

        syllables = list(lyrics.lines[0].main_track.syllables())
        assert [(s.text, s.start_time, s.end_time, s.leading_space) for s in syllables] == [
            ("a", 1000, 1200, False),
            ("b", 1500, 2000, True),
        ]
        assert text.splitlines()[0] == f"[00:01.00]{body}"

    def test_out_of_order_clamped(self):
        lyrics = EnhancedLrcConverter().parse("[00:01.00]<00:01.50>a<00:01.20>\n")

        syllable = next(lyrics.lines[0].main_track.syllables())
        assert syllable.end_time == syllable.start_time == 1500
        assert len(lyrics.warnings) == 1

    def test_line_timed_text_kept_plain(self):
        converter = EnhancedLrcConverter()
        lyrics = LrcConverter().parse("[00:01.00]Plain\n[00:02.00]\n")

        text, _ = converter.serialize(lyrics)

        assert text == "[00:01.00]Plain\n[00:02.00]\n"


class TestTtml:
    """Test TTML parsing and output"""

    def test_parse(self, sample_ttml):
        lyrics = TtmlConverter().parse(sample_ttml)

        assert lyrics.warnings == []
        assert lyrics.agents == {"v1": "Alice", "v2": "v2"}
        assert lyrics.metadata[CanonicalMetadataKey.TITLE] == ["Duet"]
        assert lyrics.metadata[CanonicalMetadataKey.ARTIST] == ["Alice", "Bob"]
        assert lyrics.metadata[CanonicalMetadataKey.LANGUAGE] == ["en"]

        first, second = lyrics.lines
        assert first.agent == "v1"
        assert first.main_text() == "Hello world"
        assert [w.text for w in first.main_track.words] == ["Hello", "world"]
        assert first.track_of(ContentType.BACKGROUND).text == "(ooh)"
        translation = first.track_of(ContentType.TRANSLATION)
        assert (translation.text, translation.language) == ("你好世界", "zh-CN")

        assert second.main_text() == "Plain line"
        syllable = next(second.main_track.syllables())
        assert (syllable.start_time, syllable.end_time) == (4000, 6000)

    def test_round_trip(self, sample_ttml):
        converter = TtmlConverter()
        lyrics = converter.parse(sample_ttml)

        text, warnings = converter.serialize(lyrics)
        again = converter.parse(text)

        assert warnings == []
        assert again.lines == lyrics.lines
        assert again.agents == lyrics.agents
        assert again.metadata == lyrics.metadata

    def test_line_timing_from_spans(self):
        text = (
            '<tt xmlns="http://www.w3.org/ns/ttml"><body><div>'
            '<p><span begin="1.0s" end="1.5s">a</span><span begin="1.5s" end="2.25s">b</span></p>'
            '</div></body></tt>'
        )

        lyrics = TtmlConverter().parse(text)

        assert (lyrics.lines[0].start_time, lyrics.lines[0].end_time) == (1000, 2250)

    def test_invalid_times_become_warnings(self):
        text = (
            '<tt xmlns="http://www.w3.org/ns/ttml"><body><div>'
            '<p begin="abc" end="00:02.000">untimed</p>'
            '<p begin="00:03.000" end="00:04.000">kept</p>'
            '</div></body></tt>'
        )

        lyrics = TtmlConverter().parse(text)

        assert [l.main_text() for l in lyrics.lines] == ["kept"]
        assert [w.line_number for w in lyrics.warnings] == [1, 1]

    def test_malformed_xml(self):
        lyrics = TtmlConverter().parse("<tt><p>")

        assert lyrics.lines == []
        assert _sources(lyrics.warnings) == ["parser:ttml"]

    def test_lines_sorted(self):
        text = (
            '<tt xmlns="http://www.w3.org/ns/ttml"><body><div>'
            '<p begin="00:05.000" end="00:06.000">second</p>'
            '<p begin="00:01.000" end="00:02.000">first</p>'
            '</div></body></tt>'
        )

        lyrics = TtmlConverter().parse(text)

        assert [l.main_text() for l in lyrics.lines] == ["first", "second"]

    def test_serialize_agents_and_metadata(self):
        lyrics = ParsedLyrics(lines=make_lines(["one", "two"]))
        lyrics.lines[0].agent = "v1"
        lyrics.lines[1].agent = "v1000"
        lyrics.agents = {"v1": "Alice"}
        lyrics.add_metadata(CanonicalMetadataKey.TITLE, "Song")

        text, _ = TtmlConverter().serialize(lyrics)

        assert 'xml:id="v1"' in text
        assert "Alice" in text
        assert 'type="group"' in text
        assert 'key="musicName"' in text
        assert 'value="Song"' in text

    def test_empty_document(self, empty_lyrics):
        text, warnings = TtmlConverter().serialize(empty_lyrics)

        assert text.startswith("<tt")
        assert warnings == []


class TestPlainText:
    """Test plain text"""

    def test_parse(self):
        lyrics = PlainTextConverter().parse("Line one\n\n  Line two  \n")

        assert [l.main_text() for l in lyrics.lines] == ["Line one", "Line two"]
        assert all(l.start_time == l.end_time == 0 for l in lyrics.lines)

    def test_round_trip(self):
        converter = PlainTextConverter()

        text, warnings = converter.serialize(converter.parse("Line one\nLine two\n"))

        assert text == "Line one\nLine two\n"
        assert warnings == []

    def test_timed_input_warns(self, sample_lrc):
        lyrics = LrcConverter().parse(sample_lrc)

        text, warnings = PlainTextConverter().serialize(lyrics)

        assert text == "Hello world\nSecond line\n"
        messages = [w.message for w in warnings]
        assert "Dropped all timing information" in messages
        assert "Dropped translations of 1 lines" in messages
        assert any("metadata" in m for m in messages)


class TestCrossFormat:
    """Test conversions between formats through the model"""

    def test_elrc_to_ttml_keeps_syllables(self, sample_elrc):
        lyrics = EnhancedLrcConverter().parse(sample_elrc)

        text, _ = TtmlConverter().serialize(lyrics)
        again = TtmlConverter().parse(text)

        assert again.lines == lyrics.lines

    def test_ttml_to_lrc_to_ttml_keeps_text_and_timing(self, sample_ttml):
        lyrics = TtmlConverter().parse(sample_ttml)

        lrc_text, warnings = LrcConverter().serialize(lyrics)
        again = LrcConverter().parse(lrc_text)

        assert [l.main_text() for l in again.lines] == ["Hello world", "Plain line"]
        assert [(l.start_time, l.end_time) for l in again.lines] == [(1000, 3000), (4000, 6000)]
        assert again.lines[0].track_of(ContentType.TRANSLATION).text == "你好世界"
        assert warnings
