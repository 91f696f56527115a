# tests/test_model.py
"""Test the canonical lyric model, metadata keys and options"""

import pytest

from conftest import make_lines, make_syllable_line
from lyrics_helper.model import (
    CanonicalMetadataKey,
    ContentType,
    ConversionWarning,
    CustomMetadataKey,
    LyricLine,
    LyricSyllable,
    LyricTrack,
    ParsedLyrics,
    ProcessorSelection,
    ProcessorType,
    ScanLimit,
    parse_metadata_key,
    validate_lines,
)


class TestLyricTrack:
    """Test track construction and display text"""

    def test_from_text_keeps_spacing(self):
        track = LyricTrack.from_text("Hello,  world", 0, 1000)

        assert track.text == "Hello,  world"
        assert len(list(track.syllables())) == 1
        assert (track.start_time, track.end_time) == (0, 1000)

    def test_from_empty_text(self):
        assert LyricTrack.from_text("").words == []

    def test_from_syllables_groups_words(self):
        track = LyricTrack.from_syllables([
            LyricSyllable("Hel", 0, 100),
            LyricSyllable("lo", 100, 200),
            LyricSyllable("world", 250, 400, leading_space=True),
        ])

        assert [w.text for w in track.words] == ["Hello", "world"]
        assert track.text == "Hello world"
        assert track.is_syllable_timed
        assert (track.words[1].start_time, track.words[1].end_time) == (250, 400)

    def test_untimed_track(self):
        track = LyricTrack.from_text("plain")

        assert track.start_time is None
        assert track.end_time is None
        assert not track.is_syllable_timed
        assert next(track.syllables()).duration is None


class TestLyricLine:
    """Test track access on lines"""

    def test_set_track_replaces(self):
        line = LyricLine(start_time=0, end_time=1000)
        line.set_track(ContentType.TRANSLATION, LyricTrack.from_text("one"))
        line.set_track(ContentType.TRANSLATION, LyricTrack.from_text("two"))

        assert [t.text for t in line.tracks_of(ContentType.TRANSLATION)] == ["two"]

    def test_multiple_tracks_of_a_type(self):
        line = LyricLine(start_time=0, end_time=1000)
        line.add_track(ContentType.MAIN, LyricTrack.from_text("part a"))
        line.add_track(ContentType.MAIN, LyricTrack.from_text("part b"))

        assert line.main_text() == "part a"
        assert len(line.tracks_of(ContentType.MAIN)) == 2

    def test_is_empty(self):
        line = LyricLine(start_time=0, end_time=0)
        assert line.is_empty()
        assert line.main_text() == ""

        line.add_track(ContentType.BACKGROUND, LyricTrack.from_text("ooh"))
        assert not line.is_empty()


class TestValidateLines:
    """Test the invariant checker"""

    def test_valid(self):
        lines = make_lines(["a", "b"]) + [make_syllable_line([("c", 2000, 2500, False), ("d", 2500, 3000, True)])]

        assert validate_lines(lines) == []

    def test_reports_problems(self):
        unsorted = make_lines(["a", "b"])
        unsorted.reverse()
        inverted = LyricLine(start_time=5000, end_time=4000)
        overlapping = make_syllable_line([("x", 6000, 6500, False), ("y", 6400, 7000, False)])

        problems = validate_lines(unsorted + [inverted, overlapping])

        assert len(problems) == 3
        assert "not sorted" in problems[0]
        assert "after end" in problems[1]
        assert "overlaps" in problems[2]

    def test_never_raises_on_empty(self):
        assert validate_lines([]) == []


class TestMetadataKeys:
    """Test canonical and custom keys"""

    @pytest.mark.parametrize("raw,expected", [
        ("ti", CanonicalMetadataKey.TITLE),
        ("musicName", CanonicalMetadataKey.TITLE),
        ("music_name", CanonicalMetadataKey.TITLE),
        ("AR", CanonicalMetadataKey.ARTIST),
        ("artists", CanonicalMetadataKey.ARTIST),
        ("LRC Editor", CanonicalMetadataKey.LRC_EDITOR),
        ("ncmMusicId", CanonicalMetadataKey.NCM_MUSIC_ID),
    ])
    def test_canonical(self, raw, expected):
        assert parse_metadata_key(raw) is expected

    def test_custom_key_kept_verbatim(self):
        key = parse_metadata_key("Mood ")

        assert key == CustomMetadataKey("Mood ")
        assert str(key) == "Mood "
        assert hash(key) == hash(CustomMetadataKey("Mood "))

    def test_from_str_rejects_unknown(self):
        with pytest.raises(ValueError):
            CanonicalMetadataKey.from_str("mood")
        with pytest.raises(ValueError):
            CanonicalMetadataKey.from_str("  ")

    def test_keys_index_a_dict(self):
        lyrics = ParsedLyrics()
        lyrics.add_metadata(parse_metadata_key("ar"), "Alice")
        lyrics.add_metadata(CanonicalMetadataKey.ARTIST, "Bob")
        lyrics.add_metadata(parse_metadata_key("mood"), "happy")

        assert lyrics.metadata[CanonicalMetadataKey.ARTIST] == ["Alice", "Bob"]
        assert lyrics.first_metadata(CustomMetadataKey("mood")) == "happy"
        assert lyrics.first_metadata(CanonicalMetadataKey.ALBUM) is None
        assert str(CanonicalMetadataKey.NCM_MUSIC_ID) == "NetEase Music ID"


class TestOptions:
    """Test scan limits and processor selection"""

    @pytest.mark.parametrize("raw,total,expected", [
        (20, 100, 20),
        (20, 5, 5),
        ("3", 10, 3),
        (0.25, 10, 3),
        ("50%", 7, 4),
        (1.0, 9, 9),
    ])
    def test_scan_limit(self, raw, total, expected):
        assert ScanLimit.parse(raw).calculate(total) == expected

    @pytest.mark.parametrize("raw", [-1, 1.5, True, "many", "150%"])
    def test_invalid_scan_limit(self, raw):
        with pytest.raises(ValueError):
            ScanLimit.parse(raw)

    def test_default_scan_limit(self):
        assert ScanLimit().calculate(100) == 20

    def test_selection_order_is_fixed(self):
        selection = ProcessorSelection(
            metadata_stripper=True, syllable_smoother=True, agent_recognizer=True,
            chinese_converter=True,
        )

        assert selection.selected() == [
            ProcessorType.METADATA_STRIPPER,
            ProcessorType.SYLLABLE_SMOOTHER,
            ProcessorType.AGENT_RECOGNIZER,
            ProcessorType.CHINESE_CONVERTER,
        ]
        assert ProcessorSelection().selected() == [
            ProcessorType.METADATA_STRIPPER,
            ProcessorType.AGENT_RECOGNIZER,
        ]


class TestConversionWarning:
    def test_str(self):
        assert str(ConversionWarning("bad tag", "parser:lrc", 3)) == "[parser:lrc] line 3: bad tag"
        assert str(ConversionWarning("lossy", "serializer:txt")) == "[serializer:txt] lossy"
