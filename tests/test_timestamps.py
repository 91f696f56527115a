# tests/test_timestamps.py
"""Test LRC and TTML time expressions"""

import pytest

from lyrics_helper.converters.timestamps import (
    format_lrc_timestamp,
    format_ttml_time,
    parse_lrc_timestamp,
    parse_ttml_time,
)


class TestLrcTimestamps:
    """Test LRC time tag parsing and formatting"""

    @pytest.mark.parametrize("text,expected", [
        ("01:02.34", 62340),
        ("01:02.5", 62500),
        ("01:02.05", 62050),
        ("01:02.345", 62345),
        ("01:02", 62000),
        ("01:02:50", 62500),
        ("100:00.00", 6_000_000),
        (" 00:01.00 ", 1000),
    ])
    def test_parse_valid(self, text, expected):
        assert parse_lrc_timestamp(text) == expected

    @pytest.mark.parametrize("text", ["00:60.00", "ab:cd", "", "ti:Title", "1.5"])
    def test_parse_invalid(self, text):
        assert parse_lrc_timestamp(text) is None

    def test_format(self):
        assert format_lrc_timestamp(0) == "00:00.00"
        assert format_lrc_timestamp(62345) == "01:02.34"
        assert format_lrc_timestamp(3_723_456) == "62:03.45"
        assert format_lrc_timestamp(-5) == "00:00.00"


class TestTtmlTimes:
    """Test TTML clock and offset times"""

    @pytest.mark.parametrize("text,expected", [
        ("00:01:02.345", 62345),
        ("01:02.345", 62345),
        ("62.345", 62345),
        ("62.345s", 62345),
        ("1.5s", 1500),
        ("1:00:00.000", 3_600_000),
        ("3", 3000),
    ])
    def test_parse_valid(self, text, expected):
        assert parse_ttml_time(text) == expected

    @pytest.mark.parametrize("text", [None, "", "01:75.000", "abc", "1.2.3"])
    def test_parse_invalid(self, text):
        assert parse_ttml_time(text) is None

    def test_format(self):
        assert format_ttml_time(62345) == "01:02.345"
        assert format_ttml_time(0) == "00:00.000"
        assert format_ttml_time(3_723_456) == "1:02:03.456"
