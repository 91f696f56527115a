# tests/test_agent_recognizer.py
"""Test singer/agent recognition"""

from conftest import make_lines, make_syllable_line, texts_of
from lyrics_helper.model import ParsedLyrics
from lyrics_helper.processors import AgentAssignment, MarkerAgentClassifier, recognize_agents


def _lyrics(texts):
    return ParsedLyrics(lines=make_lines(texts))


class TestMarkerClassifier:
    """Test marker detection"""

    def test_inline_markers(self):
        classifier = MarkerAgentClassifier()
        lines = make_lines(["Alice: I was waiting", "for you", "Bob: Me too"])

        assignments = classifier.classify(lines)

        assert [(a.line_index, a.agent_name) for a in assignments] == [(0, "Alice"), (2, "Bob")]
        assert assignments[0].marker_length == len("Alice: ")
        assert not assignments[0].marker_only

    def test_single_marker_not_trusted(self):
        """One marker alone is more likely lyric text"""
        lines = make_lines(["Baby: don't go", "Stay with me"])

        assert MarkerAgentClassifier().classify(lines) == []

    def test_section_headers(self):
        lines = make_lines(["[Verse 1: Alice]", "First line", "[Chorus - Bob]", "Second line"])

        assignments = MarkerAgentClassifier().classify(lines)

        assert [(a.agent_name, a.marker_only) for a in assignments] == [("Alice", True), ("Bob", True)]

    def test_lrc_tag_lines_are_not_headers(self):
        lines = make_lines(["[ti:Title]", "[ar:Someone]", "[offset:+200]", "[Artist: Bob]", "Lyric one"])

        assert MarkerAgentClassifier(min_markers=1).classify(lines) == []

    def test_full_width_markers(self):
        lines = make_lines(["（男）：你好", "（女）：我也好"])

        assignments = MarkerAgentClassifier().classify(lines)

        assert [a.agent_name for a in assignments] == ["男", "女"]

    def test_non_markers_ignored(self):
        """Timestamps, URLs, long phrases and colon-less brackets are not markers"""
        lines = make_lines([
            "12:30 tonight",
            "http://example.com",
            "(ooh) yeah",
            "And then I said to everyone in the room: stop",
        ])

        assert MarkerAgentClassifier(min_markers=1).classify(lines) == []


class TestRecognizeAgents:
    """Test agent assignment on documents"""

    def test_assigns_and_strips_markers(self):
        lyrics = _lyrics(["Alice: I was waiting", "for you", "Bob: Me too"])

        warnings = recognize_agents(lyrics)

        assert warnings == []
        assert texts_of(lyrics.lines) == ["I was waiting", "for you", "Me too"]
        assert [line.agent for line in lyrics.lines] == ["v1", "v1", "v2"]
        assert lyrics.agents == {"v1": "Alice", "v2": "Bob"}

    def test_group_agent(self):
        lyrics = _lyrics(["Alice: one", "Bob: two", "Alice & Bob: together", "合：一起唱"])

        recognize_agents(lyrics)

        assert [line.agent for line in lyrics.lines] == ["v1", "v2", "v1000", "v1000"]
        assert lyrics.agents["v1000"] == "Alice & Bob"

    def test_spelling_variants_unified(self):
        lyrics = _lyrics(["Alice: one", "alice: two", "Alice.: three"])

        recognize_agents(lyrics)

        assert [line.agent for line in lyrics.lines] == ["v1", "v1", "v1"]
        assert lyrics.agents == {"v1": "Alice"}

    def test_marker_only_lines_removed(self):
        lyrics = _lyrics(["[Verse 1: Alice]", "First line", "[Chorus - Bob]", "Second line"])

        recognize_agents(lyrics)

        assert texts_of(lyrics.lines) == ["First line", "Second line"]
        assert [line.agent for line in lyrics.lines] == ["v1", "v2"]

    def test_lines_before_first_marker_untouched(self):
        lyrics = _lyrics(["Intro", "Alice: hi", "Bob: yo"])

        recognize_agents(lyrics)

        assert lyrics.lines[0].agent is None
        assert lyrics.lines[0].main_text() == "Intro"

    def test_existing_agent_kept(self):
        lyrics = _lyrics(["Alice: one", "two", "Bob: three", "four"])
        lyrics.lines[2].agent = "v5"
        lyrics.agents["v5"] = "Someone"

        recognize_agents(lyrics)

        assert [line.agent for line in lyrics.lines] == ["v6", "v6", "v5", "v5"]
        assert lyrics.lines[2].main_text() == "three"

    def test_no_markers_is_noop(self):
        lyrics = _lyrics(["Just a song", "with no singers"])

        assert recognize_agents(lyrics) == []
        assert all(line.agent is None for line in lyrics.lines)
        assert lyrics.agents == {}

    def test_empty_document(self):
        assert recognize_agents(ParsedLyrics()) == []

    def test_word_timed_marker_stripped(self):
        line = make_syllable_line([
            ("Alice:", 0, 100, False),
            ("I", 100, 200, True),
            ("sing", 200, 300, True),
        ])
        other = make_syllable_line([("Bob:", 400, 500, False), ("yes", 500, 600, True)])
        lyrics = ParsedLyrics(lines=[line, other])

        recognize_agents(lyrics)

        track = lyrics.lines[0].main_track
        assert track.text == "I sing"
        assert [(s.start_time, s.end_time) for s in track.syllables()] == [(100, 200), (200, 300)]
        assert lyrics.lines[1].main_text() == "yes"


class TestCustomClassifier:
    """Test the pluggable classifier seam"""

    def test_custom_classifier(self):
        class FirstLineIsCarol:
            def classify(self, lines):
                return [AgentAssignment(line_index=0, agent_name="Carol", marker_length=0)]

        lyrics = _lyrics(["one", "two"])

        recognize_agents(lyrics, classifier=FirstLineIsCarol())

        assert [line.agent for line in lyrics.lines] == ["v1", "v1"]
        assert texts_of(lyrics.lines) == ["one", "two"]

    def test_failing_classifier_becomes_warning(self):
        class Broken:
            def classify(self, lines):
                raise RuntimeError("model not loaded")

        lyrics = _lyrics(["Alice: one", "Bob: two"])

        warnings = recognize_agents(lyrics, classifier=Broken())

        assert len(warnings) == 1
        assert warnings[0].source == "processor:agent_recognizer"
        assert "model not loaded" in warnings[0].message
        assert texts_of(lyrics.lines) == ["Alice: one", "Bob: two"]
        assert all(line.agent is None for line in lyrics.lines)

    def test_out_of_range_assignments_ignored(self):
        class OffByOne:
            def classify(self, lines):
                return [AgentAssignment(line_index=len(lines), agent_name="Ghost", marker_length=0)]

        lyrics = _lyrics(["one"])

        recognize_agents(lyrics, classifier=OffByOne())

        assert lyrics.lines[0].agent is None
