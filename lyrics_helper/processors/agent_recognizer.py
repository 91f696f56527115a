"""
Singer/agent recognition.

Duet and group lyrics often name the singer at the start of a line
("Alice: I was waiting", "（男）：你好", "[Chorus: Alice & Bob]"). The
recognizer turns those cues into agent ids on LyricLine.agent, removes
the marker text from the sung line, and registers display names in
ParsedLyrics.agents.

The heuristic sits behind the AgentClassifier protocol so it can be
replaced without touching the pipeline. The default MarkerAgentClassifier
recognizes:
    - Inline markers: "Name: text", "Name：text", "(Name) text" only with
      a colon, "[Name:] text", "（Name）：text"
    - Marker-only lines: "Name:" alone, "[Name:]", or section headers
      carrying a performer ("[Verse 1: Name]", "[Chorus - Name]")

Markers are only trusted when a document contains at least two of them;
a lone "Baby: ..." line is more likely lyric text than a duet cue.

Agent ids follow TTML conventions: v1, v2, ... in order of first
appearance, and v1000 for group/chorus parts. Spelling variants of a
name ("Alice", "alice", "Alice.") are unified by fuzzy matching.

This is a best-effort classifier: it never fails the pipeline. Lines it
cannot resolve keep their previous (possibly absent) agent.
"""

import re
from dataclasses import dataclass
from typing import Protocol

from rapidfuzz import fuzz

from lyrics_helper.core.logger import get_logger
from lyrics_helper.model.lyrics import ContentType, LyricLine, LyricSyllable, LyricTrack
from lyrics_helper.model.metadata import CanonicalMetadataKey, parse_metadata_key
from lyrics_helper.model.result import ConversionWarning, ParsedLyrics

logger = get_logger(__name__)

WARNING_SOURCE = "processor:agent_recognizer"

GROUP_AGENT_ID = "v1000"

# Names (case-folded) that denote everyone singing together
GROUP_NAMES = frozenset({
    "合", "合唱", "齐", "齊", "全员", "全員", "all", "both", "everyone",
    "together", "tutti", "group",
})

# Joiners that make a marker name a group of several singers
_GROUP_JOINERS = re.compile(r"\s*(?:&|＆|/|／|,|，|、|\band\b)\s*")

NAME_SIMILARITY_THRESHOLD = 90
MAX_NAME_LENGTH = 24
MAX_NAME_WORDS = 4
MIN_MARKERS = 2

_CLOSERS = ")）]】"

_INLINE_MARKER_RE = re.compile(
    r"^\s*"
    r"(?:"
    r"[(（\[【]\s*(?P<bracketed>[^:：()（）\[\]【】]+?)\s*(?:[:：]\s*[)）\]】]|[)）\]】]\s*[:：])"
    r"|"
    r"(?P<plain>[^:：()（）\[\]【】]+?)\s*[:：]"
    r")"
    r"\s*"
)

# LRC tags that are not metadata keys but still look like "[label:value]"
_LRC_TAG_LABELS = frozenset({"offset", "re", "ve", "tool", "kana"})

_SECTION_HEADER_RE = re.compile(
    r"^\s*[\[【(（]\s*"
    r"(?P<label>[^:：\-–—\]】)）]+?)"
    r"\s*(?:[:：]|\s[-–—]\s)\s*"
    r"(?P<name>[^\]】)）]+?)"
    r"\s*[\]】)）]\s*$"
)


@dataclass(frozen=True)
class AgentAssignment:
    """
    One classified line.

    Attributes:
        line_index: Index of the line in the classified sequence.
        agent_name: Singer name as written in the marker.
        marker_length: Number of leading characters of the main text that
                       form the marker (removed from the line).
        marker_only: True when the line holds nothing but the marker.
    """

    line_index: int
    agent_name: str
    marker_length: int
    marker_only: bool = False


class AgentClassifier(Protocol):
    """Anything able to classify lines into agent assignments."""

    def classify(self, lines: list[LyricLine]) -> list[AgentAssignment]:
        ...


def _is_plausible_name(name: str) -> bool:
    name = name.strip()
    if not name or len(name) > MAX_NAME_LENGTH:
        return False
    if len(name.split()) > MAX_NAME_WORDS:
        return False
    if not any(ch.isalpha() for ch in name):
        return False
    if "http" in name.casefold():
        return False
    return True


def _is_metadata_label(label: str) -> bool:
    """True for "[ti:...]", "[ar:...]", "[offset:...]" style tag labels."""
    label = label.strip()
    if label.casefold() in _LRC_TAG_LABELS:
        return True
    return isinstance(parse_metadata_key(label), CanonicalMetadataKey)


class MarkerAgentClassifier:
    """
    Default classifier based on line-initial singer markers.

    Attributes:
        min_markers: Minimum number of markers a document must contain
                     before any of them is trusted.
    """

    def __init__(self, min_markers: int = MIN_MARKERS) -> None:
        self.min_markers = min_markers

    def classify(self, lines: list[LyricLine]) -> list[AgentAssignment]:
        assignments: list[AgentAssignment] = []
        for index, line in enumerate(lines):
            assignment = self._classify_line(index, line.main_text())
            if assignment is not None:
                assignments.append(assignment)

        if len(assignments) < self.min_markers:
            return []
        return assignments

    def _classify_line(self, index: int, text: str) -> AgentAssignment | None:
        if not text.strip():
            return None

        header = _SECTION_HEADER_RE.match(text)
        if header and _is_metadata_label(header.group("label")):
            return None
        if header and _is_plausible_name(header.group("name")):
            return AgentAssignment(
                line_index=index,
                agent_name=header.group("name").strip(),
                marker_length=len(text),
                marker_only=True,
            )

        match = _INLINE_MARKER_RE.match(text)
        if match is None:
            return None

        name = match.group("bracketed") or match.group("plain")
        if not _is_plausible_name(name):
            return None

        marker_length = match.end()
        rest = text[marker_length:]
        # A closing bracket left over from "(Name:)" style markers
        if rest[:1] in _CLOSERS and match.group("plain") is not None:
            return None

        return AgentAssignment(
            line_index=index,
            agent_name=name.strip(),
            marker_length=marker_length,
            marker_only=not rest.strip(),
        )


def _strip_leading_characters(track: LyricTrack, count: int) -> None:
    """
    Remove the first count characters of a track's display text in place.

    Display text counts one space before every syllable with
    leading_space set (except the first). Syllables emptied by the
    removal are dropped; leftover leading whitespace is trimmed.
    """
    remaining = count
    first = True
    for word in track.words:
        for syllable in word.syllables:
            if remaining <= 0:
                break
            if syllable.leading_space and not first:
                remaining -= 1
                syllable.leading_space = False
            first = False
            if remaining >= len(syllable.text):
                remaining -= len(syllable.text)
                syllable.text = ""
            else:
                syllable.text = syllable.text[remaining:]
                remaining = 0

    kept: list[LyricSyllable] = []
    for word in track.words:
        word_syllables = [s for s in word.syllables if s.text]
        for position, syllable in enumerate(word_syllables):
            if not kept:
                syllable.text = syllable.text.lstrip()
                syllable.leading_space = False
                if not syllable.text:
                    continue
            elif position == 0:
                syllable.leading_space = True
            kept.append(syllable)

    rebuilt = LyricTrack.from_syllables(kept, language=track.language)
    track.words = rebuilt.words


class _AgentRegistry:
    """Maps marker names to agent ids, unifying spelling variants."""

    def __init__(self, agents: dict[str, str]) -> None:
        self.agents = agents
        self._next_number = 1
        for agent_id in agents:
            if agent_id.startswith("v") and agent_id[1:].isdigit():
                number = int(agent_id[1:])
                if agent_id != GROUP_AGENT_ID:
                    self._next_number = max(self._next_number, number + 1)

    def resolve(self, name: str) -> str:
        folded = name.casefold().strip()
        if folded in GROUP_NAMES or len(_GROUP_JOINERS.split(folded)) > 1:
            self.agents.setdefault(GROUP_AGENT_ID, name)
            return GROUP_AGENT_ID

        for agent_id, known_name in self.agents.items():
            if agent_id == GROUP_AGENT_ID:
                continue
            if fuzz.ratio(folded, known_name.casefold().strip()) >= NAME_SIMILARITY_THRESHOLD:
                return agent_id

        agent_id = f"v{self._next_number}"
        self._next_number += 1
        self.agents[agent_id] = name
        return agent_id


def recognize_agents(
    lyrics: ParsedLyrics,
    classifier: AgentClassifier | None = None,
) -> list[ConversionWarning]:
    """
    Assign agent ids to lines in place.

    Args:
        lyrics: Document to modify. Its agents mapping is extended with
                newly recognized names.
        classifier: Classifier to use (MarkerAgentClassifier by default).

    Returns:
        Warnings produced (classifier failures). Never raises for
        classifier errors.

    Behavior:
        - A classified line gets the marker's agent and loses the marker
          text; marker-only lines are removed when nothing else remains.
        - Lines without a marker inherit the most recent agent.
        - Lines before the first marker keep whatever agent they had.
        - A line already carrying an agent keeps it and makes it the
          current agent for the following lines.
    """
    classifier = classifier if classifier is not None else MarkerAgentClassifier()
    lines = lyrics.lines
    if not lines:
        return []

    try:
        assignments = classifier.classify(lines)
    except Exception as e:
        logger.warning(f"Agent classifier {type(classifier).__name__} failed: {e}")
        return [
            ConversionWarning(
                message=f"Agent recognition skipped: {e}",
                source=WARNING_SOURCE,
            )
        ]

    by_index = {
        a.line_index: a for a in assignments if 0 <= a.line_index < len(lines)
    }
    registry = _AgentRegistry(lyrics.agents)
    current_agent: str | None = None
    kept_lines: list[LyricLine] = []
    assigned = 0

    for index, line in enumerate(lines):
        assignment = by_index.get(index)
        if assignment is not None:
            agent_id = registry.resolve(assignment.agent_name)
            main = line.track_of(ContentType.MAIN)
            if main is not None:
                _strip_leading_characters(main, assignment.marker_length)

            if line.agent is None:
                line.agent = agent_id
                assigned += 1
            current_agent = line.agent

            if assignment.marker_only and line.is_empty():
                continue
        elif line.agent is not None:
            current_agent = line.agent
        elif current_agent is not None:
            line.agent = current_agent
            assigned += 1

        kept_lines.append(line)

    lines[:] = kept_lines
    if assigned:
        logger.debug(f"Agent recognizer assigned {assigned} lines to {len(lyrics.agents)} agents")
    return []
