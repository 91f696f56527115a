"""
Post-processors operating on the canonical lyric model.

Processors run in a fixed order (stripper -> smoother -> agent
recognizer -> Chinese converter) and mutate lines in place. None of
them raises for data irregularities.

Components:
    - rules: Process-wide compiled regex cache
    - metadata_stripper: Header/footer credit line removal
    - syllable_smoother: Syllable timing jitter reduction
    - agent_recognizer: Singer/agent assignment from line markers
    - chinese_converter: OpenCC Simplified/Traditional script conversion
"""

from lyrics_helper.processors.agent_recognizer import (
    AgentAssignment,
    AgentClassifier,
    MarkerAgentClassifier,
    recognize_agents,
)
from lyrics_helper.processors.chinese_converter import (
    convert_chinese_script,
    convert_text,
    get_opencc_converter,
)
from lyrics_helper.processors.metadata_stripper import (
    StrippingRules,
    line_matches_rules,
    load_default_rules,
    strip_descriptive_metadata_lines,
)
from lyrics_helper.processors.rules import RegexCache, get_regex_cache
from lyrics_helper.processors.syllable_smoother import smooth_syllable_timings, smooth_track

__all__ = [
    "RegexCache",
    "get_regex_cache",
    "StrippingRules",
    "line_matches_rules",
    "load_default_rules",
    "strip_descriptive_metadata_lines",
    "smooth_syllable_timings",
    "smooth_track",
    "AgentAssignment",
    "AgentClassifier",
    "MarkerAgentClassifier",
    "recognize_agents",
    "convert_chinese_script",
    "convert_text",
    "get_opencc_converter",
]
