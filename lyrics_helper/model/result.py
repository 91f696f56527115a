"""
Containers passed between parsers, processors and serializers.
"""

from dataclasses import dataclass, field

from lyrics_helper.model.lyrics import LyricLine
from lyrics_helper.model.metadata import MetadataEntry, MetadataKey


@dataclass(frozen=True)
class ConversionWarning:
    """
    A non-fatal irregularity found while converting.

    Attributes:
        message: Human-readable description.
        source: Component that produced it, e.g. "parser:lrc" or
                "processor:syllable_smoother".
        line_number: 1-based source line (parsers) or lyric line
                     (processors), None when not line-specific.
    """

    message: str
    source: str
    line_number: int | None = None

    def __str__(self) -> str:
        if self.line_number is not None:
            return f"[{self.source}] line {self.line_number}: {self.message}"
        return f"[{self.source}] {self.message}"


@dataclass
class ParsedLyrics:
    """
    A lyric document in canonical form.

    Attributes:
        lines: Lyric lines sorted by start time.
        metadata: Values per key, in insertion order. A key may carry
                  several values (e.g. multiple artists).
        agents: Agent id -> display name, e.g. {"v1": "Alice"}.
        warnings: Warnings produced while building this document.
    """

    lines: list[LyricLine] = field(default_factory=list)
    metadata: dict[MetadataKey, list[str]] = field(default_factory=dict)
    agents: dict[str, str] = field(default_factory=dict)
    warnings: list[ConversionWarning] = field(default_factory=list)

    def add_metadata(self, key: MetadataKey, value: str) -> None:
        self.metadata.setdefault(key, []).append(value)

    def first_metadata(self, key: MetadataKey) -> str | None:
        values = self.metadata.get(key)
        return values[0] if values else None


@dataclass
class ConversionResult:
    """
    Outcome of a complete conversion request.

    Attributes:
        output_text: Serialized text in the target format.
        lyrics: The processed canonical document (for display/editing).
        warnings: Every non-fatal warning, in the order it was produced.
        metadata_entries: Snapshot of the metadata manager's entries when
                          a manager took part in the conversion.
    """

    output_text: str
    lyrics: ParsedLyrics
    warnings: list[ConversionWarning] = field(default_factory=list)
    metadata_entries: list[MetadataEntry] = field(default_factory=list)
