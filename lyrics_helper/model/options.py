"""
Processor options handed in by callers (or loaded from config.yaml).

All option objects are frozen dataclasses: a conversion reads them but
never changes them.
"""

import math
from dataclasses import dataclass, field
from enum import Enum, Flag, auto


class MetadataStripperFlags(Flag):
    """Switches controlling the metadata stripper."""

    NONE = 0
    ENABLED = auto()
    KEYWORD_CASE_SENSITIVE = auto()
    ENABLE_REGEX_STRIPPING = auto()
    REGEX_CASE_SENSITIVE = auto()


DEFAULT_STRIPPER_FLAGS = MetadataStripperFlags.ENABLED | MetadataStripperFlags.ENABLE_REGEX_STRIPPING


@dataclass(frozen=True)
class ScanLimit:
    """
    Policy deriving how many lines to scan from the total line count.

    Attributes:
        count: Fixed number of lines, used when fraction is None.
        fraction: Share of the total (0.0-1.0), rounded up.

    Example:
        ScanLimit.fixed(20).calculate(100)     # 20
        ScanLimit.of_total(0.25).calculate(10)  # 3
    """

    count: int = 20
    fraction: float | None = None

    @classmethod
    def fixed(cls, count: int) -> "ScanLimit":
        return cls(count=max(0, count), fraction=None)

    @classmethod
    def of_total(cls, fraction: float) -> "ScanLimit":
        return cls(count=0, fraction=min(max(fraction, 0.0), 1.0))

    @classmethod
    def parse(cls, raw: "int | float | str") -> "ScanLimit":
        """
        Parse a scan limit from a config value.

        Accepted forms: 20 (fixed count), "20", "25%" or 0.25 (fraction).

        Raises:
            ValueError: If raw is not one of the accepted forms.
        """
        if isinstance(raw, bool):
            raise ValueError(f"Invalid scan limit: {raw!r}")
        if isinstance(raw, int):
            if raw < 0:
                raise ValueError(f"Scan limit must not be negative: {raw}")
            return cls.fixed(raw)
        if isinstance(raw, float):
            if not 0.0 <= raw <= 1.0:
                raise ValueError(f"Scan limit fraction must be within 0.0-1.0: {raw}")
            return cls.of_total(raw)
        if isinstance(raw, str):
            text = raw.strip()
            if text.endswith("%"):
                return cls.parse(float(text[:-1]) / 100.0)
            if text.isdigit():
                return cls.fixed(int(text))
        raise ValueError(f"Invalid scan limit: {raw!r}")

    def calculate(self, total: int) -> int:
        if self.fraction is not None:
            return min(total, math.ceil(total * self.fraction))
        return min(total, self.count)


@dataclass(frozen=True)
class MetadataStripperOptions:
    """
    Configuration of the metadata stripper.

    When both keywords and regex_patterns are empty the stripper falls
    back to the shipped default rules.
    """

    flags: MetadataStripperFlags = DEFAULT_STRIPPER_FLAGS
    keywords: tuple[str, ...] = ()
    regex_patterns: tuple[str, ...] = ()
    header_scan_limit: ScanLimit = field(default_factory=ScanLimit)
    footer_scan_limit: ScanLimit = field(default_factory=ScanLimit)

    @property
    def enabled(self) -> bool:
        return MetadataStripperFlags.ENABLED in self.flags


@dataclass(frozen=True)
class SyllableSmoothingOptions:
    """
    Configuration of the syllable smoother.

    Attributes:
        factor: Share of a gap or duration difference redistributed per
                iteration, 0.0-0.5.
        iterations: Number of passes over each track.
        duration_threshold_ms: Maximum duration difference between two
                               adjacent syllables for them to be smoothed.
        gap_threshold_ms: Maximum silent gap between two adjacent
                          syllables for them to be smoothed.
    """

    factor: float = 0.15
    iterations: int = 5
    duration_threshold_ms: int = 50
    gap_threshold_ms: int = 100


class ChineseConversionVariant(Enum):
    """
    OpenCC conversion configurations.

    Values are OpenCC configuration names: s = Simplified, t = Traditional
    (OpenCC standard), tw = Taiwan, hk = Hong Kong, jp = Japanese shinjitai.
    A trailing "p" also converts regional phrasing ("软件" -> "軟體").
    """

    S2T = "s2t"
    T2S = "t2s"
    S2TW = "s2tw"
    S2TWP = "s2twp"
    S2HK = "s2hk"
    TW2S = "tw2s"
    TW2SP = "tw2sp"
    HK2S = "hk2s"
    T2TW = "t2tw"
    TW2T = "tw2t"
    T2HK = "t2hk"
    HK2T = "hk2t"
    T2JP = "t2jp"
    JP2T = "jp2t"

    @classmethod
    def from_str(cls, raw: str) -> "ChineseConversionVariant":
        """
        Parse a variant from its OpenCC name ("s2t", "S2TWP", "s2t.json").

        Raises:
            ValueError: If raw names no known configuration.
        """
        normalized = raw.strip().lower()
        if normalized.endswith(".json"):
            normalized = normalized[:-len(".json")]
        return cls(normalized)


@dataclass(frozen=True)
class ChineseConversionOptions:
    """Configuration of the Chinese script converter."""

    variant: ChineseConversionVariant = ChineseConversionVariant.S2T


class ProcessorType(Enum):
    """Post-processors available in the conversion pipeline."""

    METADATA_STRIPPER = "metadata_stripper"
    SYLLABLE_SMOOTHER = "syllable_smoother"
    AGENT_RECOGNIZER = "agent_recognizer"
    CHINESE_CONVERTER = "chinese_converter"


PIPELINE_ORDER = (
    ProcessorType.METADATA_STRIPPER,
    ProcessorType.SYLLABLE_SMOOTHER,
    ProcessorType.AGENT_RECOGNIZER,
    ProcessorType.CHINESE_CONVERTER,
)


@dataclass(frozen=True)
class ProcessorSelection:
    """Which processors a conversion runs; the order is always PIPELINE_ORDER."""

    metadata_stripper: bool = True
    syllable_smoother: bool = False
    agent_recognizer: bool = True
    chinese_converter: bool = False

    def is_selected(self, processor: ProcessorType) -> bool:
        return getattr(self, processor.value)

    def selected(self) -> list[ProcessorType]:
        return [p for p in PIPELINE_ORDER if self.is_selected(p)]
