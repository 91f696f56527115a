"""
Conversion orchestrator.

Runs a complete conversion request:

    text --parse--> ParsedLyrics
         --merge translation/romanization LRC (optional)-->
         --metadata stripper --> syllable smoother --> agent recognizer
         --> Chinese converter-->
         --metadata manager merge (optional)-->
         --serialize--> text

Each processor is individually selectable but the order is fixed.
After every processor the line invariants are re-checked; newly
introduced problems are logged at ERROR and reported as warnings, never
raised.

Hard failures raise before anything is returned:
    - ConversionError: empty or whitespace-only input
    - UnsupportedFormatError: unknown format
    - LyricsParseError: the input produced neither lines nor metadata

The same request always produces the same output text and the same
warning sequence.

Usage:
    request = ConversionRequest(text=raw, source_format=LyricFormat.LRC,
                                target_format=LyricFormat.TTML)
    result = convert(request)
    print(result.output_text)
"""

from dataclasses import dataclass, field, replace

from lyrics_helper.converters.base import LyricFormat
from lyrics_helper.converters.merge import merge_auxiliary_lrc
from lyrics_helper.converters.registry import get_converter
from lyrics_helper.core.exceptions import ConversionError, LyricsParseError
from lyrics_helper.core.logger import get_logger, log_conversion_warning
from lyrics_helper.metadata.manager import MetadataManager
from lyrics_helper.model.lyrics import ContentType, validate_lines
from lyrics_helper.model.options import (
    PIPELINE_ORDER,
    ChineseConversionOptions,
    MetadataStripperOptions,
    ProcessorSelection,
    ProcessorType,
    SyllableSmoothingOptions,
)
from lyrics_helper.model.result import ConversionResult, ConversionWarning, ParsedLyrics
from lyrics_helper.processors.agent_recognizer import AgentClassifier, recognize_agents
from lyrics_helper.processors.chinese_converter import convert_chinese_script
from lyrics_helper.processors.metadata_stripper import strip_descriptive_metadata_lines
from lyrics_helper.processors.rules import RegexCache
from lyrics_helper.processors.syllable_smoother import MAX_FACTOR, smooth_syllable_timings

logger = get_logger(__name__)


@dataclass(frozen=True)
class ConversionRequest:
    """
    Everything a conversion needs.

    Attributes:
        text: Raw lyric text in source_format.
        source_format: Format of text.
        target_format: Format to serialize to.
        processors: Which processors to run.
        stripper_options: Options for the metadata stripper.
        smoothing_options: Options for the syllable smoother.
        chinese_options: OpenCC variant for the Chinese converter.
        translation_lrc: Optional LRC text merged in as translations.
        romanization_lrc: Optional LRC text merged in as romanizations.
    """

    text: str
    source_format: LyricFormat
    target_format: LyricFormat
    processors: ProcessorSelection = field(default_factory=ProcessorSelection)
    stripper_options: MetadataStripperOptions = field(default_factory=MetadataStripperOptions)
    smoothing_options: SyllableSmoothingOptions = field(default_factory=SyllableSmoothingOptions)
    chinese_options: ChineseConversionOptions = field(default_factory=ChineseConversionOptions)
    translation_lrc: str | None = None
    romanization_lrc: str | None = None


def parse_lyrics(text: str, fmt: LyricFormat | str) -> ParsedLyrics:
    """Parse text with the converter for fmt. Parse problems become warnings."""
    converter = get_converter(fmt)
    lyrics = converter.parse(text)
    logger.debug(
        f"Parsed {len(lyrics.lines)} lines and {len(lyrics.metadata)} metadata keys "
        f"as {converter.format.value}"
    )
    return lyrics


def serialize_lyrics(lyrics: ParsedLyrics, fmt: LyricFormat | str) -> tuple[str, list[ConversionWarning]]:
    """Serialize lyrics with the converter for fmt."""
    return get_converter(fmt).serialize(lyrics)


def apply_processor(
    lyrics: ParsedLyrics,
    kind: ProcessorType,
    *,
    stripper_options: MetadataStripperOptions | None = None,
    smoothing_options: SyllableSmoothingOptions | None = None,
    chinese_options: ChineseConversionOptions | None = None,
    regex_cache: RegexCache | None = None,
    agent_classifier: AgentClassifier | None = None,
) -> list[ConversionWarning]:
    """
    Run one processor on lyrics in place.

    Returns:
        Warnings produced by the processor and by the invariant check
        that follows it (only problems the processor introduced).
    """
    source = f"processor:{kind.value}"
    problems_before = set(validate_lines(lyrics.lines))
    warnings: list[ConversionWarning] = []

    if kind is ProcessorType.METADATA_STRIPPER:
        options = stripper_options if stripper_options is not None else MetadataStripperOptions()
        line_count = len(lyrics.lines)
        removed = strip_descriptive_metadata_lines(lyrics.lines, options, cache=regex_cache)
        if line_count and removed == line_count:
            warnings.append(
                ConversionWarning(
                    message=f"All {line_count} lines were classified as metadata and removed",
                    source=source,
                )
            )
    elif kind is ProcessorType.SYLLABLE_SMOOTHER:
        options = smoothing_options if smoothing_options is not None else SyllableSmoothingOptions()
        if not 0.0 <= options.factor <= MAX_FACTOR:
            warnings.append(
                ConversionWarning(
                    message=f"Smoothing factor {options.factor} clamped to 0.0-{MAX_FACTOR}",
                    source=source,
                )
            )
        smooth_syllable_timings(lyrics.lines, options)
    elif kind is ProcessorType.AGENT_RECOGNIZER:
        warnings.extend(recognize_agents(lyrics, classifier=agent_classifier))
    elif kind is ProcessorType.CHINESE_CONVERTER:
        options = chinese_options if chinese_options is not None else ChineseConversionOptions()
        convert_chinese_script(lyrics.lines, options)
    else:
        raise ValueError(f"Unknown processor: {kind}")

    for problem in validate_lines(lyrics.lines):
        if problem in problems_before:
            continue
        logger.error(f"Invariant violated after {kind.value}: {problem}")
        warnings.append(
            ConversionWarning(message=f"Invariant violated: {problem}", source=source)
        )

    return warnings


def convert(
    request: ConversionRequest,
    *,
    regex_cache: RegexCache | None = None,
    agent_classifier: AgentClassifier | None = None,
    metadata_manager: MetadataManager | None = None,
) -> ConversionResult:
    """
    Execute a conversion request.

    Args:
        request: The request.
        regex_cache: Cache for stripper regexes (process-wide by default).
        agent_classifier: Classifier for the agent recognizer.
        metadata_manager: When given, parsed metadata is merged into it
                          and its entries (pinned values included) are
                          what gets serialized.

    Returns:
        ConversionResult with output text, processed lyrics and warnings.

    Raises:
        ConversionError: If the input text is empty.
        UnsupportedFormatError: If a format has no converter.
        LyricsParseError: If the input contains no lyric content.
    """
    if not request.text or not request.text.strip():
        raise ConversionError(
            "Input text is empty",
            details={"format": request.source_format.value},
        )

    # Resolve both converters before doing any work
    get_converter(request.target_format)
    lyrics = parse_lyrics(request.text, request.source_format)
    warnings = list(lyrics.warnings)

    if not lyrics.lines and not lyrics.metadata:
        raise LyricsParseError(
            f"No lyrics found in {request.source_format.value} input",
            details={
                "format": request.source_format.value,
                "warnings": [str(w) for w in warnings],
            },
        )

    for aux_text, content_type in (
        (request.translation_lrc, ContentType.TRANSLATION),
        (request.romanization_lrc, ContentType.ROMANIZATION),
    ):
        if aux_text:
            warnings.extend(merge_auxiliary_lrc(lyrics, aux_text, content_type))

    for kind in PIPELINE_ORDER:
        if not request.processors.is_selected(kind):
            continue
        warnings.extend(
            apply_processor(
                lyrics,
                kind,
                stripper_options=request.stripper_options,
                smoothing_options=request.smoothing_options,
                chinese_options=request.chinese_options,
                regex_cache=regex_cache,
                agent_classifier=agent_classifier,
            )
        )

    metadata_entries = []
    if metadata_manager is not None:
        metadata_manager.merge(lyrics.metadata)
        lyrics.metadata = metadata_manager.to_metadata()
        metadata_entries = [replace(e) for e in metadata_manager.entries]

    output_text, serializer_warnings = serialize_lyrics(lyrics, request.target_format)
    warnings.extend(serializer_warnings)
    lyrics.warnings = warnings

    for warning in warnings:
        log_conversion_warning(logger, warning)

    logger.info(
        f"Converted {request.source_format.value} -> {request.target_format.value}: "
        f"{len(lyrics.lines)} lines, {len(warnings)} warnings"
    )
    return ConversionResult(
        output_text=output_text,
        lyrics=lyrics,
        warnings=warnings,
        metadata_entries=metadata_entries,
    )
