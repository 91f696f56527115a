"""
Command-line interface for lyrics-helper.

This module implements the CLI using Click, converting a single lyric
file between formats and running the post-processors on the way.
rich-click is used for the output colors.

Usage:
    # LRC to TTML, written to stdout
    lyrics-helper song.lrc --to ttml

    # Formats inferred from extensions, translation merged in
    lyrics-helper song.lrc -o song.ttml --translation song.zh.lrc

    # Traditional Chinese output with Taiwan phrasing
    lyrics-helper song.lrc -o song.ttml --chinese s2twp

    # Smooth word timings, keep credit lines
    lyrics-helper song.ttml -o song.elrc.lrc --to elrc --smooth --no-strip

    # Export the translation track of a TTML file as LRC
    lyrics-helper song.ttml --to txt --export-translation song.zh.lrc

Configuration:
    Processor defaults, stripper rules and logging come from config.yaml
    in the current directory (or --config). Command-line switches
    override the configured processor selection.

Exit codes:
    0 on success (warnings included), 1 on hard failures, 130 when
    interrupted.
"""

import sys
from pathlib import Path
from typing import Optional

import rich_click as click

# Configure rich-click for better help formatting
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = ""
click.rich_click.MAX_WIDTH = 100
click.rich_click.OPTION_GROUPS = {
    "cli": [
        {
            "name": "Formats",
            "options": ["--output", "--from", "--to"],
        },
        {
            "name": "Processors",
            "options": ["--strip", "--smooth", "--agents", "--chinese"],
        },
        {
            "name": "Translation / Romanization",
            "options": ["--translation", "--romanization", "--export-translation", "--export-romanization"],
        },
        {
            "name": "Advanced Options",
            "options": ["--config", "--log-dir"],
        },
        {
            "name": "Info",
            "options": ["--version", "--help"],
        },
    ],
}

from lyrics_helper import __version__
from lyrics_helper.converters import (
    ConversionRequest,
    LyricFormat,
    convert,
    extract_auxiliary_lrc,
)
from lyrics_helper.converters.lrc import has_inline_timestamps
from lyrics_helper.core import (
    Config,
    ConfigError,
    LyricsHelperError,
    get_logger,
    load_config,
    setup_logging,
    shutdown_logging,
)
from lyrics_helper.model import (
    ChineseConversionOptions,
    ChineseConversionVariant,
    ContentType,
    ConversionResult,
    ProcessorSelection,
)

logger = get_logger(__name__)


@click.command()
@click.argument(
    "input_path",
    metavar="INPUT",
    required=False,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<file>",
    help="Output file (stdout when omitted)"
)
@click.option(
    "--from", "source_format",
    type=str,
    default=None,
    metavar="<format>",
    help="Input format: lrc, elrc, ttml, txt (default: from INPUT extension)"
)
@click.option(
    "--to", "target_format",
    type=str,
    default=None,
    metavar="<format>",
    help="Output format: lrc, elrc, ttml, txt (default: from --output extension)"
)
@click.option(
    "--strip/--no-strip",
    default=None,
    help="Remove credit lines at the start and end"
)
@click.option(
    "--smooth/--no-smooth",
    default=None,
    help="Smooth syllable timings"
)
@click.option(
    "--agents/--no-agents",
    default=None,
    help="Recognize singer markers such as 'Alice:'"
)
@click.option(
    "--chinese", "chinese_variant",
    type=click.Choice([v.value for v in ChineseConversionVariant], case_sensitive=False),
    default=None,
    metavar="<variant>",
    help="Convert Chinese script with an OpenCC variant (s2t, t2s, s2twp, s2hk, ...)"
)
@click.option(
    "--translation",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    metavar="<file.lrc>",
    help="LRC file merged in as translation"
)
@click.option(
    "--romanization",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    metavar="<file.lrc>",
    help="LRC file merged in as romanization"
)
@click.option(
    "--export-translation",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<file.lrc>",
    help="Write the translation track as LRC"
)
@click.option(
    "--export-romanization",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<file.lrc>",
    help="Write the romanization track as LRC"
)
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file (default: ./config.yaml)"
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    metavar="<dir>",
    help="Write log files and a warnings report to this directory"
)
@click.option(
    "--version",
    is_flag=True,
    help="Show version and exit."
)
@click.pass_context
def cli(
    ctx: click.Context,
    input_path: Optional[Path],
    output: Optional[Path],
    source_format: Optional[str],
    target_format: Optional[str],
    strip: Optional[bool],
    smooth: Optional[bool],
    agents: Optional[bool],
    chinese_variant: Optional[str],
    translation: Optional[Path],
    romanization: Optional[Path],
    export_translation: Optional[Path],
    export_romanization: Optional[Path],
    config_path: Optional[Path],
    log_dir: Optional[Path],
    version: bool
) -> None:
    """
    lyrics-helper: Convert and clean up timed lyrics.

    Reads INPUT, runs the selected post-processors (credit line
    stripping, syllable smoothing, singer recognition) and writes the
    result in the target format.

    \b
    BASIC USAGE:
        lyrics-helper song.lrc --to ttml               # Print TTML
        lyrics-helper song.ttml -o song.lrc            # Formats from extensions

    \b
    TRANSLATIONS:
        lyrics-helper song.lrc -o song.ttml --translation song.zh.lrc
        lyrics-helper song.ttml --to lrc --export-translation song.zh.lrc
    """
    if version:
        click.echo(f"lyrics-helper {__version__}")
        ctx.exit(0)

    if input_path is None:
        click.echo(ctx.get_help())
        ctx.exit(0)

    if target_format is None and output is None:
        raise click.UsageError("--to is required when writing to stdout")

    options = {
        "input_path": input_path,
        "output": output,
        "source_format": source_format,
        "target_format": target_format,
        "strip": strip,
        "smooth": smooth,
        "agents": agents,
        "chinese_variant": chinese_variant,
        "translation": translation,
        "romanization": romanization,
        "export_translation": export_translation,
        "export_romanization": export_romanization,
        "config_path": config_path,
        "log_dir": log_dir,
    }
    _run_conversion(options)


def _run_conversion(options: dict) -> None:
    """
    Execute a conversion based on CLI options.

    1. Loads configuration
    2. Sets up logging
    3. Reads the input (and auxiliary LRC files)
    4. Converts
    5. Writes output and exports

    Raises:
        SystemExit: On fatal errors (exit code 1).
    """
    try:
        config = load_config(options["config_path"])
        setup_logging(options["log_dir"] or config.logging.directory, level=config.logging.level)

        input_path: Path = options["input_path"]
        text = _read_text(input_path)
        source_format = _resolve_source_format(options["source_format"], input_path, text)
        target_format = _resolve_target_format(options["target_format"], options["output"])

        request = ConversionRequest(
            text=text,
            source_format=source_format,
            target_format=target_format,
            processors=_processor_selection(config, options),
            stripper_options=config.metadata_stripper,
            smoothing_options=config.syllable_smoothing,
            chinese_options=_chinese_options(config, options),
            translation_lrc=_read_optional(options["translation"]),
            romanization_lrc=_read_optional(options["romanization"]),
        )

        logger.debug(
            f"Converting {input_path} ({source_format.value} -> {target_format.value}), "
            f"processors: {[p.value for p in request.processors.selected()]}"
        )
        result = convert(request)

        _write_output(result, options["output"])
        _write_exports(result, options)

        if result.warnings:
            click.echo(f"Finished with {len(result.warnings)} warnings", err=True)

    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    except LyricsHelperError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Error: {e.message}", exc_info=True)
        sys.exit(1)

    except OSError as e:
        click.echo(f"File error: {e}", err=True)
        logger.error(f"File error: {e}", exc_info=True)
        sys.exit(1)

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        logger.info("Interrupted by user")
        sys.exit(130)

    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        logger.exception("Unexpected error")
        sys.exit(1)

    finally:
        shutdown_logging()


def _read_text(path: Path) -> str:
    """
    Read a lyric file as UTF-8 (a BOM is accepted).

    Raises:
        OSError: If the file cannot be read or is not valid UTF-8.
    """
    try:
        return path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise OSError(f"{path} is not valid UTF-8: {e}") from e


def _read_optional(path: Path | None) -> str | None:
    return _read_text(path) if path is not None else None


def _resolve_source_format(raw: str | None, input_path: Path, text: str) -> LyricFormat:
    """
    Source format from --from, else from the input extension.

    An .lrc file carrying inline word timestamps is read as enhanced LRC.
    """
    if raw is not None:
        return LyricFormat.from_str(raw)
    fmt = LyricFormat.from_path(input_path)
    if fmt is LyricFormat.LRC and has_inline_timestamps(text):
        logger.debug(f"{input_path.name} contains word timestamps, reading as enhanced LRC")
        return LyricFormat.ENHANCED_LRC
    return fmt


def _resolve_target_format(raw: str | None, output: Path | None) -> LyricFormat:
    if raw is not None:
        return LyricFormat.from_str(raw)
    return LyricFormat.from_path(output)


def _processor_selection(config: Config, options: dict) -> ProcessorSelection:
    """Configured processor selection with command-line overrides applied."""
    configured = config.processors

    def pick(flag: bool | None, default: bool) -> bool:
        return default if flag is None else flag

    return ProcessorSelection(
        metadata_stripper=pick(options["strip"], configured.metadata_stripper),
        syllable_smoother=pick(options["smooth"], configured.syllable_smoother),
        agent_recognizer=pick(options["agents"], configured.agent_recognizer),
        chinese_converter=options["chinese_variant"] is not None or configured.chinese_converter,
    )


def _chinese_options(config: Config, options: dict) -> ChineseConversionOptions:
    """--chinese overrides the configured OpenCC variant."""
    if options["chinese_variant"] is None:
        return config.chinese_conversion
    return ChineseConversionOptions(ChineseConversionVariant.from_str(options["chinese_variant"]))


def _write_output(result: ConversionResult, output: Path | None) -> None:
    if output is None:
        click.echo(result.output_text, nl=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(result.output_text, encoding="utf-8")
    logger.info(f"Wrote {output}")


def _write_exports(result: ConversionResult, options: dict) -> None:
    for option, content_type in (
        ("export_translation", ContentType.TRANSLATION),
        ("export_romanization", ContentType.ROMANIZATION),
    ):
        path: Path | None = options[option]
        if path is None:
            continue
        exported = extract_auxiliary_lrc(result.lyrics, content_type)
        if not exported:
            logger.warning(f"No {content_type.value} lines to export to {path}")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(exported, encoding="utf-8")
        logger.info(f"Wrote {content_type.value} to {path}")


def main() -> None:
    """
    Entry point for the CLI.

    This function is called when running `lyrics-helper` from the command
    line. It invokes the Click command.
    """
    cli()


if __name__ == "__main__":
    main()
