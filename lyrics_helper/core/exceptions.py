"""
Exception classes for lyrics-helper.

This module defines the exceptions that cross the library boundary.
Data irregularities inside a lyric document (a malformed timestamp, a
regex rule that does not compile, a line the agent recognizer cannot
classify) are NOT exceptions: they become ConversionWarning entries and
processing continues. Only structurally impossible requests fail.

Exception Hierarchy:
    LyricsHelperError (base)
        ConfigError - config.yaml issues
        ConversionError - a conversion request cannot be fulfilled
            UnsupportedFormatError - unknown source/target format tag
            LyricsParseError - input yielded no lyric content at all
        MetadataKeyError - invalid metadata key edit
"""


class LyricsHelperError(Exception):
    """
    Base exception for all lyrics-helper errors.

    All custom exceptions in this project inherit from this class,
    allowing callers to catch every lyrics-helper error with a single
    except clause.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g. format, warnings).

    Example:
        try:
            result = convert(request)
        except LyricsHelperError as e:
            logger.error(f"Conversion failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description shown to the user.
            details: Optional dictionary containing additional context.
                     Common keys include:
                     - 'format': The lyric format involved
                     - 'field': The config field that failed validation
                     - 'warnings': Parse warnings collected before failing
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(LyricsHelperError):
    """
    Raised when there's an issue with the configuration file.

    Common causes:
        - An explicitly requested config file does not exist
        - config.yaml has invalid YAML syntax
        - Invalid field values (e.g. a smoothing factor that is not a number)

    Example:
        raise ConfigError(
            "'syllable_smoothing.iterations' must be a non-negative integer",
            details={'field': 'syllable_smoothing.iterations', 'value': -1}
        )
    """
    pass


class ConversionError(LyricsHelperError):
    """
    Raised when a conversion request cannot be fulfilled at all.

    The pipeline does not partially apply output when this is raised:
    the caller receives no result text and no mutated lyrics.

    Common causes:
        - Empty input text
        - Missing required input
    """
    pass


class UnsupportedFormatError(ConversionError):
    """
    Raised when a format tag does not name a supported lyric format.

    Example:
        raise UnsupportedFormatError(
            "Unsupported lyric format: 'qrc'",
            details={'format': 'qrc'}
        )
    """
    pass


class LyricsParseError(ConversionError):
    """
    Raised when input text yields neither lyric lines nor metadata.

    Recoverable irregularities never raise this; they are collected as
    warnings. This is reserved for input that has no recognizable
    structure whatsoever. The collected warnings are attached under
    details['warnings'] so the caller can show why nothing was found.
    """
    pass


class MetadataKeyError(LyricsHelperError):
    """
    Raised when a metadata key edit cannot be applied.

    Example:
        raise MetadataKeyError(
            "Metadata key must not be empty",
            details={'index': 3}
        )
    """
    pass
