"""
Metadata keys and entries.

Metadata keys are either one of the well-known CanonicalMetadataKey
members or a CustomMetadataKey carrying an arbitrary name. Both are
hashable with stable equality, so either can index a metadata dict.

Usage:
    key = parse_metadata_key("ti")          # CanonicalMetadataKey.TITLE
    key = parse_metadata_key("mood")        # CustomMetadataKey("mood")
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class CanonicalMetadataKey(Enum):
    """Closed set of well-known metadata keys."""

    TITLE = "title"
    ARTIST = "artist"
    ALBUM = "album"
    LYRICIST = "lyricist"
    COMPOSER = "composer"
    ARRANGER = "arranger"
    LRC_EDITOR = "lrc_editor"
    TTML_AUTHOR = "ttml_author"
    LANGUAGE = "language"
    LENGTH = "length"
    ISRC = "isrc"
    NCM_MUSIC_ID = "ncm_music_id"
    QQ_MUSIC_ID = "qq_music_id"
    SPOTIFY_ID = "spotify_id"
    APPLE_MUSIC_ID = "apple_music_id"

    @classmethod
    def from_str(cls, raw: str) -> "CanonicalMetadataKey":
        """
        Parse a canonical key from its name or a well-known alias.

        Matching is case-insensitive and ignores surrounding whitespace,
        '-' and '_' so "musicName", "music_name" and "MUSICNAME" agree.

        Raises:
            ValueError: If raw does not name a canonical key.
        """
        normalized = _normalize_key_name(raw)
        if not normalized:
            raise ValueError("Empty metadata key")
        key = _ALIASES.get(normalized)
        if key is None:
            raise ValueError(f"Unknown canonical metadata key: {raw!r}")
        return key

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    def __str__(self) -> str:
        return self.display_name


@dataclass(frozen=True)
class CustomMetadataKey:
    """A metadata key outside the canonical set, kept verbatim."""

    name: str

    @property
    def display_name(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.name


MetadataKey = Union[CanonicalMetadataKey, CustomMetadataKey]


def _normalize_key_name(raw: str) -> str:
    return raw.strip().lower().replace("_", "").replace("-", "").replace(" ", "")


_DISPLAY_NAMES = {
    CanonicalMetadataKey.TITLE: "Title",
    CanonicalMetadataKey.ARTIST: "Artist",
    CanonicalMetadataKey.ALBUM: "Album",
    CanonicalMetadataKey.LYRICIST: "Lyricist",
    CanonicalMetadataKey.COMPOSER: "Composer",
    CanonicalMetadataKey.ARRANGER: "Arranger",
    CanonicalMetadataKey.LRC_EDITOR: "LRC Editor",
    CanonicalMetadataKey.TTML_AUTHOR: "TTML Author",
    CanonicalMetadataKey.LANGUAGE: "Language",
    CanonicalMetadataKey.LENGTH: "Length",
    CanonicalMetadataKey.ISRC: "ISRC",
    CanonicalMetadataKey.NCM_MUSIC_ID: "NetEase Music ID",
    CanonicalMetadataKey.QQ_MUSIC_ID: "QQ Music ID",
    CanonicalMetadataKey.SPOTIFY_ID: "Spotify ID",
    CanonicalMetadataKey.APPLE_MUSIC_ID: "Apple Music ID",
}

_ALIASES: dict[str, CanonicalMetadataKey] = {}
for _key in CanonicalMetadataKey:
    _ALIASES[_normalize_key_name(_key.value)] = _key
    _ALIASES[_normalize_key_name(_DISPLAY_NAMES[_key])] = _key
for _alias, _key in {
    "ti": CanonicalMetadataKey.TITLE,
    "musicname": CanonicalMetadataKey.TITLE,
    "ar": CanonicalMetadataKey.ARTIST,
    "artists": CanonicalMetadataKey.ARTIST,
    "al": CanonicalMetadataKey.ALBUM,
    "albumname": CanonicalMetadataKey.ALBUM,
    "au": CanonicalMetadataKey.LYRICIST,
    "songwriter": CanonicalMetadataKey.LYRICIST,
    "by": CanonicalMetadataKey.LRC_EDITOR,
    "ttmlauthorgithublogin": CanonicalMetadataKey.TTML_AUTHOR,
    "lang": CanonicalMetadataKey.LANGUAGE,
    "ncmmusicid": CanonicalMetadataKey.NCM_MUSIC_ID,
    "qqmusicid": CanonicalMetadataKey.QQ_MUSIC_ID,
    "spotifyid": CanonicalMetadataKey.SPOTIFY_ID,
    "applemusicid": CanonicalMetadataKey.APPLE_MUSIC_ID,
}.items():
    _ALIASES[_alias] = _key


def parse_metadata_key(raw: str) -> MetadataKey:
    """
    Parse a raw key string into a metadata key.

    Returns the canonical key when raw names one (or an alias of one),
    otherwise a CustomMetadataKey holding raw unchanged. Never coerces an
    unknown name into a canonical key.
    """
    try:
        return CanonicalMetadataKey.from_str(raw)
    except ValueError:
        return CustomMetadataKey(raw)


@dataclass
class MetadataEntry:
    """
    One editable metadata entry.

    Attributes:
        id: Stable per-session handle, never reused by its manager.
        key: The metadata key.
        value: The metadata value.
        is_pinned: When True the entry survives reloads and merges.
    """

    id: int
    key: MetadataKey
    value: str
    is_pinned: bool = False
