"""
Editable metadata working set with pinned entries.

The manager holds the metadata entries an editing surface shows. When a
new document is loaded its metadata is merged in: pinned entries survive
with their values, everything else is replaced by the new source.

Usage:
    manager = MetadataManager()
    manager.add("ti", "Song", pinned=True)
    manager.merge(lyrics.metadata)
    lyrics.metadata = manager.to_metadata()
"""

from lyrics_helper.core.exceptions import MetadataKeyError
from lyrics_helper.core.logger import get_logger
from lyrics_helper.model.metadata import MetadataEntry, MetadataKey, parse_metadata_key

logger = get_logger(__name__)


def _coerce_key(key: MetadataKey | str) -> MetadataKey:
    if isinstance(key, str):
        if not key.strip():
            raise MetadataKeyError("Metadata key must not be empty", details={"key": key})
        return parse_metadata_key(key)
    return key


class MetadataManager:
    """
    Ordered metadata entries with stable ids and pinning.

    Entries sharing a key are allowed (e.g. several artists). Ids come
    from a per-manager counter and are never reused, even after delete()
    or clear().

    Index-based methods raise IndexError for out-of-range indices.
    """

    def __init__(self) -> None:
        self._entries: list[MetadataEntry] = []
        self._next_id = 0

    @property
    def entries(self) -> list[MetadataEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def _new_entry(self, key: MetadataKey, value: str, pinned: bool = False) -> MetadataEntry:
        entry = MetadataEntry(id=self._next_id, key=key, value=value, is_pinned=pinned)
        self._next_id += 1
        return entry

    def _entry_at(self, index: int) -> MetadataEntry:
        if not 0 <= index < len(self._entries):
            raise IndexError(f"Metadata entry index {index} out of range (0-{len(self._entries) - 1})")
        return self._entries[index]

    def add(self, key: MetadataKey | str, value: str = "", pinned: bool = False) -> MetadataEntry:
        """
        Append a new entry.

        Args:
            key: A metadata key, or a raw key string parsed with
                 parse_metadata_key.
            value: Entry value.
            pinned: Whether the entry survives merges.

        Returns:
            The created entry.

        Raises:
            MetadataKeyError: If key is an empty string.
        """
        entry = self._new_entry(_coerce_key(key), value, pinned)
        self._entries.append(entry)
        return entry

    def delete(self, index: int) -> MetadataEntry:
        entry = self._entry_at(index)
        del self._entries[index]
        return entry

    def update_key(self, index: int, key: MetadataKey | str) -> MetadataKey:
        """
        Change an entry's key.

        A raw string naming a canonical key (or alias) becomes that key;
        any other string is kept verbatim as a custom key.

        Returns:
            The key now stored on the entry.
        """
        entry = self._entry_at(index)
        entry.key = _coerce_key(key)
        return entry.key

    def update_value(self, index: int, value: str) -> None:
        self._entry_at(index).value = value

    def toggle_pinned(self, index: int) -> bool:
        entry = self._entry_at(index)
        entry.is_pinned = not entry.is_pinned
        return entry.is_pinned

    def clear(self) -> None:
        self._entries.clear()

    def merge(self, metadata: dict[MetadataKey, list[str]]) -> None:
        """
        Merge freshly parsed metadata into the working set.

        - Pinned entries stay first, in their previous order, with their
          values.
        - Values for a key that has a pinned entry are ignored.
        - Every other entry is replaced by the new values, appended in
          source order.
        """
        pinned = [entry for entry in self._entries if entry.is_pinned]
        pinned_keys = {entry.key for entry in pinned}

        merged = list(pinned)
        ignored = 0
        for key, values in metadata.items():
            if key in pinned_keys:
                ignored += len(values)
                continue
            for value in values:
                merged.append(self._new_entry(key, value))

        replaced = len(self._entries) - len(pinned)
        self._entries = merged
        logger.debug(
            f"Metadata merge kept {len(pinned)} pinned, replaced {replaced}, "
            f"ignored {ignored} values for pinned keys"
        )

    def grouped(self) -> list[tuple[MetadataKey, list[MetadataEntry]]]:
        """
        Entries clustered by key, keys in order of first appearance.

        Display view only; stored order is unchanged.
        """
        groups: dict[MetadataKey, list[MetadataEntry]] = {}
        for entry in self._entries:
            groups.setdefault(entry.key, []).append(entry)
        return list(groups.items())

    def to_metadata(self) -> dict[MetadataKey, list[str]]:
        """Metadata dict of all non-blank values, grouped by key."""
        metadata: dict[MetadataKey, list[str]] = {}
        for key, entries in self.grouped():
            values = [entry.value for entry in entries if entry.value.strip()]
            if values:
                metadata[key] = values
        return metadata
