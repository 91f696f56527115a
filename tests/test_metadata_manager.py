# tests/test_metadata_manager.py
"""Test the metadata working set"""

import pytest

from lyrics_helper.core import MetadataKeyError
from lyrics_helper.metadata import MetadataManager
from lyrics_helper.model import CanonicalMetadataKey, CustomMetadataKey


@pytest.fixture
def manager():
    manager = MetadataManager()
    manager.add("ti", "Song")
    manager.add("ar", "Alice")
    manager.add("ar", "Bob")
    return manager


class TestEditing:
    """Test add/delete/update"""

    def test_add_parses_keys(self, manager):
        assert [e.key for e in manager.entries] == [
            CanonicalMetadataKey.TITLE,
            CanonicalMetadataKey.ARTIST,
            CanonicalMetadataKey.ARTIST,
        ]
        assert manager.add("mood", "happy").key == CustomMetadataKey("mood")

    def test_empty_key_rejected(self, manager):
        with pytest.raises(MetadataKeyError):
            manager.add("   ", "x")

    def test_ids_never_reused(self, manager):
        ids = [e.id for e in manager.entries]
        manager.delete(2)
        manager.clear()

        entry = manager.add("al", "Album")

        assert entry.id not in ids
        assert len(manager) == 1

    def test_update_key(self, manager):
        assert manager.update_key(0, "album") is CanonicalMetadataKey.ALBUM
        assert manager.update_key(0, "Label") == CustomMetadataKey("Label")

    def test_update_value_and_pin(self, manager):
        manager.update_value(1, "Carol")

        assert manager.toggle_pinned(1) is True
        assert manager.toggle_pinned(1) is False
        assert manager.entries[1].value == "Carol"

    def test_out_of_range(self, manager):
        with pytest.raises(IndexError):
            manager.delete(3)
        with pytest.raises(IndexError):
            manager.update_value(-1, "x")

    def test_entries_is_a_copy(self, manager):
        manager.entries.clear()

        assert len(manager) == 3


class TestMergeAndViews:
    """Test merging parsed metadata and the grouped views"""

    def test_merge_replaces_unpinned(self, manager):
        manager.merge({CanonicalMetadataKey.TITLE: ["New Song"]})

        assert [(e.key, e.value) for e in manager.entries] == [
            (CanonicalMetadataKey.TITLE, "New Song"),
        ]

    def test_merge_keeps_pinned(self, manager):
        manager.toggle_pinned(2)

        manager.merge({
            CanonicalMetadataKey.TITLE: ["New Song"],
            CanonicalMetadataKey.ARTIST: ["Dave"],
        })

        assert [(e.value, e.is_pinned) for e in manager.entries] == [
            ("Bob", True),
            ("New Song", False),
        ]

    def test_grouped(self, manager):
        manager.add("ti", "Alt Title")

        groups = manager.grouped()

        assert [key for key, _ in groups] == [CanonicalMetadataKey.TITLE, CanonicalMetadataKey.ARTIST]
        assert [e.value for e in groups[0][1]] == ["Song", "Alt Title"]
        assert [e.value for e in manager.entries][-1] == "Alt Title"

    def test_to_metadata_skips_blank_values(self, manager):
        manager.add("al", "   ")

        assert manager.to_metadata() == {
            CanonicalMetadataKey.TITLE: ["Song"],
            CanonicalMetadataKey.ARTIST: ["Alice", "Bob"],
        }
