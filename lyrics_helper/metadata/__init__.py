"""
Metadata editing support.

Usage:
    from lyrics_helper.metadata import MetadataManager
"""

from lyrics_helper.metadata.manager import MetadataManager

__all__ = ["MetadataManager"]
