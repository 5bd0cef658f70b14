"""Metadata store, field lookups and structural checks."""

from fieldguard.metadata.store import FieldUtil, Metadata, MetadataError, deep_merge

__all__ = ["FieldUtil", "Metadata", "MetadataError", "deep_merge"]
