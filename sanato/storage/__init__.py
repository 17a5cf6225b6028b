"""Sanato storage: validated data/temp roots exposed as a capability."""

from .provider import EntryInfo, StorageProvider

__all__ = ["EntryInfo", "StorageProvider"]
