"""SQLModel database models for sharelink."""

from sharelink.models.storage import StorageEntry, StorageEntryBase

__all__ = [
    "StorageEntry",
    "StorageEntryBase",
]
