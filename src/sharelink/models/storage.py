"""StorageEntry model — key/value rows for client-side persisted state.

Provides ``StorageEntryBase`` (non-table) and ``StorageEntry`` (concrete table).
Subclass ``StorageEntryBase`` with ``table=True`` and a custom ``__tablename__``
to use a different table name per backend.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class StorageEntryBase(SQLModel):
    """One stored value under a fixed key. Subclass with ``table=True`` for a concrete table."""

    key: str = Field(primary_key=True)
    value: str = Field(default="")
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )


class StorageEntry(StorageEntryBase, table=True):
    """Default storage table — ``sharelink_storage``."""

    __tablename__ = "sharelink_storage"
