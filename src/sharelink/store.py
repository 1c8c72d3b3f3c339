"""LocalShareStore — durable newest-first list of created shares.

The whole list lives as one JSON array under a single fixed key in a
SQLite key/value table.  Every change re-reads the stored list and writes
it back in one session under the store's lock, so records written by
another store on the same database are kept, and two overlapping
``append`` calls in one process can never both insert a record for the
same source file.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from sharelink.config import DEFAULT_STORAGE_KEY, default_data_dir
from sharelink.models.storage import StorageEntry

from .exceptions import StoreError
from .types import ShareRecord

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.ext.asyncio import AsyncEngine

    from sharelink.models.storage import StorageEntryBase

logger = logging.getLogger(__name__)


def decode_records(raw: str | None) -> list[ShareRecord]:
    """Decode a stored JSON value. Corrupt or absent data yields ``[]``."""
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Stored share list is not valid JSON; treating as empty")
        return []
    if not isinstance(data, list):
        logger.warning("Stored share list is a %s, not a list; treating as empty", type(data).__name__)
        return []
    try:
        return [ShareRecord.from_dict(item) for item in data]
    except ValueError as exc:
        logger.warning("Stored share list has a malformed entry (%s); treating as empty", exc)
        return []


def encode_records(records: list[ShareRecord]) -> str:
    return json.dumps([r.to_dict() for r in records])


class LocalShareStore:
    """Append-only share list persisted in SQLite.

    Pass *engine* to store shares in an existing async database; otherwise
    a SQLite file is created at ``{data_dir}/shares.db`` on first use.
    An engine passed in is never disposed by the store.

    Usage::

        async with LocalShareStore(data_dir) as store:
            added = await store.append(record)
            shares = await store.load()
    """

    def __init__(
        self,
        data_dir: str | Path | None = None,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        engine: AsyncEngine | None = None,
        entry_model: type[StorageEntryBase] | None = None,
    ) -> None:
        self.data_dir = Path(data_dir) if data_dir else default_data_dir()
        self.storage_key = storage_key
        self._entry_model: type[StorageEntryBase] = entry_model or StorageEntry

        self._engine = engine
        self._owns_engine = engine is None
        self._session_factory: async_sessionmaker | None = None
        self._init_lock = asyncio.Lock()
        self._lock = asyncio.Lock()

    @property
    def engine(self) -> AsyncEngine | None:
        """The async engine, available after ``open()``."""
        return self._engine

    # ------------------------------------------------------------------
    # Database Management
    # ------------------------------------------------------------------

    async def _ensure_db(self) -> async_sessionmaker:
        """Initialize database if needed."""
        if self._session_factory is not None:
            return self._session_factory
        async with self._init_lock:
            if self._session_factory is not None:
                return self._session_factory

            if self._engine is None:
                self.data_dir.mkdir(parents=True, exist_ok=True)
                db_path = self.data_dir / "shares.db"
                self._engine = create_async_engine(
                    f"sqlite+aiosqlite:///{db_path}",
                    echo=False,
                )

                @event.listens_for(self._engine.sync_engine, "connect")
                def _set_sqlite_pragma(dbapi_connection: object, connection_record: object) -> None:
                    cursor = dbapi_connection.cursor()  # type: ignore[union-attr]
                    cursor.execute("PRAGMA journal_mode=WAL")
                    cursor.execute("PRAGMA busy_timeout=5000")
                    cursor.execute("PRAGMA synchronous=FULL")
                    cursor.close()

            table = self._entry_model.__table__  # type: ignore[unresolved-attribute]
            try:
                async with self._engine.begin() as conn:
                    await conn.run_sync(lambda c: table.create(c, checkfirst=True))
            except SQLAlchemyError as exc:
                raise StoreError(f"Cannot initialize share store: {exc}") from exc

            self._session_factory = async_sessionmaker(
                self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
            return self._session_factory

    async def _fetch(self, session: AsyncSession) -> StorageEntryBase | None:
        return await session.get(self._entry_model, self.storage_key)

    async def _read_raw(self) -> str | None:
        factory = await self._ensure_db()
        async with factory() as session:
            entry = await self._fetch(session)
            return entry.value if entry is not None else None

    async def _read_records(self) -> list[ShareRecord]:
        try:
            raw = await self._read_raw()
        except (SQLAlchemyError, StoreError, OSError):
            logger.warning("Share store unreadable; treating as empty", exc_info=True)
            return []
        return decode_records(raw)

    async def _update(
        self, change: Callable[[list[ShareRecord]], list[ShareRecord] | None]
    ) -> bool:
        """Read the stored list, apply *change* and write it back in one session.

        *change* returns the new list, or None to leave storage untouched.
        Returns True when storage was written. Caller holds the lock.
        """
        factory = await self._ensure_db()
        try:
            async with factory() as session:
                entry = await self._fetch(session)
                current = decode_records(entry.value if entry is not None else None)
                updated = change(current)
                if updated is None:
                    return False
                if not updated:
                    if entry is not None:
                        await session.delete(entry)
                elif entry is None:
                    session.add(self._entry_model(key=self.storage_key, value=encode_records(updated)))
                else:
                    entry.value = encode_records(updated)
                    entry.updated_at = datetime.now(UTC)
                    session.add(entry)
                await session.commit()
                return True
        except (SQLAlchemyError, OSError) as exc:
            raise StoreError(f"Cannot persist shares: {exc}") from exc

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        """Initialize the SQLite database."""
        await self._ensure_db()

    async def close(self) -> None:
        """Close the database engine if the store created it."""
        if self._engine is not None and self._owns_engine:
            await self._engine.dispose()
            self._engine = None
        self._session_factory = None

    async def __aenter__(self) -> LocalShareStore:
        await self.open()
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Share list
    # ------------------------------------------------------------------

    async def load(self) -> list[ShareRecord]:
        """Return persisted shares, newest first. Never raises for bad data."""
        async with self._lock:
            return await self._read_records()

    async def append(self, record: ShareRecord) -> bool:
        """Prepend *record* unless its source file is already shared.

        Returns True when the record was added. Raises ``StoreError`` when
        storage cannot be read or written; stored shares are left as they were.
        """

        def prepend(records: list[ShareRecord]) -> list[ShareRecord] | None:
            if any(r.source_file_id == record.source_file_id for r in records):
                return None
            return [record, *records]

        async with self._lock:
            added = await self._update(prepend)
        if added:
            logger.info("Stored share %s for %s", record.id, record.source_file_id)
        else:
            logger.debug("Share for %s already stored; skipping", record.source_file_id)
        return added

    async def get(self, source_file_id: str) -> ShareRecord | None:
        """Return the stored share for *source_file_id*, if any."""
        async with self._lock:
            records = await self._read_records()
        for record in records:
            if record.source_file_id == source_file_id:
                return record
        return None

    async def remove(self, share_id: str) -> bool:
        """Remove the share with id *share_id*. Returns True if found."""

        def without(records: list[ShareRecord]) -> list[ShareRecord] | None:
            remaining = [r for r in records if r.id != share_id]
            return remaining if len(remaining) < len(records) else None

        async with self._lock:
            return await self._update(without)

    async def clear(self) -> None:
        """Delete every stored share."""
        async with self._lock:
            await self._update(lambda records: [])
