"""Tests for LocalShareStore — persistence, dedup and corruption handling."""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sharelink.exceptions import StoreError
from sharelink.models.storage import StorageEntry
from sharelink.store import LocalShareStore, decode_records, encode_records
from sharelink.types import ShareRecord

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine


def _record(source_file_id: str, share_id: str | None = None, created_at: int = 1) -> ShareRecord:
    return ShareRecord(
        id=share_id or f"share-{source_file_id}",
        file_name=f"{source_file_id}.bin",
        share_url=f"https://share.test/{source_file_id}",
        created_at=created_at,
        source_file_id=source_file_id,
    )


async def _put_raw(engine: AsyncEngine, value: str, key: str = "local-shares") -> None:
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        session.add(StorageEntry(key=key, value=value))
        await session.commit()


# ---------------------------------------------------------------------------
# load
# ---------------------------------------------------------------------------


class TestLoad:
    async def test_empty_store(self, store: LocalShareStore):
        assert await store.load() == []

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            json.dumps({"id": "x"}),
            json.dumps([{"id": "x"}]),
            json.dumps(["nope"]),
        ],
    )
    async def test_corrupt_data_loads_empty(
        self, tmp_path: Path, async_engine: AsyncEngine, raw: str
    ):
        s = LocalShareStore(tmp_path, engine=async_engine)
        await s.open()
        await _put_raw(async_engine, raw)
        assert await s.load() == []

    async def test_corrupt_data_is_replaced_on_append(
        self, tmp_path: Path, async_engine: AsyncEngine
    ):
        s = LocalShareStore(tmp_path, engine=async_engine)
        await s.open()
        await _put_raw(async_engine, "{{{")
        assert await s.append(_record("a")) is True
        assert [r.source_file_id for r in await s.load()] == ["a"]

    async def test_uses_storage_key(self, tmp_path: Path, async_engine: AsyncEngine):
        s = LocalShareStore(tmp_path, engine=async_engine, storage_key="other")
        await s.open()
        await _put_raw(async_engine, encode_records([_record("a")]), key="local-shares")
        assert await s.load() == []


# ---------------------------------------------------------------------------
# append
# ---------------------------------------------------------------------------


class TestAppend:
    async def test_append_then_load_newest_first(self, store: LocalShareStore):
        first = _record("a", created_at=1)
        second = _record("b", created_at=2)
        third = _record("c", created_at=3)
        for record in (first, second, third):
            assert await store.append(record) is True
        assert await store.load() == [third, second, first]

    async def test_fields_preserved(self, store: LocalShareStore):
        record = ShareRecord(
            id="srv-1",
            file_name="movie.mkv",
            share_url="https://share.test/x",
            pass_code="abcd",
            created_at=1_700_000_000_123,
            source_file_id="file-9",
        )
        await store.append(record)
        assert await store.load() == [record]

    async def test_duplicate_source_keeps_first(self, store: LocalShareStore):
        first = _record("a", share_id="first")
        second = _record("a", share_id="second")
        assert await store.append(first) is True
        assert await store.append(second) is False
        assert await store.load() == [first]

    async def test_concurrent_appends_insert_once(self, store: LocalShareStore):
        results = await asyncio.gather(
            store.append(_record("a", share_id="one")),
            store.append(_record("a", share_id="two")),
            store.append(_record("a", share_id="three")),
        )
        assert sorted(results) == [False, False, True]
        assert len(await store.load()) == 1

    async def test_dedups_against_records_from_previous_session(
        self, tmp_path: Path, async_engine: AsyncEngine
    ):
        s = LocalShareStore(tmp_path, engine=async_engine)
        await s.open()
        await _put_raw(async_engine, encode_records([_record("a", share_id="old")]))
        assert await s.append(_record("a", share_id="new")) is False
        assert [r.id for r in await s.load()] == ["old"]

    async def test_persist_failure_leaves_stored_shares(
        self, store: LocalShareStore, monkeypatch: pytest.MonkeyPatch
    ):
        await store.append(_record("a"))

        async def _broken(self: AsyncSession) -> None:
            raise OperationalError("COMMIT", {}, Exception("disk full"))

        monkeypatch.setattr(AsyncSession, "commit", _broken)
        with pytest.raises(StoreError, match="disk full"):
            await store.append(_record("b"))
        monkeypatch.undo()

        assert [r.source_file_id for r in await store.load()] == ["a"]
        assert await store.get("b") is None

    async def test_unreadable_storage_does_not_erase_shares(
        self, store: LocalShareStore, monkeypatch: pytest.MonkeyPatch
    ):
        await store.append(_record("a"))

        async def _unreadable(session: AsyncSession) -> None:
            raise OperationalError("SELECT", {}, Exception("database is locked"))

        monkeypatch.setattr(store, "_fetch", _unreadable)
        assert await store.load() == []
        with pytest.raises(StoreError, match="database is locked"):
            await store.append(_record("b"))
        monkeypatch.undo()

        assert await store.append(_record("c")) is True
        assert [r.source_file_id for r in await store.load()] == ["c", "a"]


# ---------------------------------------------------------------------------
# Several stores on one database
# ---------------------------------------------------------------------------


class TestSharedDatabase:
    async def test_append_keeps_records_from_other_store(self, tmp_path: Path):
        async with LocalShareStore(tmp_path) as a, LocalShareStore(tmp_path) as b:
            assert await a.load() == []
            assert await b.append(_record("s1")) is True
            assert await a.append(_record("s2")) is True
            assert [r.source_file_id for r in await b.load()] == ["s2", "s1"]

    async def test_dedups_against_other_store(self, tmp_path: Path):
        async with LocalShareStore(tmp_path) as a, LocalShareStore(tmp_path) as b:
            await a.load()
            assert await b.append(_record("s1", share_id="from-b")) is True
            assert await a.append(_record("s1", share_id="from-a")) is False
            assert [r.id for r in await a.load()] == ["from-b"]

    async def test_remove_keeps_records_from_other_store(self, tmp_path: Path):
        async with LocalShareStore(tmp_path) as a, LocalShareStore(tmp_path) as b:
            await a.append(_record("s1", share_id="one"))
            await a.load()
            await b.append(_record("s2", share_id="two"))
            assert await a.remove("one") is True
            assert [r.id for r in await b.load()] == ["two"]


# ---------------------------------------------------------------------------
# get / remove / clear
# ---------------------------------------------------------------------------


class TestQueries:
    async def test_get(self, store: LocalShareStore):
        record = _record("a")
        await store.append(record)
        assert await store.get("a") == record
        assert await store.get("missing") is None

    async def test_remove(self, store: LocalShareStore):
        await store.append(_record("a", share_id="s-a"))
        await store.append(_record("b", share_id="s-b"))
        assert await store.remove("s-a") is True
        assert [r.id for r in await store.load()] == ["s-b"]

    async def test_remove_unknown(self, store: LocalShareStore):
        await store.append(_record("a"))
        assert await store.remove("nope") is False
        assert len(await store.load()) == 1

    async def test_remove_allows_reappend(self, store: LocalShareStore):
        await store.append(_record("a", share_id="s-a"))
        await store.remove("s-a")
        assert await store.append(_record("a", share_id="s-a2")) is True

    async def test_clear(self, store: LocalShareStore):
        await store.append(_record("a"))
        await store.clear()
        assert await store.load() == []

    async def test_clear_empty_store(self, store: LocalShareStore):
        await store.clear()
        assert await store.load() == []


# ---------------------------------------------------------------------------
# Durability
# ---------------------------------------------------------------------------


class TestDurability:
    async def test_survives_reopen(self, tmp_path: Path):
        record = _record("a")
        async with LocalShareStore(tmp_path) as s:
            await s.append(record)
        assert (tmp_path / "shares.db").exists()

        async with LocalShareStore(tmp_path) as s:
            assert await s.load() == [record]

    async def test_close_keeps_external_engine(
        self, tmp_path: Path, async_engine: AsyncEngine
    ):
        s = LocalShareStore(tmp_path, engine=async_engine)
        await s.open()
        await s.close()
        assert s.engine is async_engine


# ---------------------------------------------------------------------------
# Codec helpers
# ---------------------------------------------------------------------------


class TestCodec:
    @pytest.mark.parametrize("raw", [None, ""])
    def test_absent(self, raw: str | None):
        assert decode_records(raw) == []

    def test_corrupt_logs_warning(self, caplog: pytest.LogCaptureFixture):
        with caplog.at_level("WARNING", logger="sharelink.store"):
            assert decode_records("[") == []
        assert "not valid JSON" in caplog.text
