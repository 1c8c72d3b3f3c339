"""Shared fixtures for sharelink tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from sharelink.store import LocalShareStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine


@pytest.fixture
async def async_engine() -> AsyncIterator[AsyncEngine]:
    """Async in-memory SQLite engine shared by every connection."""
    eng = create_async_engine("sqlite+aiosqlite://", echo=False, poolclass=StaticPool)
    yield eng
    await eng.dispose()


@pytest.fixture
async def store(tmp_path: Path, async_engine: AsyncEngine) -> AsyncIterator[LocalShareStore]:
    """Opened share store on the in-memory engine."""
    s = LocalShareStore(tmp_path, engine=async_engine)
    await s.open()
    yield s
    await s.close()
