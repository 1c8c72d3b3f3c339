"""ShareLinkAsync — primary async class wiring client and store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sharelink.client import ShareApiClient
from sharelink.config import ShareConfig
from sharelink.orchestrator import ShareOrchestrator
from sharelink.store import LocalShareStore
from sharelink.tasks import TaskFile

if TYPE_CHECKING:
    import httpx
    from sqlalchemy.ext.asyncio import AsyncEngine

    from sharelink.client import ShareBackend
    from sharelink.types import ShareRecord, ShareRequestState

logger = logging.getLogger(__name__)


class ShareLinkAsync:
    """Async facade over the share workflow.

    One instance owns one ``LocalShareStore``; every workflow it creates
    shares that store, so dedup holds across workflows in the process.

    Usage::

        async with ShareLinkAsync(ShareConfig(api_url="https://api.example")) as sl:
            workflow = sl.workflow()
            state = await workflow.request_share("file-123", "movie.mkv")
            shares = await sl.list_shares()
    """

    def __init__(
        self,
        config: ShareConfig | None = None,
        *,
        engine: AsyncEngine | None = None,
        backend: ShareBackend | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if backend is not None and http_client is not None:
            raise ValueError("Provide backend or http_client, not both")

        self._config = config or ShareConfig()
        self._closed = False

        self._store = LocalShareStore(
            self._config.data_dir,
            storage_key=self._config.storage_key,
            engine=engine,
        )
        self._api_client: ShareApiClient | None = None
        if backend is None:
            self._api_client = ShareApiClient(self._config, http_client=http_client)
            backend = self._api_client
        self._backend: ShareBackend = backend

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        await self._store.open()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        if self._api_client is not None:
            await self._api_client.close()
        await self._store.close()

    async def __aenter__(self) -> ShareLinkAsync:
        await self.open()
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Workflows
    # ------------------------------------------------------------------

    def workflow(self) -> ShareOrchestrator:
        """Create a fresh workflow (state starts at ``IDLE``)."""
        return ShareOrchestrator(self._backend, self._store)

    async def create_share(self, file_id: str | None, file_name: str | None = None) -> ShareRequestState:
        """One-shot share request on a fresh workflow."""
        return await self.workflow().request_share(file_id, file_name)

    async def share_task(self, record: Any) -> ShareRequestState:
        """Share the file produced by a download task record."""
        task = TaskFile.from_record(record)
        return await self.create_share(task.file_id, task.file_name)

    # ------------------------------------------------------------------
    # Stored shares
    # ------------------------------------------------------------------

    async def list_shares(self) -> list[ShareRecord]:
        return await self._store.load()

    async def get_share(self, file_id: str) -> ShareRecord | None:
        return await self._store.get(file_id)

    async def remove_share(self, share_id: str) -> bool:
        return await self._store.remove(share_id)

    async def clear_shares(self) -> None:
        await self._store.clear()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> ShareConfig:
        return self._config

    @property
    def store(self) -> LocalShareStore:
        return self._store
