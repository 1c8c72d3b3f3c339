"""Main ShareLink class — sync wrappers over ShareLinkAsync."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import TYPE_CHECKING, Any

from sharelink._sharelink_async import ShareLinkAsync

if TYPE_CHECKING:
    import httpx

    from sharelink.client import ShareBackend
    from sharelink.config import ShareConfig
    from sharelink.orchestrator import ShareOrchestrator
    from sharelink.types import ShareRecord, ShareRequestState

logger = logging.getLogger(__name__)


class ShareWorkflow:
    """Synchronous handle on one ``ShareOrchestrator``."""

    def __init__(self, owner: ShareLink, orchestrator: ShareOrchestrator) -> None:
        self._owner = owner
        self._orchestrator = orchestrator

    @property
    def state(self) -> ShareRequestState:
        return self._orchestrator.state

    def request_share(self, file_id: str | None, file_name: str | None = None) -> ShareRequestState:
        return self._owner._run(self._orchestrator.request_share(file_id, file_name))

    def retry(self) -> ShareRequestState:
        return self._owner._run(self._orchestrator.retry())

    def refresh(self) -> ShareRequestState:
        return self._owner._run(self._orchestrator.refresh())

    def lookup(self) -> ShareRecord | None:
        return self._owner._run(self._orchestrator.lookup())


class ShareLink:
    """Facade for UI shells without an event loop of their own.

    Runs a ``ShareLinkAsync`` on a private event loop in a daemon thread,
    so the store and every workflow live on one loop.

    Usage::

        with ShareLink(ShareConfig(api_url="https://api.example")) as sl:
            state = sl.workflow().request_share("file-123", "movie.mkv")
            print(state.result.share_url if state.result else state.error_message)
    """

    def __init__(
        self,
        config: ShareConfig | None = None,
        *,
        backend: ShareBackend | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._closed = False

        # Private event loop in a daemon thread
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._loop.run_forever, daemon=True
        )
        self._thread.start()

        self._async = self._run(self._async_init(config, backend, http_client))

    async def _async_init(
        self,
        config: ShareConfig | None,
        backend: ShareBackend | None,
        http_client: httpx.AsyncClient | None,
    ) -> ShareLinkAsync:
        sl = ShareLinkAsync(config, backend=backend, http_client=http_client)
        await sl.open()
        return sl

    def _run(self, coro: Any) -> Any:
        """Submit *coro* to the private loop and block for the result."""
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the async facade, stop the event loop and join the thread."""
        if self._closed:
            return
        self._closed = True

        try:
            self._run(self._async.close())
        finally:
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join(timeout=5)

    def __enter__(self) -> ShareLink:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Sync wrappers
    # ------------------------------------------------------------------

    def workflow(self) -> ShareWorkflow:
        return ShareWorkflow(self, self._async.workflow())

    def create_share(self, file_id: str | None, file_name: str | None = None) -> ShareRequestState:
        return self._run(self._async.create_share(file_id, file_name))

    def share_task(self, record: Any) -> ShareRequestState:
        return self._run(self._async.share_task(record))

    def list_shares(self) -> list[ShareRecord]:
        return self._run(self._async.list_shares())

    def get_share(self, file_id: str) -> ShareRecord | None:
        return self._run(self._async.get_share(file_id))

    def remove_share(self, share_id: str) -> bool:
        return self._run(self._async.remove_share(share_id))

    def clear_shares(self) -> None:
        self._run(self._async.clear_shares())
