"""ShareOrchestrator — request/response/retry state machine for one file.

States move ``IDLE -> LOADING -> SUCCEEDED | FAILED``.  ``retry()`` leaves
``FAILED`` and ``refresh()`` leaves ``SUCCEEDED``; both re-enter
``LOADING`` and issue one new remote call with the last arguments.
Every remote failure ends in a stable ``FAILED`` state carrying a
classified, user-safe message.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from typing import TYPE_CHECKING

from .classifier import PRECONDITION_MESSAGE, UNKNOWN_MESSAGE, classify
from .exceptions import ShareInProgressError, ShareRequestError, StoreError
from .types import (
    UNKNOWN_FILE_NAME,
    ShareRecord,
    ShareRequestState,
    ShareResult,
    ShareStatus,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from .client import ShareBackend
    from .store import LocalShareStore

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class ShareOrchestrator:
    """Drives one file's share workflow.

    Overlapping calls are rejected: while a request is ``LOADING`` any
    further ``request_share``/``retry``/``refresh`` raises
    ``ShareInProgressError`` without touching the backend.

    Usage::

        workflow = ShareOrchestrator(api_client, store)
        state = await workflow.request_share("file-123", "movie.mkv")
        if state.can_retry:
            state = await workflow.retry()
    """

    def __init__(
        self,
        backend: ShareBackend,
        store: LocalShareStore,
        *,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._backend = backend
        self._store = store
        self._clock = clock or _now_ms

        self._state = ShareRequestState()
        self._file_id: str | None = None
        self._file_name: str | None = None
        self._requested = False

    @property
    def state(self) -> ShareRequestState:
        return self._state

    @property
    def file_id(self) -> str | None:
        """File identity of the last request, if any."""
        return self._file_id

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def request_share(
        self,
        file_id: str | None,
        file_name: str | None = None,
    ) -> ShareRequestState:
        """Request a share link for *file_id* and return the resulting state.

        A missing *file_id* means the originating task has not produced a
        file yet: no remote call is made and only the error message
        changes.  A share already obtained stays in the state.
        """
        if self._state.is_loading:
            raise ShareInProgressError(f"Share request for {self._file_id} is already in progress")

        self._file_id = file_id
        self._file_name = file_name
        self._requested = True

        if not file_id:
            logger.debug("Share requested before file identity is available")
            self._state = dataclasses.replace(self._state, error_message=PRECONDITION_MESSAGE)
            return self._state

        self._state = ShareRequestState(status=ShareStatus.LOADING)

        try:
            result = await self._backend.create_share(file_id)
        except ShareRequestError as exc:
            classification = classify(exc.failure)
            logger.debug(
                "Share for %s failed as %s", file_id, classification.category.value
            )
            return self._fail(classification.message)
        except Exception:
            logger.exception("Share backend raised an unexpected error for %s", file_id)
            return self._fail(UNKNOWN_MESSAGE)

        self._state = ShareRequestState(status=ShareStatus.SUCCEEDED, result=result)
        logger.debug("Share for %s succeeded (existing=%s)", file_id, result.is_existing)

        if not result.is_existing:
            await self._remember(file_id, result)
        return self._state

    async def retry(self) -> ShareRequestState:
        """Repeat the last request. No backoff and no attempt limit."""
        if not self._requested:
            raise ValueError("Nothing to retry: request_share() has not been called")
        return await self.request_share(self._file_id, self._file_name)

    async def refresh(self) -> ShareRequestState:
        """Ask the backend again for a share already obtained."""
        return await self.retry()

    async def lookup(self) -> ShareRecord | None:
        """Return the locally stored share for the current file, if any."""
        if not self._file_id:
            return None
        return await self._store.get(self._file_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _fail(self, message: str) -> ShareRequestState:
        self._state = ShareRequestState(status=ShareStatus.FAILED, error_message=message)
        return self._state

    async def _remember(self, file_id: str, result: ShareResult) -> None:
        now = self._clock()
        record = ShareRecord(
            id=result.share_id or f"share-{now}",
            file_name=self._file_name or UNKNOWN_FILE_NAME,
            share_url=result.share_url,
            pass_code=result.pass_code,
            created_at=now,
            source_file_id=file_id,
        )
        try:
            await self._store.append(record)
        except StoreError:
            # The share exists remotely; the workflow still succeeds
            logger.error("Could not store share %s for %s", record.id, file_id, exc_info=True)
