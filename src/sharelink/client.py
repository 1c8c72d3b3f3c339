"""ShareApiClient — HTTP client for the backend share endpoint."""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from .classifier import failure_from_response
from .config import ShareConfig
from .exceptions import ShareRequestError
from .types import FailureDescriptor, ShareResult

logger = logging.getLogger(__name__)


@runtime_checkable
class ShareBackend(Protocol):
    """Protocol for anything that can create a share for a remote file.

    Implementations raise ``ShareRequestError`` on failure and never let
    transport exceptions escape.
    """

    async def create_share(self, file_id: str) -> ShareResult:
        """Create, or fetch the existing, share for *file_id*."""
        ...


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


class ShareApiClient:
    """``ShareBackend`` that talks to ``POST {api_url}/share`` over httpx.

    Pass *http_client* to reuse an existing ``httpx.AsyncClient``; the
    share client only closes clients it created itself.

    Usage::

        async with ShareApiClient(ShareConfig(api_url="https://api.example")) as api:
            result = await api.create_share("file-123")
    """

    def __init__(
        self,
        config: ShareConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or ShareConfig()
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def share_url(self) -> str:
        return f"{self._config.api_url}/share"

    def _require_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._config.timeout)
        return self._client

    async def create_share(self, file_id: str) -> ShareResult:
        """Issue one share request for *file_id*.

        Raises ``ShareRequestError`` on transport failure, on a non-2xx
        response, or on a 2xx response without a usable body.
        """
        client = self._require_client()
        logger.debug("POST %s for file %s", self.share_url, file_id)
        try:
            response = await client.post(self.share_url, json={"id": file_id})
        except httpx.TransportError as exc:
            logger.debug("Share request for %s got no response: %s", file_id, exc)
            raise ShareRequestError(FailureDescriptor()) from exc

        body = _json_or_none(response)
        if not response.is_success:
            failure = failure_from_response(response.status_code, body)
            logger.debug("Share request for %s failed with HTTP %d", file_id, response.status_code)
            raise ShareRequestError(failure)

        try:
            return ShareResult.from_response(body)
        except ValueError as exc:
            logger.warning("Malformed share response for %s: %s", file_id, exc)
            raise ShareRequestError(FailureDescriptor(http_status=response.status_code)) from exc

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> ShareApiClient:
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.close()
