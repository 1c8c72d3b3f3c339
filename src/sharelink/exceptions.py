"""Custom exception hierarchy for sharelink."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sharelink.types import FailureDescriptor


class ShareLinkError(Exception):
    """Base exception for all sharelink errors."""


class ShareRequestError(ShareLinkError):
    """Raised by a share backend when the remote call fails.

    Carries the ``FailureDescriptor`` handed to the error classifier.
    The orchestrator catches it; it never reaches the UI shell.
    """

    def __init__(self, failure: FailureDescriptor, message: str | None = None) -> None:
        self.failure = failure
        if message is None:
            if failure.http_status is None:
                message = "Share request failed: no response"
            else:
                message = f"Share request failed with HTTP {failure.http_status}"
        super().__init__(message)


class ShareInProgressError(ShareLinkError):
    """Raised when a share request is issued while another one is loading."""


class StoreError(ShareLinkError):
    """Raised on local share store failures (DB connection, disk I/O, etc.)."""
