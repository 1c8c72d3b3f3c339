"""sharelink: share-link creation and deduplication for remote files.

Request public share links from a backend, classify failures into
user-actionable messages, and keep a durable local record of issued shares.
"""

__version__ = "0.1.0"

from sharelink._sharelink import ShareLink, ShareWorkflow
from sharelink._sharelink_async import ShareLinkAsync
from sharelink.classifier import classify, user_message
from sharelink.client import ShareApiClient, ShareBackend
from sharelink.config import ShareConfig
from sharelink.exceptions import (
    ShareInProgressError,
    ShareLinkError,
    ShareRequestError,
    StoreError,
)
from sharelink.orchestrator import ShareOrchestrator
from sharelink.presentation import ShareView, render
from sharelink.store import LocalShareStore
from sharelink.tasks import TaskFile
from sharelink.types import (
    Classification,
    ErrorCategory,
    FailureDescriptor,
    ShareRecord,
    ShareRequestState,
    ShareResult,
    ShareStatus,
)

__all__ = [
    "Classification",
    "ErrorCategory",
    "FailureDescriptor",
    "LocalShareStore",
    "ShareApiClient",
    "ShareBackend",
    "ShareConfig",
    "ShareInProgressError",
    "ShareLink",
    "ShareLinkAsync",
    "ShareLinkError",
    "ShareOrchestrator",
    "ShareRecord",
    "ShareRequestError",
    "ShareRequestState",
    "ShareResult",
    "ShareStatus",
    "ShareView",
    "ShareWorkflow",
    "StoreError",
    "TaskFile",
    "__version__",
    "classify",
    "render",
    "user_message",
]
