"""Data types: ShareRecord, ShareResult, ShareRequestState, etc."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

UNKNOWN_FILE_NAME = "Unknown File"
"""Display label used when the originating task has no file name."""


@dataclass(frozen=True, slots=True)
class ShareRecord:
    """One issued share, as kept in the local share store.

    Attributes:
        id: Server-issued share id, or a local ``share-<ms>`` fallback.
        file_name: Display label of the shared file.
        share_url: Public access URL.
        pass_code: Access code for restricted shares, None otherwise.
        created_at: Creation time in milliseconds since the epoch.
        source_file_id: Identity of the remote file; the dedup key.
    """

    id: str
    file_name: str
    share_url: str
    created_at: int
    source_file_id: str
    pass_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the persisted key layout."""
        data: dict[str, Any] = {
            "id": self.id,
            "file_name": self.file_name,
            "share_url": self.share_url,
            "timestamp": self.created_at,
            "file_id": self.source_file_id,
        }
        if self.pass_code is not None:
            data["pass_code"] = self.pass_code
        return data

    @classmethod
    def from_dict(cls, data: Any) -> ShareRecord:
        """Parse one persisted entry. Raises ``ValueError`` if malformed."""
        if not isinstance(data, dict):
            raise ValueError(f"Share entry must be an object, got {type(data).__name__}")

        for key in ("id", "share_url", "file_id"):
            if not isinstance(data.get(key), str) or not data[key]:
                raise ValueError(f"Share entry has no valid {key!r}")

        timestamp = data.get("timestamp")
        # bool is an int subclass; reject it explicitly
        if not isinstance(timestamp, int) or isinstance(timestamp, bool):
            raise ValueError("Share entry has no valid 'timestamp'")

        file_name = data.get("file_name")
        pass_code = data.get("pass_code")
        return cls(
            id=data["id"],
            file_name=file_name if isinstance(file_name, str) and file_name else UNKNOWN_FILE_NAME,
            share_url=data["share_url"],
            created_at=timestamp,
            source_file_id=data["file_id"],
            pass_code=pass_code if isinstance(pass_code, str) else None,
        )


@dataclass(frozen=True, slots=True)
class ShareResult:
    """Share data returned by the backend for one request."""

    share_url: str
    pass_code: str | None = None
    is_existing: bool = False
    share_id: str | None = None

    @classmethod
    def from_response(cls, body: Any) -> ShareResult:
        """Parse a successful ``POST /share`` body. Raises ``ValueError`` if malformed."""
        if not isinstance(body, dict):
            raise ValueError("Share response must be a JSON object")
        share_url = body.get("share_url")
        if not isinstance(share_url, str) or not share_url:
            raise ValueError("Share response has no 'share_url'")

        pass_code = body.get("pass_code")
        share_id = body.get("share_id")
        return cls(
            share_url=share_url,
            pass_code=pass_code if isinstance(pass_code, str) and pass_code else None,
            is_existing=body.get("is_existing") is True,
            share_id=share_id if isinstance(share_id, str) and share_id else None,
        )


class ShareStatus(Enum):
    """Lifecycle states of one file's share workflow."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ShareRequestState:
    """Snapshot of a share workflow. Never persisted."""

    status: ShareStatus = ShareStatus.IDLE
    result: ShareResult | None = None
    error_message: str | None = None

    @property
    def is_loading(self) -> bool:
        return self.status is ShareStatus.LOADING

    @property
    def can_retry(self) -> bool:
        """True when the display layer should offer a retry action."""
        return self.status is ShareStatus.FAILED


@dataclass(frozen=True, slots=True)
class FailureDescriptor:
    """What the classifier knows about a failed remote call.

    Attributes:
        http_status: Response status, or None when no response arrived.
        server_message: Server-supplied error string, if any.
    """

    http_status: int | None = None
    server_message: str | None = None


class ErrorCategory(Enum):
    """User-facing error categories."""

    PRECONDITION = "precondition"
    NETWORK = "network"
    FORBIDDEN = "forbidden"
    SERVER_UNAVAILABLE = "server_unavailable"
    TIMEOUT = "timeout"
    NOT_FOUND = "not_found"
    SERVER_MESSAGE = "server_message"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class Classification:
    """Result of classifying a failure."""

    category: ErrorCategory
    message: str
