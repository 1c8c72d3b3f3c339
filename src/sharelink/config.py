"""ShareConfig — connection and storage settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_API_URL = "http://localhost:5000"
DEFAULT_STORAGE_KEY = "local-shares"
DEFAULT_TIMEOUT = 30.0


def default_data_dir() -> Path:
    return Path.home() / ".sharelink"


@dataclass
class ShareConfig:
    """Configuration for a sharelink client."""

    api_url: str = field(default_factory=lambda: os.environ.get("SHARELINK_API_URL", DEFAULT_API_URL))
    """Base URL of the share backend; ``/share`` is appended."""

    data_dir: Path = field(default_factory=default_data_dir)
    """Directory holding the local share database."""

    storage_key: str = DEFAULT_STORAGE_KEY
    """Fixed key the share list is stored under."""

    timeout: float = DEFAULT_TIMEOUT
    """Transport timeout in seconds for the HTTP client."""

    def __post_init__(self) -> None:
        self.api_url = self.api_url.rstrip("/")
        self.data_dir = Path(self.data_dir).expanduser()
        if not self.storage_key:
            raise ValueError("storage_key must not be empty")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout!r}")

    @property
    def db_path(self) -> Path:
        return self.data_dir / "shares.db"

    @classmethod
    def from_env(cls) -> ShareConfig:
        """Build a config from ``SHARELINK_*`` environment variables."""
        data_dir = os.environ.get("SHARELINK_DATA_DIR")
        timeout = os.environ.get("SHARELINK_TIMEOUT")
        return cls(
            api_url=os.environ.get("SHARELINK_API_URL", DEFAULT_API_URL),
            data_dir=Path(data_dir) if data_dir else default_data_dir(),
            timeout=float(timeout) if timeout else DEFAULT_TIMEOUT,
        )
