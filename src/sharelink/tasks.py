"""TaskFile — readiness of the file produced by a download task."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


def _child(value: Any, key: str) -> Any:
    return value.get(key) if isinstance(value, dict) else None


@dataclass(frozen=True, slots=True)
class TaskFile:
    """File artifact of a remote download task.

    Attributes:
        file_id: Remote file identity, None until the task produced a file.
        file_name: Display name reported by the task.
        progress: Completion percentage, 0-100.
    """

    file_id: str | None = None
    file_name: str | None = None
    progress: int = 0

    @property
    def has_file_id(self) -> bool:
        return bool(self.file_id)

    @classmethod
    def from_record(cls, record: Any) -> TaskFile:
        """Read ``data.task.task`` of a task record; missing levels yield an empty TaskFile."""
        task = _child(_child(_child(record, "data"), "task"), "task")
        if not isinstance(task, dict):
            return cls()

        file_id = task.get("file_id")
        file_name = task.get("file_name")
        progress = task.get("progress")
        if isinstance(progress, bool) or not isinstance(progress, int | float):
            progress = 0
        return cls(
            file_id=str(file_id) if file_id else None,
            file_name=file_name if isinstance(file_name, str) and file_name else None,
            progress=max(0, min(100, int(progress))),
        )
