"""Presentation adapter — turns workflow state into display directives.

The display layer renders a ``ShareView`` as it sees fit; nothing here
knows about widgets, icons or clipboards.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .types import ShareStatus

if TYPE_CHECKING:
    from .tasks import TaskFile
    from .types import ShareRequestState

CLEANUP_WARNING = (
    "Share links are stored in your activity section but will stop working "
    "after the server cleanup job runs. Download files before cleanup to "
    "ensure access."
)
PROGRESS_WARNING = "Task is still in progress. Share will be available once download completes."


@dataclass(frozen=True, slots=True)
class ShareView:
    """Display directives for one file's share section."""

    ready: bool
    status_text: str
    button_label: str
    button_enabled: bool
    progress_warning: str | None = None
    error_message: str | None = None
    show_retry: bool = False
    share_url: str | None = None
    pass_code: str | None = None
    is_existing: bool = False
    cleanup_warning: str = CLEANUP_WARNING


def _button_label(state: ShareRequestState) -> str:
    if state.is_loading:
        return "Creating..."
    if state.result is not None and state.result.is_existing:
        return "Share Link Already Exists"
    if state.result is not None:
        return "Refresh Share Link"
    return "Create Share Link"


def render(state: ShareRequestState, task: TaskFile) -> ShareView:
    """Map *state* and the task's readiness to a ``ShareView``."""
    ready = task.has_file_id
    if ready:
        status_text = "Ready to Share"
    elif task.progress > 0:
        status_text = f"Task in Progress ({task.progress}% complete)"
    else:
        status_text = "Task in Progress"

    result = state.result if state.status is ShareStatus.SUCCEEDED else None
    is_existing = result is not None and result.is_existing
    return ShareView(
        ready=ready,
        status_text=status_text,
        button_label=_button_label(state),
        button_enabled=ready and not state.is_loading and not is_existing,
        progress_warning=None if ready else PROGRESS_WARNING,
        error_message=state.error_message,
        show_retry=state.error_message is not None,
        share_url=result.share_url if result else None,
        pass_code=result.pass_code if result else None,
        is_existing=is_existing,
    )
