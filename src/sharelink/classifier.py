"""Error classifier — maps failed share requests to user-facing messages.

``classify`` is a pure function: the same ``FailureDescriptor`` always
yields the same ``Classification``.  Checks run in a fixed order and the
first match wins, so a 401 that also carries "not found" in its body is
still reported as a permission problem.

Server error strings that match no known pattern are passed through
verbatim.  This trusts the backend to keep internals out of its
``error`` field; a whitelist would be stricter.
"""

from __future__ import annotations

from typing import Any

from .types import Classification, ErrorCategory, FailureDescriptor

NETWORK_MESSAGE = "Unable to connect. Please check your internet connection."
FORBIDDEN_MESSAGE = "You don't have permission to share this file."
SERVER_UNAVAILABLE_MESSAGE = "Server is temporarily unavailable. Please try again later."
TIMEOUT_MESSAGE = "Request timed out. Please try again."
NOT_FOUND_MESSAGE = "File not found. It may have been deleted."
UNKNOWN_MESSAGE = "Failed to create share link. Please try again."
PRECONDITION_MESSAGE = "File ID not available. Task may not be completed yet."

_FORBIDDEN_STATUSES = frozenset({401, 403})


def classify(failure: FailureDescriptor) -> Classification:
    """Classify *failure* into exactly one user-facing category."""
    status = failure.http_status
    if status is None:
        return Classification(ErrorCategory.NETWORK, NETWORK_MESSAGE)
    if status in _FORBIDDEN_STATUSES:
        return Classification(ErrorCategory.FORBIDDEN, FORBIDDEN_MESSAGE)
    if status >= 500:
        return Classification(ErrorCategory.SERVER_UNAVAILABLE, SERVER_UNAVAILABLE_MESSAGE)

    message = failure.server_message
    if isinstance(message, str) and message:
        lowered = message.lower()
        if "timeout" in lowered:
            return Classification(ErrorCategory.TIMEOUT, TIMEOUT_MESSAGE)
        if "not found" in lowered:
            return Classification(ErrorCategory.NOT_FOUND, NOT_FOUND_MESSAGE)
        return Classification(ErrorCategory.SERVER_MESSAGE, message)

    return Classification(ErrorCategory.UNKNOWN, UNKNOWN_MESSAGE)


def user_message(failure: FailureDescriptor) -> str:
    """Return only the user-facing message for *failure*."""
    return classify(failure).message


def failure_from_response(status: int, body: Any) -> FailureDescriptor:
    """Build a descriptor from an HTTP error response.

    The server message is read from ``body["error"]`` and kept only when
    it is a string.
    """
    server_message = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, str):
            server_message = error
    return FailureDescriptor(http_status=status, server_message=server_message)
