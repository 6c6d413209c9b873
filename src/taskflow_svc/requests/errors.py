"""Errors raised by the request service.

Each error carries a ``kind`` so outer layers (HTTP routes, CLI) can map
it to a response without matching on message text.
"""

from __future__ import annotations

from .types import Status


class RequestError(Exception):
    """Base class for request service failures."""

    kind = "RequestError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(RequestError):
    """Raised when an operation references a nonexistent request id."""

    kind = "NotFound"


class AccessDeniedError(RequestError):
    """Raised when the acting user is not allowed to perform an operation."""

    kind = "AccessDenied"


class InvalidTransitionError(RequestError):
    """Raised when a requested status is not reachable from the current one."""

    kind = "InvalidTransition"

    def __init__(self, from_status: Status, to_status: Status, request_id: str = ""):
        self.from_status = from_status
        self.to_status = to_status
        self.request_id = request_id
        target = f" for {request_id}" if request_id else ""
        super().__init__(
            f"Invalid status transition{target}: {from_status.value} → {to_status.value}"
        )


class PreconditionFailedError(RequestError):
    """Raised when a mutation's precondition does not hold."""

    kind = "PreconditionFailed"


class ValidationError(RequestError):
    """Raised when input data is malformed or incomplete."""

    kind = "ValidationError"


class PersistenceError(RequestError):
    """Raised when the record store fails to load or save."""

    kind = "PersistenceFault"
