"""Exception classes for foundation utilities.

This module provides exception classes raised by the client adapters. The core
services catch these and wrap them into the launcher's stage-specific errors.
"""


class FoundationError(Exception):
    """Base exception class for foundation-related errors."""


class UpstreamError(FoundationError):
    """Exception raised when an upstream dependency service fails.

    This exception indicates that a required external service (MongoDB or the
    Kubernetes API) is unavailable, returned an error, or failed to complete a
    request.
    """


class ResourceNotFoundError(UpstreamError):
    """Exception raised when an upstream service reports a missing resource.

    Kept distinct from `UpstreamError` so callers can tell "the pod/node does
    not exist" apart from transport or permission failures.

    Attributes:
        kind: Resource kind that was looked up (e.g. "pod", "node").
        name: Name of the resource that was not found.
    """

    def __init__(self, kind: str, name: str, message: str | None = None) -> None:
        self.kind = kind
        self.name = name
        super().__init__(message or f"{kind} {name} not found")
