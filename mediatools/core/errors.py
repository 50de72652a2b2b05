"""Domain-specific exceptions for the media tools."""

from __future__ import annotations


class DecodeFailure(ValueError):
    """Raised when an asset is corrupt or in an unsupported format."""

    def __init__(self, name: str, reason: str | None = None):
        message = f"Could not decode {name}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.name = name
        self.reason = reason


class ValidationError(ValueError):
    """Raised when user-provided settings fail validation."""


class ProcessingError(RuntimeError):
    """Raised when the pipeline fails unexpectedly."""


class RenderSurfaceUnavailable(RuntimeError):
    """Raised when a drawing surface cannot be acquired."""


class OperationTimedOut(ProcessingError):
    """Raised when a single decode/seek exceeds its time budget."""

    def __init__(self, operation: str, timeout: float):
        super().__init__(f"{operation} timed out after {timeout:g}s")
        self.operation = operation
        self.timeout = timeout


class OperationCancelled(ProcessingError):
    """Raised between operations once a batch has been cancelled."""


class NameCollisionExhausted(ProcessingError):
    """Raised when no free archive name is found within the attempt limit."""
