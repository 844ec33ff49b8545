"""Typed request-time errors raised before a submission is queued."""

from __future__ import annotations


class SubmissionRejectedError(Exception):
    """Base exception for submissions rejected before queueing."""


class SubmissionValidationError(SubmissionRejectedError, ValueError):
    """Submission payload is malformed.

    Attributes:
        detail: JSON-serializable validation detail for the caller.
    """

    def __init__(self, message: str, detail: list[dict[str, object]] | None = None):
        super().__init__(message)
        self.detail = detail or []


class SubmissionAuthError(SubmissionRejectedError, PermissionError):
    """Submission token does not match the configured token."""


class ExecutorNotReadyError(SubmissionRejectedError, RuntimeError):
    """Executor capability cannot accept work yet."""
