"""Project-native typed exceptions for executor failures."""

from __future__ import annotations


class ExecutorFailure(Exception):
    """Base exception for a failed executor attempt.

    Attempts raising this error are normalized to a retryable failure outcome.

    Attributes:
        mode: Executor mode that failed.
    """

    def __init__(self, message: str, mode: str | None = None):
        super().__init__(message)
        self.mode = mode


class ExecutorUpstreamError(ExecutorFailure, ConnectionError):
    """Upstream target could not be reached or answered with an error status."""


class ExecutorTimeoutError(ExecutorFailure, TimeoutError):
    """Upstream target did not answer within the configured timeout."""
