"""Regression tests for request-time submission validation, auth and readiness."""

from __future__ import annotations

import pytest

from app.jobs import ExecutorNotReadyError, SubmissionAuthError, SubmissionValidationError, job_admit_submission


class _ExecutorStub:
    """Executor stub exposing configurable modes and readiness."""

    def __init__(self, ready: bool = True, modes: tuple[str, ...] = ("source", "turnstile-min")):
        self._ready = ready
        self._modes = modes

    def executor_supported_modes(self) -> tuple[str, ...]:
        return self._modes

    def executor_is_ready(self) -> bool:
        return self._ready


def test_jobs_submission_returns_payload_without_auth_token() -> None:
    """Return the normalized job payload and drop the auth token.

    Returns:
        None: Assertions validate accepted payload shape.

    Raises:
        AssertionError: Raised when the payload is wrong.
    """

    job_payload = job_admit_submission(
        body={
            "mode": "source",
            "url": " https://example.com ",
            "authToken": "secret",
            "proxy": {"host": "127.0.0.1", "port": 8080},
            "waitSelector": "#content",
        },
        executor=_ExecutorStub(),
        auth_token="secret",
    )

    assert job_payload == {
        "mode": "source",
        "url": "https://example.com",
        "proxy": {"host": "127.0.0.1", "port": 8080},
        "waitSelector": "#content",
    }


@pytest.mark.parametrize(
    "body",
    [
        ["not", "an", "object"],
        {"url": "https://example.com"},
        {"mode": "screenshot", "url": "https://example.com"},
        {"mode": "source", "url": "ftp://example.com"},
        {"mode": "turnstile-min", "url": "https://example.com"},
        {"mode": "source", "url": "https://example.com", "proxy": {"host": "p"}},
        {"mode": "waf-session", "url": "https://example.com"},
    ],
)
def test_jobs_submission_rejects_malformed_payloads(body: object) -> None:
    """Reject malformed bodies and modes the executor does not support.

    Args:
        body: Malformed submission body.

    Returns:
        None: Assertions validate rejection with detail.

    Raises:
        AssertionError: Raised when a malformed body is accepted.
    """

    with pytest.raises(SubmissionValidationError) as error_info:
        job_admit_submission(body=body, executor=_ExecutorStub(), auth_token=None)

    assert error_info.value.detail


def test_jobs_submission_enforces_configured_token_only() -> None:
    """Reject a missing or wrong token only when a token is configured.

    Returns:
        None: Assertions validate auth policy.

    Raises:
        AssertionError: Raised when auth policy is wrong.
    """

    body = {"mode": "source", "url": "https://example.com"}

    with pytest.raises(SubmissionAuthError):
        job_admit_submission(body=body, executor=_ExecutorStub(), auth_token="secret")
    with pytest.raises(SubmissionAuthError):
        job_admit_submission(body={**body, "authToken": "wrong"}, executor=_ExecutorStub(), auth_token="secret")

    assert job_admit_submission(body=body, executor=_ExecutorStub(), auth_token=None)["mode"] == "source"


def test_jobs_submission_checks_readiness_after_validation_and_auth() -> None:
    """Reject with not-ready only for valid, authorized submissions.

    Returns:
        None: Assertions validate check ordering.

    Raises:
        AssertionError: Raised when checks run in the wrong order.
    """

    executor = _ExecutorStub(ready=False)
    body = {"mode": "source", "url": "https://example.com", "authToken": "secret"}

    with pytest.raises(SubmissionValidationError):
        job_admit_submission(body={"mode": "source"}, executor=executor, auth_token="secret")
    with pytest.raises(SubmissionAuthError):
        job_admit_submission(body={**body, "authToken": "nope"}, executor=executor, auth_token="secret")
    with pytest.raises(ExecutorNotReadyError):
        job_admit_submission(body=body, executor=executor, auth_token="secret")

    assert job_admit_submission(body=body, executor=executor, auth_token="secret", enforce_readiness=False)
