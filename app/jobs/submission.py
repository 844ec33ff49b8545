"""Submission payload contract and the request-time acceptance gate."""

from __future__ import annotations

import hmac
import json
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from app.executors import ExecutorPort

from .errors import ExecutorNotReadyError, SubmissionAuthError, SubmissionValidationError

TURNSTILE_MODES = frozenset({"turnstile-min", "turnstile-max"})


class ProxyConfig(BaseModel):
    """Optional upstream proxy used by the executor for one job."""

    model_config = ConfigDict(extra="forbid")

    host: str = Field(min_length=1)
    port: int = Field(ge=1, le=65535)
    username: str | None = None
    password: str | None = None


class SubmissionPayload(BaseModel):
    """Client submission body.

    Unknown fields are kept and forwarded to the executor untouched.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    mode: Literal["source", "turnstile-min", "turnstile-max", "waf-session"]
    url: str = Field(min_length=1)
    site_key: str | None = Field(default=None, alias="siteKey")
    proxy: ProxyConfig | None = None
    auth_token: str | None = Field(default=None, alias="authToken")

    @field_validator("url")
    @classmethod
    def _validate_url_scheme(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value.startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return stripped_value

    @model_validator(mode="after")
    def _validate_site_key_for_turnstile(self) -> "SubmissionPayload":
        if self.mode in TURNSTILE_MODES and not (self.site_key or "").strip():
            raise ValueError(f"siteKey is required for mode {self.mode}")
        return self

    def submission_job_payload(self) -> dict[str, object]:
        """Return the payload persisted with the job, without the auth token."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True, exclude={"auth_token"})


def job_admit_submission(
    body: object,
    executor: ExecutorPort,
    auth_token: str | None,
    enforce_readiness: bool = True,
) -> dict[str, object]:
    """Validate a raw submission and return the job payload to enqueue.

    Checks run in order: payload shape, auth token, executor readiness.

    Args:
        body: Decoded JSON request body.
        executor: Executor capability that will run the job.
        auth_token: Configured shared token, or None when auth is disabled.
        enforce_readiness: Whether an unready executor rejects the submission.

    Returns:
        dict[str, object]: Normalized job payload including `mode`.

    Raises:
        SubmissionValidationError: Raised when the body is malformed or the mode is unsupported.
        SubmissionAuthError: Raised when a token is configured and does not match.
        ExecutorNotReadyError: Raised when the executor cannot accept work yet.
    """

    if not isinstance(body, dict):
        raise SubmissionValidationError(
            "request body must be a JSON object",
            detail=[{"loc": [], "msg": "request body must be a JSON object", "type": "object_type"}],
        )

    try:
        submission = SubmissionPayload.model_validate(body)
    except ValidationError as error:
        raise SubmissionValidationError(
            "submission payload is invalid",
            detail=json.loads(error.json(include_url=False)),
        ) from error

    if submission.mode not in executor.executor_supported_modes():
        raise SubmissionValidationError(
            "mode is not supported by this server",
            detail=[{"loc": ["mode"], "msg": f"mode {submission.mode} is not supported", "type": "unsupported_mode"}],
        )

    if auth_token is not None:
        provided_token = (submission.auth_token or "").encode("utf-8")
        if not hmac.compare_digest(provided_token, auth_token.encode("utf-8")):
            raise SubmissionAuthError("auth token mismatch")

    if enforce_readiness and not executor.executor_is_ready():
        raise ExecutorNotReadyError("executor is not ready yet")

    return submission.submission_job_payload()
