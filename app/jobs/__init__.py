"""Job layer package for queueing, retry and worker loop orchestration."""

from .errors import (
    ExecutorNotReadyError,
    SubmissionAuthError,
    SubmissionRejectedError,
    SubmissionValidationError,
)
from .queue_manager import QueueManager, QueueManagerConfig, QueueStatus, job_new_id
from .retry import GIVE_UP_CODE, job_execute_with_retry
from .submission import ProxyConfig, SubmissionPayload, job_admit_submission

__all__ = [
    "ExecutorNotReadyError",
    "GIVE_UP_CODE",
    "ProxyConfig",
    "QueueManager",
    "QueueManagerConfig",
    "QueueStatus",
    "SubmissionAuthError",
    "SubmissionPayload",
    "SubmissionRejectedError",
    "SubmissionValidationError",
    "job_admit_submission",
    "job_execute_with_retry",
    "job_new_id",
]
