"""Bounded fixed-delay retry around executor attempts."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable

from app.admission import AdmissionController
from app.domain import AdmissionStats, ExecutorOutcome, Job, JobResult
from app.executors import FAILURE_CODE, ExecutorPort

logger = logging.getLogger(__name__)

GIVE_UP_CODE = 200


async def job_execute_with_retry(
    job: Job,
    executor: ExecutorPort,
    admission: AdmissionController,
    queue_length_provider: Callable[[], int],
    max_attempts: int = 5,
    delay_seconds: float = 2.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], datetime] | None = None,
) -> JobResult:
    """Run one job until a non-failure outcome or until attempts are exhausted.

    A failure outcome is code 500; any other code ends the loop successfully.
    Exhausted jobs resolve to `success=False` with code 200 so callers can tell
    a job that could not be completed apart from a failing service.

    Args:
        job: Job to execute.
        executor: Executor capability dispatching by mode.
        admission: Admission controller sampled for completion stats.
        queue_length_provider: Returns the current pending queue length.
        max_attempts: Total executor invocations allowed.
        delay_seconds: Fixed wait between attempts.
        sleep: Awaitable sleep primitive.
        clock: Optional provider of the current UTC time.

    Returns:
        JobResult: Terminal result for the job.

    Raises:
        ValueError: Raised when `max_attempts` is lower than one.
    """

    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    now = clock or (lambda: datetime.now(timezone.utc))
    last_message: str | None = None

    for attempt in range(1, max_attempts + 1):
        try:
            outcome = await executor.executor_run(job.payload)
        except Exception as error:
            outcome = ExecutorOutcome(code=FAILURE_CODE, message=str(error) or error.__class__.__name__)
        if not outcome.failed:
            return JobResult(
                job_id=job.job_id,
                success=True,
                code=outcome.code,
                payload=outcome.payload,
                message=outcome.message,
                finished_at=now(),
                attempts=attempt,
                queue_length=queue_length_provider(),
                stats=_job_sample_stats(admission),
            )

        last_message = outcome.message
        logger.warning(
            "Job %s attempt %d/%d failed (mode=%s): %s",
            job.job_id,
            attempt,
            max_attempts,
            job.mode,
            last_message,
        )
        if attempt < max_attempts:
            await sleep(delay_seconds)

    logger.warning("Job %s given up after %d attempts", job.job_id, max_attempts)
    message = f"Failed after {max_attempts} attempts"
    if last_message:
        message = f"{message}: {last_message}"
    return JobResult(
        job_id=job.job_id,
        success=False,
        code=GIVE_UP_CODE,
        payload={},
        message=message,
        finished_at=now(),
        attempts=max_attempts,
        queue_length=queue_length_provider(),
        stats=_job_sample_stats(admission),
    )


def _job_sample_stats(admission: AdmissionController) -> AdmissionStats | None:
    try:
        return admission.admission_sample()
    except RuntimeError:
        logger.warning("Admission sample unavailable for result stats", exc_info=True)
        return None
