"""Job API router composition for submission and result retrieval endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from app.admission import AdmissionController
from app.config import AppSettings
from app.domain import AdmissionStats, JobResult
from app.executors import ExecutorPort
from app.jobs import (
    ExecutorNotReadyError,
    QueueManager,
    SubmissionAuthError,
    SubmissionValidationError,
    job_admit_submission,
)
from app.store import SnapshotWriteError

logger = logging.getLogger(__name__)

LEGACY_SUBMIT_PATH = "/cf-clearance-scraper"
LEGACY_RESULT_PATH = "/cf-clearance-result/{job_id}"


def api_create_jobs_router(
    settings: AppSettings,
    queue_manager: QueueManager,
    executor: ExecutorPort,
    admission: AdmissionController,
) -> APIRouter:
    """Create jobs router with fast-acknowledge submission and consuming result reads.

    Args:
        settings: Runtime settings carrying the optional auth token.
        queue_manager: Process-wide queue manager.
        executor: Executor capability checked for supported modes and readiness.
        admission: Admission controller sampled for acknowledgement stats.

    Returns:
        APIRouter: Router exposing job APIs.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")
    if queue_manager is None:
        raise ValueError("queue_manager must not be None")
    if executor is None:
        raise ValueError("executor must not be None")
    if admission is None:
        raise ValueError("admission must not be None")

    router = APIRouter(tags=["jobs"])

    async def api_job_submit(request: Request) -> JSONResponse:
        """Validate and queue one job without waiting for its execution.

        Args:
            request: Incoming request with a JSON body.

        Returns:
            JSONResponse: Queue acknowledgement or request-time error payload.

        Raises:
            RuntimeError: This handler does not raise runtime errors.
        """

        try:
            body = await request.json()
        except ValueError:
            payload = {
                "code": 400,
                "message": "Bad Request",
                "schema": [{"loc": [], "msg": "request body must be valid JSON", "type": "json_invalid"}],
            }
            return JSONResponse(content=payload, status_code=status.HTTP_400_BAD_REQUEST)

        try:
            job_payload = job_admit_submission(
                body=body,
                executor=executor,
                auth_token=settings.auth_token,
                enforce_readiness=not settings.executor_skip_launch,
            )
        except SubmissionValidationError as error:
            payload = {"code": 400, "message": "Bad Request", "schema": error.detail}
            return JSONResponse(content=payload, status_code=status.HTTP_400_BAD_REQUEST)
        except SubmissionAuthError:
            payload = {"code": 401, "message": "Unauthorized"}
            return JSONResponse(content=payload, status_code=status.HTTP_401_UNAUTHORIZED)
        except ExecutorNotReadyError:
            payload = {"code": 503, "message": "The scanner is not ready yet."}
            return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

        try:
            job = await queue_manager.queue_submit(job_payload)
        except SnapshotWriteError:
            logger.exception("Cannot persist submitted job")
            payload = {"code": 503, "message": "Queue storage is unavailable."}
            return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

        payload = {
            "success": False,
            "status": "queued",
            "jobId": job.job_id,
            "queueLength": queue_manager.queue_length(),
            "cpu": api_serialize_admission_stats(_api_sample_admission(admission)),
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    async def api_job_result(job_id: str) -> JSONResponse:
        """Return the job result once, or a pending marker.

        Args:
            job_id: Job identifier returned by submission.

        Returns:
            JSONResponse: Result payload on first read after resolution, pending otherwise.

        Raises:
            RuntimeError: This handler does not raise runtime errors.
        """

        result = await queue_manager.queue_result_consume(job_id)
        if result is None:
            payload = {
                "success": False,
                "status": "pending",
                "message": "Job is still in queue or processing",
            }
            return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

        return JSONResponse(content=api_serialize_job_result(result), status_code=status.HTTP_200_OK)

    router.add_api_route("/submit", api_job_submit, methods=["POST"])
    router.add_api_route(LEGACY_SUBMIT_PATH, api_job_submit, methods=["POST"], include_in_schema=False)
    router.add_api_route("/result/{job_id}", api_job_result, methods=["GET"])
    router.add_api_route(LEGACY_RESULT_PATH, api_job_result, methods=["GET"], include_in_schema=False)

    return router


def api_serialize_job_result(result: JobResult) -> dict[str, object]:
    """Serialize a job result to the response payload.

    Executor fields such as `source` or `token` are placed at the top level
    next to the queue bookkeeping fields.

    Args:
        result: Terminal job result.

    Returns:
        dict[str, object]: JSON-serializable result payload.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    payload: dict[str, object] = dict(result.payload)
    payload.update(
        {
            "success": result.success,
            "status": "completed",
            "jobId": result.job_id,
            "code": result.code,
            "attempts": result.attempts,
            "finishedAt": result.finished_at.isoformat(),
            "queueLength": result.queue_length,
            "cpu": api_serialize_admission_stats(result.stats),
        }
    )
    if result.message is not None:
        payload["message"] = result.message
    return payload


def api_serialize_admission_stats(stats: AdmissionStats | None) -> dict[str, object] | None:
    """Serialize an admission sample to the `cpu` response block.

    Args:
        stats: Admission sample or None when sampling failed.

    Returns:
        dict[str, object] | None: CPU block or None.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if stats is None:
        return None
    return {
        "percent": stats.cpu_percent,
        "fraction": stats.cpu_fraction,
        "available": stats.cpu_available,
        "memoryGB": stats.memory_gb,
    }


def _api_sample_admission(admission: AdmissionController) -> AdmissionStats | None:
    try:
        return admission.admission_sample()
    except RuntimeError:
        logger.warning("Admission sample unavailable", exc_info=True)
        return None
