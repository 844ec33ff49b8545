"""Health endpoint router composition for queue, executor and resource checks."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from app.admission import AdmissionController
from app.config import AppSettings
from app.executors import ExecutorPort
from app.jobs import QueueManager
from app.store import DurableStorePort

from .jobs import api_serialize_admission_stats


def api_create_health_router(
    settings: AppSettings,
    queue_manager: QueueManager,
    executor: ExecutorPort,
    admission: AdmissionController,
    store: DurableStorePort,
) -> APIRouter:
    """Create health-check router with queue counters and executor readiness.

    Args:
        settings: Runtime settings used for environment metadata.
        queue_manager: Process-wide queue manager.
        executor: Executor capability checked for readiness.
        admission: Admission controller sampled for current load.
        store: Durable store reported as health target.

    Returns:
        APIRouter: Router exposing `/health` endpoint.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if queue_manager is None:
        raise ValueError("queue_manager must not be None")
    if executor is None:
        raise ValueError("executor must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return application, executor and queue health state.

        Returns:
            JSONResponse: Health payload; 503 while the executor is not ready.

        Raises:
            RuntimeError: This handler does not raise runtime errors.
        """

        executor_ready = executor.executor_is_ready() or settings.executor_skip_launch
        try:
            cpu = api_serialize_admission_stats(admission.admission_sample())
        except RuntimeError:
            cpu = None
        queue_status = queue_manager.queue_status()
        payload = {
            "status": "ok" if executor_ready else "degraded",
            "app": "up",
            "environment": settings.environment_name,
            "executor": "ready" if executor_ready else "not_ready",
            "modes": list(executor.executor_supported_modes()),
            "store": store.store_location_label(),
            "queue": {
                "length": queue_status.queue_length,
                "inflight": queue_status.inflight_count,
                "results": queue_status.result_count,
                "draining": queue_status.draining,
            },
            "cpu": cpu,
            "cpuThreshold": admission.cpu_threshold,
        }
        status_code = status.HTTP_200_OK if executor_ready else status.HTTP_503_SERVICE_UNAVAILABLE
        return JSONResponse(content=payload, status_code=status_code)

    return router
