"""FastAPI application factory for the job queue service.

This module defines API application composition and the process lifecycle:
executor startup and queue recovery on boot, orderly stop on shutdown.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.admission import AdmissionController
from app.config import AppSettings
from app.executors import ExecutorPort
from app.jobs import QueueManager
from app.store import DurableStorePort

from .routers import api_create_health_router, api_create_jobs_router


def create_api_application(
    settings: AppSettings,
    queue_manager: QueueManager,
    executor: ExecutorPort,
    admission: AdmissionController,
    store: DurableStorePort,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings.
        queue_manager: Process-wide queue manager.
        executor: Executor capability used for readiness and dispatch.
        admission: Admission controller sampled for response stats.
        store: Durable store, reported by the health endpoint.

    Returns:
        FastAPI: Framework application instance with lifecycle hooks.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    @asynccontextmanager
    async def application_lifespan(_application: FastAPI) -> AsyncIterator[None]:
        await executor.executor_startup()
        await queue_manager.queue_start()
        try:
            yield
        finally:
            await queue_manager.queue_stop()
            await executor.executor_shutdown()

    application = FastAPI(title="Clearance Job Queue", lifespan=application_lifespan)

    @application.exception_handler(StarletteHTTPException)
    async def api_http_error(_request: Request, error: StarletteHTTPException) -> JSONResponse:
        """Render framework HTTP errors, including unmatched routes, as `{code, message}`.

        Returns:
            JSONResponse: Error payload with the original status code.

        Raises:
            RuntimeError: This handler does not raise runtime errors.
        """

        message = "Not Found" if error.status_code == 404 else str(error.detail)
        return JSONResponse(
            content={"code": error.status_code, "message": message},
            status_code=error.status_code,
            headers=getattr(error, "headers", None),
        )

    application.include_router(
        api_create_health_router(
            settings=settings,
            queue_manager=queue_manager,
            executor=executor,
            admission=admission,
            store=store,
        )
    )
    application.include_router(
        api_create_jobs_router(
            settings=settings,
            queue_manager=queue_manager,
            executor=executor,
            admission=admission,
        )
    )

    return application
