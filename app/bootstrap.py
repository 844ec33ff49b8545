"""Application bootstrap wiring for startup validation and dependency assembly."""

from dataclasses import dataclass

from fastapi import FastAPI

from app.admission import AdmissionController, PsutilProcessStatsSource
from app.api import create_api_application
from app.config import AppSettings, config_load_settings
from app.executors import HttpSourceHandler, ModeDispatchExecutor
from app.jobs import QueueManager, QueueManagerConfig
from app.store import JsonSnapshotStore


@dataclass(frozen=True)
class ServiceComponents:
    """Process-wide components built once at startup.

    Attributes:
        settings: Validated runtime settings.
        store: Durable snapshot store.
        admission: CPU admission controller.
        executor: Mode-dispatching executor.
        queue_manager: Queue manager owning queue, worker loop and result cache.
    """

    settings: AppSettings
    store: JsonSnapshotStore
    admission: AdmissionController
    executor: ModeDispatchExecutor
    queue_manager: QueueManager


def bootstrap_create_components(settings: AppSettings | None = None) -> ServiceComponents:
    """Build store, admission controller, executor and queue manager.

    Args:
        settings: Optional pre-loaded settings; loaded from environment when omitted.

    Returns:
        ServiceComponents: Fully wired components.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    store = JsonSnapshotStore(snapshot_path=resolved_settings.snapshot_path)
    admission = AdmissionController(
        stats_source=PsutilProcessStatsSource(),
        core_count=resolved_settings.executor_core_count,
        cpu_threshold=resolved_settings.cpu_threshold,
    )
    executor = ModeDispatchExecutor(
        handlers=[HttpSourceHandler(request_timeout_seconds=resolved_settings.source_request_timeout_seconds)]
    )
    queue_manager = QueueManager(
        store=store,
        executor=executor,
        admission=admission,
        config=QueueManagerConfig(
            max_attempts=resolved_settings.max_retry_attempts,
            retry_delay_seconds=resolved_settings.retry_delay_seconds,
            admission_poll_interval_seconds=resolved_settings.admission_poll_interval_seconds,
            result_ttl_seconds=resolved_settings.result_ttl_seconds,
            sweep_interval_seconds=resolved_settings.result_sweep_interval_seconds,
        ),
    )
    return ServiceComponents(
        settings=resolved_settings,
        store=store,
        admission=admission,
        executor=executor,
        queue_manager=queue_manager,
    )


def bootstrap_create_application(settings: AppSettings | None = None) -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Args:
        settings: Optional pre-loaded settings; loaded from environment when omitted.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    components = bootstrap_create_components(settings=settings)
    return create_api_application(
        settings=components.settings,
        queue_manager=components.queue_manager,
        executor=components.executor,
        admission=components.admission,
        store=components.store,
    )
