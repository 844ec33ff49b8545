"""Durable FIFO job queue with an admission-gated single worker loop.

`QueueManager` owns the in-memory job queue and result cache and mirrors every
mutation to the durable store. One instance is built per process and shared by
the HTTP layer and the worker loop.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Mapping
from uuid import uuid4

from app.admission import AdmissionController
from app.domain import (
    Job,
    JobResult,
    Snapshot,
    domain_expired_result_ids,
    domain_snapshot_requeue_inflight,
    domain_snapshot_with_job_enqueued,
    domain_snapshot_with_job_started,
    domain_snapshot_with_result_recorded,
    domain_snapshot_without_results,
)
from app.executors import ExecutorPort
from app.store import DurableStorePort, SnapshotWriteError

from .retry import job_execute_with_retry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueueManagerConfig:
    """Queue policy settings.

    Attributes:
        max_attempts: Executor attempts per job before giving up.
        retry_delay_seconds: Fixed wait between executor attempts.
        admission_poll_interval_seconds: Wait between admission checks while busy.
        result_ttl_seconds: Retention window for uncollected results.
        sweep_interval_seconds: Interval between TTL sweeps.
    """

    max_attempts: int = 5
    retry_delay_seconds: float = 2.0
    admission_poll_interval_seconds: float = 0.5
    result_ttl_seconds: float = 900.0
    sweep_interval_seconds: float = 60.0


@dataclass(frozen=True)
class QueueStatus:
    """Point-in-time counters of the queue."""

    queue_length: int
    inflight_count: int
    result_count: int
    draining: bool


def job_new_id() -> str:
    """Return a new job id made of a millisecond timestamp and a random suffix."""

    return f"{int(time.time() * 1000)}-{uuid4().hex}"


class QueueManager:
    """Job queue, worker loop, result cache and TTL sweep over one durable store."""

    def __init__(
        self,
        store: DurableStorePort,
        executor: ExecutorPort,
        admission: AdmissionController,
        config: QueueManagerConfig | None = None,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize queue manager.

        Args:
            store: Durable snapshot store.
            executor: Executor capability dispatching jobs by mode.
            admission: Admission controller gating each dequeue.
            config: Optional queue policy settings.
            clock: Optional provider of the current UTC time.
            sleep: Awaitable sleep primitive used for admission and retry waits.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if store is None:
            raise ValueError("store must not be None")
        if executor is None:
            raise ValueError("executor must not be None")
        if admission is None:
            raise ValueError("admission must not be None")

        self._store = store
        self._executor = executor
        self._admission = admission
        self._config = config or QueueManagerConfig()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._sleep = sleep

        self._pending: deque[Job] = deque()
        self._inflight: Job | None = None
        self._results: dict[str, JobResult] = {}
        self._draining = False
        self._drain_task: asyncio.Task | None = None
        self._sweep_task: asyncio.Task | None = None

    def queue_status(self) -> QueueStatus:
        """Return current in-memory counters."""

        return QueueStatus(
            queue_length=len(self._pending),
            inflight_count=0 if self._inflight is None else 1,
            result_count=len(self._results),
            draining=self._draining,
        )

    def queue_length(self) -> int:
        """Return the number of jobs waiting to be dequeued."""

        return len(self._pending)

    async def queue_start(self) -> None:
        """Recover persisted state, resume pending work and start the TTL sweep.

        Returns:
            None: Startup completes as side effect.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        await self.queue_recover()
        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = asyncio.get_running_loop().create_task(self._queue_sweep_forever())
        self.queue_schedule_drain()

    async def queue_stop(self) -> None:
        """Cancel the sweep timer and the worker loop.

        A job interrupted here stays in the persisted in-flight list and is
        replayed on the next start.

        Returns:
            None: Shutdown completes as side effect.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        for task in (self._sweep_task, self._drain_task):
            if task is None or task.done():
                continue
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._sweep_task = None
        self._drain_task = None

    async def queue_recover(self) -> Snapshot:
        """Hydrate the in-memory queue and result cache from the durable store.

        Jobs persisted as in flight were interrupted by a crash; they are put
        back at the head of the queue so they run again.

        Returns:
            Snapshot: Snapshot the in-memory state was hydrated from.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        try:
            snapshot = await self._store.store_read()
            replayed_count = len(snapshot.inflight)
            if replayed_count:
                snapshot = await self._store.store_write(domain_snapshot_requeue_inflight)
        except SnapshotWriteError:
            logger.exception("Cannot load queue snapshot; starting with empty in-memory state")
            snapshot = Snapshot()
            replayed_count = 0

        self._pending = deque(snapshot.queue)
        self._results = dict(snapshot.results)
        logger.info(
            "Recovered %d queued jobs (%d replayed from in-flight) and %d results",
            len(self._pending),
            replayed_count,
            len(self._results),
        )
        return snapshot

    async def queue_submit(self, payload: Mapping[str, object]) -> Job:
        """Persist a new job at the tail of the queue and wake the worker loop.

        Args:
            payload: Validated job payload including the mode discriminator.

        Returns:
            Job: Accepted job.

        Raises:
            SnapshotWriteError: Raised when the job could not be persisted; it is not queued.
        """

        job = Job(job_id=job_new_id(), payload=dict(payload), enqueued_at=self._clock())
        await self._store.store_write(lambda snapshot: domain_snapshot_with_job_enqueued(snapshot, job))
        self._pending.append(job)
        logger.info("Job %s queued (mode=%s); queue length %d", job.job_id, job.mode, len(self._pending))
        self.queue_schedule_drain()
        return job

    def queue_schedule_drain(self) -> None:
        """Start the worker loop in the background unless it is running or idle."""

        if self._draining or not self._pending:
            return
        if self._drain_task is not None and not self._drain_task.done():
            return
        self._drain_task = asyncio.get_running_loop().create_task(self.queue_drain())

    async def queue_drain(self) -> None:
        """Process queued jobs in FIFO order until the queue is empty.

        Only one loop runs per instance; calling this while it runs is a no-op.

        Returns:
            None: Drains the queue as side effect.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        if self._draining or not self._pending:
            return

        self._draining = True
        try:
            while self._pending:
                await self._queue_wait_for_admission()
                job = self._pending.popleft()
                self._inflight = job
                try:
                    await self._queue_process(job)
                finally:
                    self._inflight = None
        finally:
            self._draining = False

    def queue_is_pending(self, job_id: str) -> bool:
        """Return whether the job is queued or currently executing."""

        if self._inflight is not None and self._inflight.job_id == job_id:
            return True
        return any(job.job_id == job_id for job in self._pending)

    async def queue_result_consume(self, job_id: str) -> JobResult | None:
        """Return a job result once and delete it from memory and the store.

        Falls back to the durable store when memory misses, which covers
        results written by an earlier process.

        Args:
            job_id: Job identifier.

        Returns:
            JobResult | None: Result on first read after resolution, otherwise None.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        if self.queue_is_pending(job_id):
            return None

        cached_result = self._results.pop(job_id, None)
        taken_results: list[JobResult] = []

        def _take_result(snapshot: Snapshot) -> Snapshot:
            stored_result = snapshot.results.get(job_id)
            if stored_result is None:
                return snapshot
            taken_results.append(stored_result)
            return domain_snapshot_without_results(snapshot, [job_id])

        try:
            await self._store.store_write(_take_result)
        except SnapshotWriteError:
            logger.exception("Cannot delete consumed result %s from the store", job_id)

        if cached_result is not None:
            return cached_result
        return taken_results[0] if taken_results else None

    async def queue_sweep_expired_results(self) -> list[str]:
        """Evict results older than the configured TTL from memory and the store.

        Returns:
            list[str]: Identifiers of evicted results.

        Raises:
            SnapshotWriteError: Raised when the store eviction could not be committed.
        """

        cutoff = self._clock() - timedelta(seconds=self._config.result_ttl_seconds)
        evicted_ids: set[str] = set()

        def _evict_expired(snapshot: Snapshot) -> Snapshot:
            stored_expired_ids = domain_expired_result_ids(snapshot.results, cutoff)
            evicted_ids.update(stored_expired_ids)
            return domain_snapshot_without_results(snapshot, stored_expired_ids)

        # Memory is only trimmed once the store no longer holds the expired results.
        await self._store.store_write(_evict_expired)
        evicted_ids.update(domain_expired_result_ids(self._results, cutoff))
        for job_id in evicted_ids:
            self._results.pop(job_id, None)
        if evicted_ids:
            logger.info("Evicted %d expired results", len(evicted_ids))
        return sorted(evicted_ids)

    async def _queue_sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self._config.sweep_interval_seconds)
            try:
                await self.queue_sweep_expired_results()
            except SnapshotWriteError:
                logger.exception("Result TTL sweep failed")

    async def _queue_wait_for_admission(self) -> None:
        while True:
            try:
                if self._admission.admission_may_proceed():
                    return
            except RuntimeError:
                logger.warning("Admission sample failed; proceeding without CPU gate", exc_info=True)
                return
            await self._sleep(self._config.admission_poll_interval_seconds)

    async def _queue_process(self, job: Job) -> None:
        logger.info("Processing job %s (mode=%s); %d left in queue", job.job_id, job.mode, len(self._pending))
        try:
            await self._store.store_write(lambda snapshot: domain_snapshot_with_job_started(snapshot, job))
        except SnapshotWriteError:
            logger.exception("Cannot persist start of job %s", job.job_id)

        result = await job_execute_with_retry(
            job=job,
            executor=self._executor,
            admission=self._admission,
            queue_length_provider=self.queue_length,
            max_attempts=self._config.max_attempts,
            delay_seconds=self._config.retry_delay_seconds,
            sleep=self._sleep,
            clock=self._clock,
        )

        self._results[job.job_id] = result
        try:
            await self._store.store_write(lambda snapshot: domain_snapshot_with_result_recorded(snapshot, result))
        except SnapshotWriteError:
            logger.exception("Cannot persist result of job %s", job.job_id)
        logger.info("Job %s finished: success=%s code=%d", job.job_id, result.success, result.code)
