"""Typed domain models shared across runtime layers.

This module provides the data contracts passed between the queue, the store,
the admission controller and the HTTP surface.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


SNAPSHOT_SCHEMA_VERSION = 1


@dataclass(frozen=True)
class Job:
    """Unit of submitted work awaiting execution.

    Attributes:
        job_id: Opaque unique identifier.
        payload: Executor-defined payload including the `mode` discriminator.
        enqueued_at: UTC timestamp of acceptance.
    """

    job_id: str
    payload: dict[str, object]
    enqueued_at: datetime

    @property
    def mode(self) -> str:
        """Return the executor mode discriminator of this job."""

        return str(self.payload.get("mode", ""))


@dataclass(frozen=True)
class AdmissionStats:
    """Point-in-time resource usage sample.

    Attributes:
        cpu_fraction: Process CPU usage normalized by configured core count, 0..1.
        cpu_percent: Raw process CPU percent as reported by the stat source.
        memory_bytes: Resident memory of the process.
    """

    cpu_fraction: float
    cpu_percent: float
    memory_bytes: int

    @property
    def cpu_available(self) -> float:
        """Return the unused share of the configured CPU budget."""

        return max(0.0, 1.0 - self.cpu_fraction)

    @property
    def memory_gb(self) -> float:
        """Return resident memory in gigabytes rounded to two decimals."""

        return round(self.memory_bytes / (1024**3), 2)


@dataclass(frozen=True)
class ExecutorOutcome:
    """Tagged outcome of a single executor attempt.

    Attributes:
        code: Status code; 500 marks a retryable failure.
        payload: Executor-defined result fields on success.
        message: Failure detail when the attempt did not succeed.
    """

    code: int
    payload: dict[str, object] = field(default_factory=dict)
    message: str | None = None

    @property
    def failed(self) -> bool:
        """Return whether this outcome should be retried."""

        return self.code == 500


@dataclass(frozen=True)
class JobResult:
    """Terminal outcome of one job.

    Attributes:
        job_id: Identifier of the job this result belongs to.
        success: Whether an attempt completed without a failure outcome.
        code: Status code reported to the caller.
        payload: Executor-defined result fields.
        message: Human-readable detail, set when the job was given up.
        finished_at: UTC completion timestamp used for TTL eviction.
        attempts: Number of executor invocations spent on the job.
        queue_length: Pending queue length observed at completion.
        stats: Admission sample observed at completion.
    """

    job_id: str
    success: bool
    code: int
    payload: dict[str, object]
    message: str | None
    finished_at: datetime
    attempts: int
    queue_length: int
    stats: AdmissionStats | None = None


@dataclass(frozen=True)
class SnapshotMeta:
    """Snapshot metadata stamped on every durable write."""

    version: int = SNAPSHOT_SCHEMA_VERSION
    last_write_at: datetime | None = None


@dataclass(frozen=True)
class Snapshot:
    """Complete durable state of the queue.

    Attributes:
        queue: Pending jobs in FIFO order.
        inflight: Jobs popped from the queue whose result is not yet recorded.
        results: Terminal results keyed by job id.
        meta: Schema version and last write timestamp.
    """

    queue: tuple[Job, ...] = ()
    inflight: tuple[Job, ...] = ()
    results: dict[str, JobResult] = field(default_factory=dict)
    meta: SnapshotMeta = field(default_factory=SnapshotMeta)

