"""Domain models used across application layer boundaries."""

from .models import (
    SNAPSHOT_SCHEMA_VERSION,
    AdmissionStats,
    ExecutorOutcome,
    Job,
    JobResult,
    Snapshot,
    SnapshotMeta,
)
from .snapshot import (
    domain_expired_result_ids,
    domain_snapshot_contains_job,
    domain_snapshot_from_document,
    domain_snapshot_requeue_inflight,
    domain_snapshot_to_document,
    domain_snapshot_with_job_enqueued,
    domain_snapshot_with_job_started,
    domain_snapshot_with_result_recorded,
    domain_snapshot_without_results,
)

__all__ = [
    "SNAPSHOT_SCHEMA_VERSION",
    "AdmissionStats",
    "ExecutorOutcome",
    "Job",
    "JobResult",
    "Snapshot",
    "SnapshotMeta",
    "domain_expired_result_ids",
    "domain_snapshot_contains_job",
    "domain_snapshot_from_document",
    "domain_snapshot_requeue_inflight",
    "domain_snapshot_to_document",
    "domain_snapshot_with_job_enqueued",
    "domain_snapshot_with_job_started",
    "domain_snapshot_with_result_recorded",
    "domain_snapshot_without_results",
]
