"""Pure snapshot transitions and JSON document mapping.

Every durable mutation of queue state is expressed as one of the transition
helpers below so the store can apply it to whatever state the previous write
left behind.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable

from .models import SNAPSHOT_SCHEMA_VERSION, AdmissionStats, Job, JobResult, Snapshot, SnapshotMeta


def domain_snapshot_with_job_enqueued(snapshot: Snapshot, job: Job) -> Snapshot:
    """Append one job to the tail of the persisted queue.

    Args:
        snapshot: Current snapshot.
        job: Newly accepted job.

    Returns:
        Snapshot: Snapshot with the job appended; unchanged when the id is already known.
    """

    if domain_snapshot_contains_job(snapshot, job.job_id):
        return snapshot
    return replace(snapshot, queue=snapshot.queue + (job,))


def domain_snapshot_with_job_started(snapshot: Snapshot, job: Job) -> Snapshot:
    """Move one job from the queue to the in-flight list.

    Args:
        snapshot: Current snapshot.
        job: Job popped by the worker loop.

    Returns:
        Snapshot: Snapshot without the job in `queue` and with it in `inflight`.
    """

    remaining_queue = tuple(queued for queued in snapshot.queue if queued.job_id != job.job_id)
    inflight = tuple(started for started in snapshot.inflight if started.job_id != job.job_id) + (job,)
    return replace(snapshot, queue=remaining_queue, inflight=inflight)


def domain_snapshot_with_result_recorded(snapshot: Snapshot, result: JobResult) -> Snapshot:
    """Resolve an in-flight job into a stored result.

    Args:
        snapshot: Current snapshot.
        result: Terminal job result.

    Returns:
        Snapshot: Snapshot holding the result and no queued or in-flight copy of the job.
    """

    results = dict(snapshot.results)
    results[result.job_id] = result
    return replace(
        snapshot,
        queue=tuple(queued for queued in snapshot.queue if queued.job_id != result.job_id),
        inflight=tuple(started for started in snapshot.inflight if started.job_id != result.job_id),
        results=results,
    )


def domain_snapshot_without_results(snapshot: Snapshot, job_ids: Iterable[str]) -> Snapshot:
    """Drop the given results from the snapshot.

    Args:
        snapshot: Current snapshot.
        job_ids: Result identifiers to remove; unknown ids are ignored.

    Returns:
        Snapshot: Snapshot without the given results.
    """

    removed_ids = set(job_ids)
    if not removed_ids.intersection(snapshot.results):
        return snapshot
    results = {job_id: result for job_id, result in snapshot.results.items() if job_id not in removed_ids}
    return replace(snapshot, results=results)


def domain_snapshot_requeue_inflight(snapshot: Snapshot) -> Snapshot:
    """Put in-flight jobs back at the head of the queue in their original order.

    Args:
        snapshot: Snapshot loaded at boot.

    Returns:
        Snapshot: Snapshot with an empty in-flight list.
    """

    if not snapshot.inflight:
        return snapshot
    inflight_ids = {job.job_id for job in snapshot.inflight}
    remaining_queue = tuple(job for job in snapshot.queue if job.job_id not in inflight_ids)
    return replace(snapshot, queue=snapshot.inflight + remaining_queue, inflight=())


def domain_snapshot_contains_job(snapshot: Snapshot, job_id: str) -> bool:
    """Return whether the job id is queued, in flight or resolved."""

    return (
        any(job.job_id == job_id for job in snapshot.queue)
        or any(job.job_id == job_id for job in snapshot.inflight)
        or job_id in snapshot.results
    )


def domain_expired_result_ids(results: dict[str, JobResult], cutoff: datetime) -> list[str]:
    """Return ids of results finished strictly before the cutoff.

    Args:
        results: Results keyed by job id.
        cutoff: Oldest `finished_at` that is still retained.

    Returns:
        list[str]: Expired result identifiers.
    """

    return [job_id for job_id, result in results.items() if result.finished_at < cutoff]


def domain_snapshot_to_document(snapshot: Snapshot) -> dict[str, object]:
    """Serialize a snapshot to its JSON document shape.

    Args:
        snapshot: Snapshot to serialize.

    Returns:
        dict[str, object]: JSON-serializable document.
    """

    return {
        "queue": [_job_to_document(job) for job in snapshot.queue],
        "inflight": [_job_to_document(job) for job in snapshot.inflight],
        "results": {job_id: _result_to_document(result) for job_id, result in snapshot.results.items()},
        "meta": {
            "version": snapshot.meta.version,
            "lastWriteAt": _datetime_to_text(snapshot.meta.last_write_at),
        },
    }


def domain_snapshot_from_document(document: object) -> Snapshot:
    """Parse a JSON document into a snapshot.

    Args:
        document: Decoded JSON value.

    Returns:
        Snapshot: Parsed snapshot.

    Raises:
        ValueError: Raised when the document does not match the snapshot shape.
    """

    if not isinstance(document, dict):
        raise ValueError("snapshot document must be a JSON object")

    try:
        queue = tuple(_job_from_document(item) for item in document.get("queue", []))
        inflight = tuple(_job_from_document(item) for item in document.get("inflight", []))
        raw_results = document.get("results", {})
        if not isinstance(raw_results, dict):
            raise ValueError("snapshot results must be an object")
        results = {str(job_id): _result_from_document(item) for job_id, item in raw_results.items()}
        raw_meta = document.get("meta", {})
        if not isinstance(raw_meta, dict):
            raise ValueError("snapshot meta must be an object")
        meta = SnapshotMeta(
            version=int(raw_meta.get("version", SNAPSHOT_SCHEMA_VERSION)),
            last_write_at=_datetime_from_text(raw_meta.get("lastWriteAt")),
        )
    except (KeyError, TypeError, AttributeError, OverflowError) as error:
        raise ValueError(f"snapshot document is malformed: {error!r}") from error

    return Snapshot(queue=queue, inflight=inflight, results=results, meta=meta)


def _job_to_document(job: Job) -> dict[str, object]:
    return {
        "id": job.job_id,
        "payload": job.payload,
        "enqueuedAt": _datetime_to_text(job.enqueued_at),
    }


def _job_from_document(item: dict) -> Job:
    payload = item["payload"]
    if not isinstance(payload, dict):
        raise ValueError("job payload must be an object")
    return Job(
        job_id=str(item["id"]),
        payload=payload,
        enqueued_at=_datetime_required(item["enqueuedAt"]),
    )


def _result_to_document(result: JobResult) -> dict[str, object]:
    return {
        "jobId": result.job_id,
        "success": result.success,
        "code": result.code,
        "payload": result.payload,
        "message": result.message,
        "finishedAt": _datetime_to_text(result.finished_at),
        "attempts": result.attempts,
        "queueLength": result.queue_length,
        "stats": None
        if result.stats is None
        else {
            "cpuFraction": result.stats.cpu_fraction,
            "cpuPercent": result.stats.cpu_percent,
            "memoryBytes": result.stats.memory_bytes,
        },
    }


def _result_from_document(item: dict) -> JobResult:
    raw_stats = item.get("stats")
    stats = None
    if raw_stats is not None:
        stats = AdmissionStats(
            cpu_fraction=float(raw_stats["cpuFraction"]),
            cpu_percent=float(raw_stats["cpuPercent"]),
            memory_bytes=int(raw_stats["memoryBytes"]),
        )
    payload = item.get("payload") or {}
    if not isinstance(payload, dict):
        raise ValueError("result payload must be an object")
    return JobResult(
        job_id=str(item["jobId"]),
        success=bool(item["success"]),
        code=int(item["code"]),
        payload=payload,
        message=item.get("message"),
        finished_at=_datetime_required(item["finishedAt"]),
        attempts=int(item.get("attempts", 0)),
        queue_length=int(item.get("queueLength", 0)),
        stats=stats,
    )


def _datetime_to_text(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _datetime_from_text(value: object) -> datetime | None:
    if value is None:
        return None
    parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _datetime_required(value: object) -> datetime:
    parsed = _datetime_from_text(value)
    if parsed is None:
        raise ValueError("timestamp must not be null")
    return parsed
