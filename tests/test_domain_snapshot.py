"""Regression tests for snapshot transitions and JSON document mapping."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.domain import (
    AdmissionStats,
    Job,
    JobResult,
    Snapshot,
    domain_expired_result_ids,
    domain_snapshot_from_document,
    domain_snapshot_requeue_inflight,
    domain_snapshot_to_document,
    domain_snapshot_with_job_enqueued,
    domain_snapshot_with_job_started,
    domain_snapshot_with_result_recorded,
    domain_snapshot_without_results,
)

_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _build_job(job_id: str) -> Job:
    return Job(job_id=job_id, payload={"mode": "source", "url": f"https://example.com/{job_id}"}, enqueued_at=_NOW)


def _build_result(job_id: str, finished_at: datetime = _NOW) -> JobResult:
    return JobResult(
        job_id=job_id,
        success=True,
        code=200,
        payload={"source": "<html></html>"},
        message=None,
        finished_at=finished_at,
        attempts=1,
        queue_length=0,
        stats=AdmissionStats(cpu_fraction=0.1, cpu_percent=80.0, memory_bytes=1024),
    )


def test_domain_snapshot_job_moves_from_queue_to_inflight_to_results() -> None:
    """Keep a job in exactly one of queue, in-flight and results across its lifecycle.

    Returns:
        None: Assertions validate transition behavior.

    Raises:
        AssertionError: Raised when a job is duplicated or lost.
    """

    first_job = _build_job("a")
    second_job = _build_job("b")

    snapshot = domain_snapshot_with_job_enqueued(Snapshot(), first_job)
    snapshot = domain_snapshot_with_job_enqueued(snapshot, second_job)
    assert [job.job_id for job in snapshot.queue] == ["a", "b"]

    snapshot = domain_snapshot_with_job_started(snapshot, first_job)
    assert [job.job_id for job in snapshot.queue] == ["b"]
    assert [job.job_id for job in snapshot.inflight] == ["a"]

    snapshot = domain_snapshot_with_result_recorded(snapshot, _build_result("a"))
    assert snapshot.inflight == ()
    assert list(snapshot.results) == ["a"]
    assert [job.job_id for job in snapshot.queue] == ["b"]


def test_domain_snapshot_enqueue_ignores_known_job_id() -> None:
    """Return the same snapshot object when a job id is already present.

    Returns:
        None: Assertions validate duplicate suppression.

    Raises:
        AssertionError: Raised when a duplicate is appended.
    """

    job = _build_job("a")
    snapshot = domain_snapshot_with_job_enqueued(Snapshot(), job)

    assert domain_snapshot_with_job_enqueued(snapshot, job) is snapshot


def test_domain_snapshot_requeue_inflight_puts_jobs_at_queue_head() -> None:
    """Replay interrupted jobs before jobs that were still waiting.

    Returns:
        None: Assertions validate replay ordering.

    Raises:
        AssertionError: Raised when replay order is wrong.
    """

    snapshot = Snapshot(queue=(_build_job("b"), _build_job("c")), inflight=(_build_job("a"),))

    replayed = domain_snapshot_requeue_inflight(snapshot)

    assert [job.job_id for job in replayed.queue] == ["a", "b", "c"]
    assert replayed.inflight == ()
    assert domain_snapshot_requeue_inflight(replayed) is replayed


def test_domain_expired_result_ids_uses_strict_cutoff() -> None:
    """Select only results finished before the cutoff.

    Returns:
        None: Assertions validate TTL selection.

    Raises:
        AssertionError: Raised when selection is wrong.
    """

    results = {
        "old": _build_result("old", finished_at=_NOW - timedelta(minutes=20)),
        "fresh": _build_result("fresh", finished_at=_NOW - timedelta(minutes=5)),
    }

    expired_ids = domain_expired_result_ids(results, cutoff=_NOW - timedelta(minutes=15))
    snapshot = domain_snapshot_without_results(Snapshot(results=results), expired_ids)

    assert expired_ids == ["old"]
    assert list(snapshot.results) == ["fresh"]


def test_domain_snapshot_document_preserves_queue_order_and_results() -> None:
    """Parse a serialized snapshot back into equal jobs and results.

    Returns:
        None: Assertions validate document mapping.

    Raises:
        AssertionError: Raised when fields are lost.
    """

    snapshot = Snapshot(
        queue=(_build_job("b"), _build_job("c")),
        inflight=(_build_job("a"),),
        results={"z": _build_result("z")},
    )

    document = domain_snapshot_to_document(snapshot)
    parsed = domain_snapshot_from_document(document)

    assert document["queue"][0]["id"] == "b"
    assert document["results"]["z"]["finishedAt"] == _NOW.isoformat()
    assert parsed.queue == snapshot.queue
    assert parsed.inflight == snapshot.inflight
    assert parsed.results == snapshot.results


@pytest.mark.parametrize(
    "document",
    [
        [],
        {"queue": [{"id": "a"}]},
        {"queue": [{"id": "a", "payload": "x", "enqueuedAt": _NOW.isoformat()}]},
        {"results": []},
        {"results": {"a": {"jobId": "a", "success": True, "code": 200, "finishedAt": "not-a-date"}}},
        {"meta": "broken"},
        {"meta": {"version": float("inf")}},
    ],
)
def test_domain_snapshot_from_document_rejects_malformed_shapes(document: object) -> None:
    """Raise ValueError for documents that do not match the snapshot shape.

    Args:
        document: Malformed decoded JSON value.

    Returns:
        None: Assertions validate rejection.

    Raises:
        AssertionError: Raised when a malformed document is accepted.
    """

    with pytest.raises(ValueError):
        domain_snapshot_from_document(document)
