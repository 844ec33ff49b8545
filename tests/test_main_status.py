"""Tests for the operator status summary printed by the `status` command."""

from datetime import datetime, timezone

from app.domain import Job, Snapshot, SnapshotMeta
from app.main import main_summarize_snapshot

_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_main_summarize_snapshot_reports_counters() -> None:
    """Validate snapshot summary counters and next job id.

    Returns:
        None: Assertions validate summary payload.

    Raises:
        AssertionError: Raised when summary values differ from snapshot contents.
    """

    snapshot = Snapshot(
        queue=(Job(job_id="2-b", payload={"mode": "source"}, enqueued_at=_NOW),),
        inflight=(Job(job_id="1-a", payload={"mode": "source"}, enqueued_at=_NOW),),
        meta=SnapshotMeta(version=1, last_write_at=_NOW),
    )

    summary = main_summarize_snapshot(snapshot)

    assert summary == {
        "version": 1,
        "lastWriteAt": _NOW.isoformat(),
        "queueLength": 1,
        "inflight": ["1-a"],
        "resultCount": 0,
        "nextJobId": "2-b",
    }


def test_main_summarize_snapshot_handles_empty_store() -> None:
    """Validate summary of a freshly initialized snapshot.

    Returns:
        None: Assertions validate empty summary payload.

    Raises:
        AssertionError: Raised when empty snapshot summary is wrong.
    """

    summary = main_summarize_snapshot(Snapshot())

    assert summary["queueLength"] == 0
    assert summary["nextJobId"] is None
    assert summary["lastWriteAt"] is None
