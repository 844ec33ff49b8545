"""Store layer package for durable queue snapshot persistence."""

from .interfaces import DurableStorePort, SnapshotCorruptionError, SnapshotMutator, SnapshotWriteError
from .json_snapshot_store import JsonSnapshotStore

__all__ = [
    "DurableStorePort",
    "JsonSnapshotStore",
    "SnapshotCorruptionError",
    "SnapshotMutator",
    "SnapshotWriteError",
]
