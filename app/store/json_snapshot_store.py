"""JSON file snapshot store with serialized, crash-safe writes."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from app.domain import (
    SNAPSHOT_SCHEMA_VERSION,
    Snapshot,
    SnapshotMeta,
    domain_snapshot_from_document,
    domain_snapshot_to_document,
)

from .interfaces import DurableStorePort, SnapshotCorruptionError, SnapshotMutator, SnapshotWriteError

logger = logging.getLogger(__name__)


class JsonSnapshotStore(DurableStorePort):
    """Durable store keeping the whole queue state in one JSON file.

    Reads and writes share one asyncio lock, so every write observes the state
    committed by the write before it and waiters are served in arrival order.
    File I/O runs in a worker thread to keep the event loop responsive.
    """

    def __init__(self, snapshot_path: str | Path, clock: Callable[[], datetime] | None = None):
        """Initialize snapshot store.

        Args:
            snapshot_path: Canonical snapshot file location.
            clock: Optional provider of the current UTC time.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when the snapshot path is blank.
        """

        if not str(snapshot_path).strip():
            raise ValueError("snapshot_path must not be blank")

        self._path = Path(snapshot_path)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = asyncio.Lock()

    def store_location_label(self) -> str:
        """Return the canonical snapshot path.

        Returns:
            str: Snapshot file path.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return str(self._path)

    async def store_read(self) -> Snapshot:
        """Read the committed snapshot, creating or resetting the file when needed.

        Returns:
            Snapshot: Last committed snapshot.

        Raises:
            SnapshotWriteError: Raised when the file cannot be read or a default snapshot cannot be persisted.
        """

        async with self._lock:
            return await asyncio.to_thread(self._store_load_or_initialize)

    async def store_write(self, mutator: SnapshotMutator) -> Snapshot:
        """Apply one mutation to the committed snapshot and persist it atomically.

        Args:
            mutator: Pure function deriving the next snapshot from the current one.

        Returns:
            Snapshot: Newly committed snapshot; a mutator returning its input skips the disk write.

        Raises:
            SnapshotWriteError: Raised when the mutator or the disk write fails.
        """

        async with self._lock:
            current_snapshot = await asyncio.to_thread(self._store_load_or_initialize)
            try:
                next_snapshot = mutator(current_snapshot)
            except Exception as error:
                logger.exception("Snapshot mutator failed; committed snapshot left unchanged")
                raise SnapshotWriteError("snapshot mutator failed") from error

            if next_snapshot is current_snapshot:
                return current_snapshot

            stamped_snapshot = self._store_stamp(next_snapshot)
            await asyncio.to_thread(self._store_commit, stamped_snapshot)
            return stamped_snapshot

    def _store_load_or_initialize(self) -> Snapshot:
        if not self._path.exists():
            logger.info("Snapshot %s not found; initializing empty snapshot", self._path)
            return self._store_commit_default()

        try:
            raw_bytes = self._path.read_bytes()
        except OSError as error:
            raise SnapshotWriteError(f"cannot read snapshot {self._path}") from error

        try:
            return self._store_decode(raw_bytes)
        except SnapshotCorruptionError as error:
            backup_path = self._store_backup_corrupt_file()
            logger.error(
                "Snapshot %s is corrupt (%s); moved to %s and reset to an empty snapshot",
                self._path,
                error,
                backup_path,
            )
            return self._store_commit_default()

    def _store_commit_default(self) -> Snapshot:
        default_snapshot = self._store_stamp(Snapshot())
        self._store_commit(default_snapshot)
        return default_snapshot

    def _store_stamp(self, snapshot: Snapshot) -> Snapshot:
        return replace(snapshot, meta=SnapshotMeta(version=SNAPSHOT_SCHEMA_VERSION, last_write_at=self._clock()))

    @staticmethod
    def _store_decode(raw_bytes: bytes) -> Snapshot:
        try:
            document = json.loads(raw_bytes.decode("utf-8"))
            return domain_snapshot_from_document(document)
        except (ValueError, OverflowError, RecursionError) as error:
            raise SnapshotCorruptionError(str(error) or error.__class__.__name__) from error

    def _store_commit(self, snapshot: Snapshot) -> None:
        try:
            serialized = json.dumps(domain_snapshot_to_document(snapshot), ensure_ascii=False, indent=2)
        except (TypeError, ValueError) as error:
            raise SnapshotWriteError(f"snapshot is not JSON serializable: {error}") from error

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            file_descriptor, temporary_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                dir=self._path.parent,
            )
        except OSError as error:
            raise SnapshotWriteError(f"cannot create temporary snapshot next to {self._path}") from error

        temporary_path = Path(temporary_name)
        try:
            with os.fdopen(file_descriptor, "w", encoding="utf-8") as handle:
                handle.write(serialized)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temporary_path, self._path)
        except OSError as error:
            raise SnapshotWriteError(f"cannot commit snapshot to {self._path}") from error
        finally:
            if temporary_path.exists():
                temporary_path.unlink()

    def _store_backup_corrupt_file(self) -> Path:
        timestamp_ms = int(self._clock().timestamp() * 1000)
        backup_path = self._path.with_name(f"{self._path.name}.bak-{timestamp_ms}")
        collision_index = 0
        while backup_path.exists():
            collision_index += 1
            backup_path = self._path.with_name(f"{self._path.name}.bak-{timestamp_ms}-{collision_index}")
        try:
            self._path.rename(backup_path)
        except OSError as error:
            raise SnapshotWriteError(f"cannot move corrupt snapshot {self._path} aside") from error
        return backup_path
