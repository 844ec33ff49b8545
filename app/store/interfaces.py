"""Typed interfaces for the durable snapshot store.

All snapshot file access must remain in the store package and its submodules.
"""

from typing import Callable, Protocol

from app.domain import Snapshot

SnapshotMutator = Callable[[Snapshot], Snapshot]


class SnapshotCorruptionError(ValueError):
    """Raised when persisted snapshot bytes cannot be decoded into a snapshot."""


class SnapshotWriteError(RuntimeError):
    """Raised when a serialized snapshot write could not be committed.

    The canonical snapshot is left untouched and later writes are not blocked.
    """


class DurableStorePort(Protocol):
    """Port definition for crash-safe snapshot persistence."""

    def store_location_label(self) -> str:
        """Return a stable label for the snapshot location.

        Returns:
            str: Snapshot location for diagnostics.

        Raises:
            RuntimeError: Raised when location metadata is unavailable.
        """

    async def store_read(self) -> Snapshot:
        """Read the committed snapshot, initializing or resetting it when needed.

        Returns:
            Snapshot: Last committed snapshot.

        Raises:
            SnapshotWriteError: Raised when a default snapshot cannot be persisted.
        """

    async def store_write(self, mutator: SnapshotMutator) -> Snapshot:
        """Apply one mutation to the committed snapshot and persist it atomically.

        Args:
            mutator: Pure function deriving the next snapshot from the current one.

        Returns:
            Snapshot: Newly committed snapshot.

        Raises:
            SnapshotWriteError: Raised when the mutator or the disk write fails.
        """
