"""Current snapshot shared between the refresh thread and readers."""

import threading

from ledradar.radar.models import EMPTY_SNAPSHOT, Snapshot


class SnapshotStore:
    """Holds the last published Snapshot.

    Snapshots are immutable, so the lock only guards the reference swap.
    Readers get either the old or the new snapshot in full.

    Example:
        >>> store = SnapshotStore()
        >>> store.publish(Snapshot(points=(), bucket="20240501.1230"))
        >>> store.current().bucket
        '20240501.1230'
    """

    def __init__(self, initial: Snapshot = EMPTY_SNAPSHOT):
        self._lock = threading.Lock()
        self._snapshot = initial

    def publish(self, snapshot: Snapshot) -> None:
        """Replace the current snapshot."""
        if not isinstance(snapshot, Snapshot):
            raise TypeError(f"Expected Snapshot, got {type(snapshot).__name__}")
        with self._lock:
            self._snapshot = snapshot

    def current(self) -> Snapshot:
        """Return the current snapshot."""
        with self._lock:
            return self._snapshot
