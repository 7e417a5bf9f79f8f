"""Refresh loop, snapshot state and artifact storage for ledradar.

Background refresh can be run via:
    python -m ledradar.cache.refresh
"""

from ledradar.cache.artifacts import ArtifactStore, PersistError
from ledradar.cache.refresh import (
    CycleResult,
    CycleStatus,
    RefreshCycle,
    RefreshScheduler,
    get_status,
    time_bucket,
)
from ledradar.cache.state import SnapshotStore

__all__ = [
    "ArtifactStore",
    "CycleResult",
    "CycleStatus",
    "PersistError",
    "RefreshCycle",
    "RefreshScheduler",
    "SnapshotStore",
    "get_status",
    "time_bucket",
]
