"""Periodic radar refresh.

One cycle: sweep old artifacts, work out the current 10-minute bucket,
skip if that bucket was already processed, otherwise download the radar
image, classify every point, save the annotated image and publish the
raining points.

Usage:
    python -m ledradar.cache.refresh --once     # Run a single cycle
    python -m ledradar.cache.refresh --status   # Show artifact status
    python -m ledradar.cache.refresh            # Refresh every minute until interrupted
"""

import argparse
import logging
import sys
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Sequence

from ledradar.cache.artifacts import ArtifactStore, PersistError
from ledradar.cache.state import SnapshotStore
from ledradar.config import (
    ARTIFACT_RETENTION,
    BUCKET_MINUTES,
    REFRESH_INTERVAL_SECONDS,
    Settings,
)
from ledradar.radar.models import GeoPoint, ObservedPoint, Raster, Snapshot
from ledradar.radar.points import load_points
from ledradar.radar.sampler import (
    OutOfBoundsPoint,
    annotate,
    is_raining,
    rgb_swatch,
    sample,
)
from ledradar.radar.source import DecodeError, FetchError, RadarSource
from ledradar.utils.geo import RADAR_BOUNDS, BoundingBox, project

logger = logging.getLogger(__name__)

BUCKET_FORMAT = "%Y%m%d.%H%M"


def time_bucket(now: datetime, minutes: int = BUCKET_MINUTES) -> str:
    """Truncate a time to the previous bucket boundary and format it.

    Naive datetimes are taken as UTC.

    Example:
        >>> time_bucket(datetime(2024, 5, 1, 12, 37, 59))
        '20240501.1230'
    """
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    truncated = now.replace(
        minute=now.minute - now.minute % minutes,
        second=0,
        microsecond=0,
    )
    return truncated.strftime(BUCKET_FORMAT)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CycleStatus(str, Enum):
    SKIPPED = "skipped"
    PUBLISHED = "published"
    FETCH_FAILED = "fetch_failed"
    DECODE_FAILED = "decode_failed"


@dataclass
class CycleResult:
    """Outcome of one refresh cycle."""

    status: CycleStatus
    bucket: str
    raining: int = 0
    clear: int = 0
    out_of_bounds: int = 0
    persisted: bool = False
    swept: int = 0
    duration_ms: int = 0
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.status in (CycleStatus.FETCH_FAILED, CycleStatus.DECODE_FAILED)

    def __str__(self) -> str:
        if self.status is CycleStatus.PUBLISHED:
            return (
                f"Refresh {self.bucket} published: {self.raining} raining, "
                f"{self.clear} clear, {self.out_of_bounds} out of bounds, "
                f"persisted={self.persisted} ({self.duration_ms}ms)"
            )
        if self.status is CycleStatus.SKIPPED:
            return f"Refresh {self.bucket} skipped: already processed ({self.duration_ms}ms)"
        return f"Refresh {self.bucket} {self.status.value}: {self.error} ({self.duration_ms}ms)"


class RefreshCycle:
    """Single-flight refresh of the raining-points snapshot.

    Not re-entrant: run it from one thread only (see RefreshScheduler).

    Example:
        >>> cycle = RefreshCycle(load_points(), SnapshotStore(), ArtifactStore())
        >>> result = cycle.run_once()
        >>> print(result)
    """

    def __init__(
        self,
        points: Sequence[GeoPoint],
        store: SnapshotStore,
        artifacts: ArtifactStore,
        source: Optional[RadarSource] = None,
        bounds: BoundingBox = RADAR_BOUNDS,
        retention: timedelta = ARTIFACT_RETENTION,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize cycle.

        Args:
            points: Places to classify, read-only
            store: Snapshot store to publish into
            artifacts: Store for annotated images
            source: Radar image source (defaults to the CHMI HTTP source)
            bounds: Geographic extent of the radar image
            retention: Age after which artifacts are swept
            clock: Returns the current time; used for the bucket
        """
        self.points = tuple(points)
        self.store = store
        self.artifacts = artifacts
        self.source = source or RadarSource()
        self.bounds = bounds
        self.retention = retention
        self.clock = clock
        self.last_result: Optional[CycleResult] = None
        self._last_published_bucket: Optional[str] = None

        outside = [p.name for p in self.points if not bounds.contains(p.lat, p.lon)]
        if outside:
            logger.warning(
                f"{len(outside)} points lie outside the radar image: {', '.join(outside)}"
            )

    def run_once(self) -> CycleResult:
        """Run one full cycle and return its outcome.

        Fetch and decode failures leave the current snapshot untouched.
        """
        start_time = time.time()
        logger.info("Starting refresh cycle")

        swept = len(self.artifacts.sweep(self.retention))
        bucket = time_bucket(self.clock())

        if bucket == self._last_published_bucket or self.artifacts.exists(bucket):
            logger.info(f"Bucket {bucket} already exists")
            return self._finish(
                CycleResult(status=CycleStatus.SKIPPED, bucket=bucket, swept=swept),
                start_time,
            )

        try:
            content = self.source.fetch(bucket)
        except FetchError as e:
            logger.warning(f"Cannot download radar data, skipping: {e}")
            return self._finish(
                CycleResult(
                    status=CycleStatus.FETCH_FAILED, bucket=bucket, swept=swept, error=str(e)
                ),
                start_time,
            )

        try:
            raster = self.source.decode(content)
        except DecodeError as e:
            logger.error(f"Cannot decode radar image, skipping: {e}")
            return self._finish(
                CycleResult(
                    status=CycleStatus.DECODE_FAILED, bucket=bucket, swept=swept, error=str(e)
                ),
                start_time,
            )

        observed, clear, out_of_bounds = self.classify(raster)

        persisted = True
        try:
            self.artifacts.save(bucket, raster)
        except PersistError as e:
            logger.error(f"Publishing without artifact: {e}")
            persisted = False

        self.store.publish(
            Snapshot(points=tuple(observed), bucket=bucket, generated_at=self.clock())
        )
        self._last_published_bucket = bucket

        return self._finish(
            CycleResult(
                status=CycleStatus.PUBLISHED,
                bucket=bucket,
                raining=len(observed),
                clear=clear,
                out_of_bounds=out_of_bounds,
                persisted=persisted,
                swept=swept,
            ),
            start_time,
        )

    def classify(self, raster: Raster) -> tuple[list[ObservedPoint], int, int]:
        """Sample and mark every point on the raster.

        The raster is annotated in place.

        Returns:
            Tuple of (raining points, clear count, out-of-bounds count)
        """
        observed = []
        clear = 0
        out_of_bounds = 0

        for point in self.points:
            x, y = project(point.lat, point.lon, self.bounds, raster.width, raster.height)
            try:
                color = sample(raster, x, y)
            except OutOfBoundsPoint as e:
                logger.warning(f"Skipping {point.name} ({point.id}): {e}")
                out_of_bounds += 1
                continue

            raining = is_raining(color)
            annotate(raster, x, y, raining, color)

            if raining:
                r, g, b = color
                logger.info(
                    f"It's raining in {point.name} ({point.id}) "
                    f"{rgb_swatch(r, g, b)}  R={r} G={g} B={b}"
                )
                observed.append(ObservedPoint(point=point, r=r, g=g, b=b))
            else:
                clear += 1

        if not observed:
            logger.info("It looks like it's not raining!")

        return observed, clear, out_of_bounds

    def _finish(self, result: CycleResult, start_time: float) -> CycleResult:
        result.duration_ms = int((time.time() - start_time) * 1000)
        self.last_result = result
        logger.info(str(result))
        return result


class RefreshScheduler:
    """Runs a RefreshCycle on a background thread at a fixed interval.

    The cycle runs, then the thread waits ``interval_seconds`` on its stop
    event, so ``stop`` interrupts the wait. Each thread gets its own stop
    event, and ticks are serialised by a lock, so a thread left finishing
    a tick after a timed-out ``stop`` never overlaps a restarted one.
    """

    def __init__(self, cycle: RefreshCycle, interval_seconds: float = REFRESH_INTERVAL_SECONDS):
        self.cycle = cycle
        self.interval_seconds = interval_seconds
        self._tick_lock = threading.Lock()
        self._stop: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and self._stop is not None
            and not self._stop.is_set()
        )

    def start(self) -> None:
        """Start the background thread. No-op if already running."""
        if self.is_running:
            return
        stop_event = threading.Event()
        self._stop = stop_event
        self._thread = threading.Thread(
            target=self._run, args=(stop_event,), name="ledradar-refresh", daemon=True
        )
        self._thread.start()
        logger.info(f"Refresh scheduler started (every {self.interval_seconds}s)")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the thread to stop and wait for the current tick to end."""
        if self._stop is not None:
            self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Refresh thread still finishing a tick, detaching it")
            self._thread = None
        logger.info("Refresh scheduler stopped")

    def tick(self) -> Optional[CycleResult]:
        """Run one cycle; unexpected errors are logged, not raised."""
        with self._tick_lock:
            return self._run_cycle()

    def _run_cycle(self) -> Optional[CycleResult]:
        try:
            return self.cycle.run_once()
        except Exception:
            logger.exception("Refresh cycle crashed")
            return None

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            with self._tick_lock:
                # stop may have been requested while waiting for the lock
                if stop_event.is_set():
                    break
                self._run_cycle()
            stop_event.wait(self.interval_seconds)


def get_status(cycle: RefreshCycle) -> dict:
    """Get current refresh status.

    Returns:
        Dict with point count, current snapshot and artifact info
    """
    snapshot = cycle.store.current()
    last = cycle.last_result
    return {
        "artifact_dir": str(cycle.artifacts.directory),
        "bounds": cycle.bounds.to_dict(),
        "points": len(cycle.points),
        "raining": len(snapshot),
        "snapshot_bucket": snapshot.bucket,
        "snapshot_time": snapshot.generated_at.isoformat() if snapshot.generated_at else None,
        "current_bucket": time_bucket(cycle.clock()),
        "artifacts": [p.name for p in cycle.artifacts.list_artifacts()],
        "last_result": str(last) if last else None,
    }


def print_status(status: dict) -> None:
    """Print refresh status in human-readable format."""
    print()
    print("=" * 60)
    print("LED Radar Status")
    print("=" * 60)
    print(f"Artifact dir: {status['artifact_dir']}")
    bounds = status["bounds"]
    print(
        f"Radar bounds: W {bounds['west']} N {bounds['north']} "
        f"E {bounds['east']} S {bounds['south']}"
    )
    print(f"Points loaded: {status['points']}")
    print(f"Current bucket: {status['current_bucket']}")
    print(f"Raining points: {status['raining']}")
    if status["snapshot_bucket"]:
        print(f"Snapshot bucket: {status['snapshot_bucket']} ({status['snapshot_time']})")
    if status["last_result"]:
        print(f"Last cycle: {status['last_result']}")

    print()
    print(f"Artifacts ({len(status['artifacts'])}):")
    print("-" * 60)
    for name in status["artifacts"]:
        print(f"  {name}")
    print("=" * 60)


def build_cycle(settings: Settings, store: Optional[SnapshotStore] = None) -> RefreshCycle:
    """Wire a RefreshCycle from settings, loading the point file."""
    return RefreshCycle(
        points=load_points(settings.points_path),
        store=store or SnapshotStore(),
        artifacts=ArtifactStore(settings.artifact_dir),
        source=RadarSource(settings.url_template, timeout=settings.fetch_timeout),
        retention=settings.retention,
    )


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point for the radar refresh."""
    parser = argparse.ArgumentParser(
        description="Detect rain at named places from the CHMI radar image",
        epilog="""
Examples:
  python -m ledradar.cache.refresh --once     # One cycle
  python -m ledradar.cache.refresh --status   # Show status
  python -m ledradar.cache.refresh            # Loop until Ctrl+C
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single cycle and exit",
    )
    parser.add_argument(
        "--status",
        action="store_true",
        help="Show current status",
    )
    parser.add_argument(
        "--points",
        type=Path,
        default=None,
        help="Point CSV path (default: data/mesta.csv)",
    )
    parser.add_argument(
        "--artifacts",
        type=Path,
        default=None,
        help="Artifact directory (default: data/artifacts)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress output except errors",
    )

    args = parser.parse_args(argv)

    if args.quiet:
        level = logging.ERROR
    elif args.verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    settings = Settings.from_env()
    if args.points:
        settings.points_path = args.points
    if args.artifacts:
        settings.artifact_dir = args.artifacts

    try:
        cycle = build_cycle(settings)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1

    if args.status:
        print_status(get_status(cycle))
        return 0

    if args.once:
        result = cycle.run_once()
        return 1 if result.failed else 0

    scheduler = RefreshScheduler(cycle, settings.interval_seconds)
    scheduler.start()
    try:
        while scheduler.is_running:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        scheduler.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
