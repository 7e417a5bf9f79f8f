"""Annotated radar images on disk.

One PNG per processed time bucket, named ``radar_a_mesta_<bucket>.png``.
Files older than the retention window are removed by ``sweep``.
"""

import logging
import time
from datetime import timedelta
from pathlib import Path
from typing import Optional

from PIL import Image

from ledradar.config import ARTIFACT_PREFIX, ARTIFACT_RETENTION
from ledradar.radar.models import Raster
from ledradar.utils.io import DEFAULT_ARTIFACT_DIR, ensure_dir

logger = logging.getLogger(__name__)


class PersistError(OSError):
    """Annotated image could not be written."""


class ArtifactStore:
    """Directory of annotated radar images keyed by time bucket.

    Example:
        >>> store = ArtifactStore(Path("data/artifacts"))
        >>> store.exists("20240501.1230")
        False
    """

    def __init__(self, directory: Optional[Path] = None, prefix: str = ARTIFACT_PREFIX):
        """Initialize store.

        Args:
            directory: Directory for artifacts. Created if missing.
            prefix: File name prefix identifying our artifacts
        """
        self.directory = ensure_dir(Path(directory or DEFAULT_ARTIFACT_DIR))
        self.prefix = prefix

    def path_for(self, bucket: str) -> Path:
        return self.directory / f"{self.prefix}{bucket}.png"

    def exists(self, bucket: str) -> bool:
        """Check whether the artifact for a bucket was already written."""
        return self.path_for(bucket).exists()

    def save(self, bucket: str, raster: Raster) -> Path:
        """Encode raster as PNG and store it under the bucket key.

        The file is written next to its final name and renamed into place,
        so a partial file never satisfies ``exists``.

        Raises:
            PersistError: If encoding or writing fails
        """
        path = self.path_for(bucket)
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            Image.fromarray(raster.pixels, "RGBA").save(tmp_path, format="PNG")
            tmp_path.replace(path)
        except (OSError, ValueError) as e:
            tmp_path.unlink(missing_ok=True)
            raise PersistError(f"Cannot write artifact {path}: {e}") from e

        logger.info(f"Saved artifact {path.name}")
        return path

    def list_artifacts(self) -> list[Path]:
        """All artifacts in the store, oldest name first."""
        return sorted(
            p for p in self.directory.glob(f"{self.prefix}*.png") if p.is_file()
        )

    def sweep(
        self,
        retention: timedelta = ARTIFACT_RETENTION,
        now: Optional[float] = None,
    ) -> list[Path]:
        """Delete artifacts whose modification time is older than retention.

        Failures to stat or delete a file are logged and skipped; the file
        is retried on the next sweep.

        Args:
            retention: Maximum artifact age
            now: Current time as a POSIX timestamp (defaults to time.time())

        Returns:
            Paths that were deleted
        """
        now = time.time() if now is None else now
        cutoff = now - retention.total_seconds()
        deleted = []

        for path in self.list_artifacts():
            try:
                mtime = path.stat().st_mtime
            except OSError as e:
                logger.warning(f"Cannot stat {path.name}: {e}")
                continue

            if mtime >= cutoff:
                continue

            logger.info(f"Deleting old file {path.name}")
            try:
                path.unlink()
            except OSError as e:
                logger.error(f"Cannot delete {path.name}: {e}")
                continue
            deleted.append(path)

        return deleted
