"""Shared pytest fixtures for ledradar tests.

Test Tiers:
- unit: Fast tests with synthetic rasters, no network (default)
- live: Real CHMI download, requires network

Run live tests with: pytest -m live --run-live
"""

import io
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from ledradar.cache.artifacts import ArtifactStore
from ledradar.cache.state import SnapshotStore
from ledradar.radar.models import GeoPoint, Raster
from ledradar.radar.source import FetchError, decode_raster
from ledradar.utils.geo import BoundingBox


def pytest_addoption(parser):
    """Add command line options for test configuration."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run live tests against the CHMI server",
    )


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: fast unit tests using fixtures")
    config.addinivalue_line("markers", "live: real network tests (slow)")


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is specified."""
    if config.getoption("--run-live"):
        return

    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


# 100x100 pixel raster covering 10x10 degrees: 0.1 degree per pixel
TEST_BOUNDS = BoundingBox(west=10.0, north=60.0, east=20.0, south=50.0)


def make_pixels(width: int = 100, height: int = 100, rgba=(0, 0, 0, 0)) -> np.ndarray:
    """Uniform RGBA pixel array."""
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[:, :] = rgba
    return pixels


def to_png(pixels: np.ndarray) -> bytes:
    """Encode an RGBA array as PNG bytes."""
    buf = io.BytesIO()
    Image.fromarray(pixels, "RGBA").save(buf, format="PNG")
    return buf.getvalue()


class FakeSource:
    """Radar source serving prepared PNG bytes, counting fetches."""

    def __init__(self, content: bytes = b"", fail: bool = False):
        self.content = content
        self.fail = fail
        self.fetches: list[str] = []

    def fetch(self, bucket: str) -> bytes:
        self.fetches.append(bucket)
        if self.fail:
            raise FetchError(f"HTTP 404: Cannot download {bucket}")
        return self.content

    def decode(self, content: bytes) -> Raster:
        return decode_raster(content)


class FixedClock:
    """Settable clock for refresh tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def test_bounds() -> BoundingBox:
    return TEST_BOUNDS


@pytest.fixture
def rainy_pixels() -> np.ndarray:
    """Black transparent raster with an opaque blue cell at pixels x=20..39, y=20..39.

    Point (lat=57.0, lon=13.0) projects to (30, 30) inside the cell.
    Point (lat=53.0, lon=17.0) projects to (70, 70), outside it.
    """
    pixels = make_pixels()
    pixels[20:40, 20:40] = (0, 120, 255, 255)
    return pixels


@pytest.fixture
def sample_points() -> list[GeoPoint]:
    return [
        GeoPoint(id=1, name="Wet Town", lat=57.0, lon=13.0),
        GeoPoint(id=2, name="Dry Town", lat=53.0, lon=17.0),
        GeoPoint(id=3, name="Far Away", lat=45.0, lon=30.0),
    ]


@pytest.fixture
def artifact_dir(tmp_path) -> Path:
    return tmp_path / "artifacts"


@pytest.fixture
def artifacts(artifact_dir) -> ArtifactStore:
    return ArtifactStore(artifact_dir)


@pytest.fixture
def store() -> SnapshotStore:
    return SnapshotStore()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 5, 1, 12, 34, 56, tzinfo=timezone.utc))


@pytest.fixture
def points_csv(tmp_path) -> Path:
    path = tmp_path / "mesta.csv"
    path.write_text(
        "1;Praha;50.0877;14.4213\n"
        "2;Brno;49.1952;16.6080\n"
        "3;Plzeň;49.7384;13.3736\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def pixel_factory():
    """Factory for uniform RGBA pixel arrays."""
    return make_pixels


@pytest.fixture
def png_encoder():
    """Encodes RGBA arrays to PNG bytes."""
    return to_png


@pytest.fixture
def fake_source():
    """Factory for FakeSource(content=b'', fail=False)."""
    return FakeSource
