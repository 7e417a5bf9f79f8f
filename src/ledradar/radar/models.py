"""Data models for the radar layer."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class GeoPoint:
    """Named place to watch for rain."""

    id: int
    name: str
    lat: float
    lon: float


@dataclass(frozen=True)
class ObservedPoint:
    """A place found raining, with the averaged radar colour."""

    point: GeoPoint
    r: int
    g: int
    b: int

    @property
    def id(self) -> int:
        return self.point.id

    @property
    def name(self) -> str:
        return self.point.name

    @property
    def lat(self) -> float:
        return self.point.lat

    @property
    def lon(self) -> float:
        return self.point.lon

    def to_dict(self) -> dict:
        """Return in the published wire shape."""
        return {
            "ID": self.id,
            "Name": self.name,
            "Lat": self.lat,
            "Lon": self.lon,
            "R": self.r,
            "G": self.g,
            "B": self.b,
        }


@dataclass
class Raster:
    """Decoded radar image.

    Attributes:
        pixels: uint8 array of shape (height, width, 4), non-premultiplied RGBA
    """

    pixels: np.ndarray

    def __post_init__(self):
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 4:
            raise ValueError(
                f"Raster pixels must have shape (height, width, 4), got {self.pixels.shape}"
            )

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def contains(self, x: int, y: int) -> bool:
        """Check if a pixel coordinate is inside the raster."""
        return 0 <= x < self.width and 0 <= y < self.height


@dataclass(frozen=True)
class Snapshot:
    """Set of raining points published by one refresh.

    Replaced wholesale by the next refresh, never mutated.
    """

    points: tuple[ObservedPoint, ...] = ()
    bucket: Optional[str] = None
    generated_at: Optional[datetime] = None

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    def to_list(self) -> list[dict]:
        return [p.to_dict() for p in self.points]


EMPTY_SNAPSHOT = Snapshot()
