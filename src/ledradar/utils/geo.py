"""Geographic utilities and constants."""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class BoundingBox:
    """Geographic bounding box in WGS-84 degrees."""

    west: float
    north: float
    east: float
    south: float

    def contains(self, lat: float, lon: float) -> bool:
        """Check if a point is within this bounding box."""
        return (
            self.south <= lat <= self.north
            and self.west <= lon <= self.east
        )

    def to_dict(self) -> dict:
        """Return as dictionary."""
        return {
            "west": self.west,
            "north": self.north,
            "east": self.east,
            "south": self.south,
        }


def project(
    lat: float,
    lon: float,
    bounds: BoundingBox,
    width: int,
    height: int,
) -> tuple[int, int]:
    """Map a latitude/longitude to pixel coordinates in a raster.

    The raster is assumed to be an equirectangular image whose top-left
    corner is (bounds.north, bounds.west). Rows grow downward, so latitude
    is inverted. No bounds checking is done here; points outside ``bounds``
    produce coordinates outside the raster.

    Args:
        lat: Latitude in degrees
        lon: Longitude in degrees
        bounds: Geographic extent of the raster
        width: Raster width in pixels
        height: Raster height in pixels

    Returns:
        (x, y) pixel coordinates

    Example:
        >>> project(50.0877, 14.4213, RADAR_BOUNDS, 500, 500)
        (165, 255)
    """
    lon_pixel_size = (bounds.east - bounds.west) / width
    lat_pixel_size = (bounds.north - bounds.south) / height

    x = math.floor((lon - bounds.west) / lon_pixel_size)
    y = math.floor((bounds.north - lat) / lat_pixel_size)
    return x, y


# Extent of the CHMI radar composite (top-left and bottom-right corners)
RADAR_BOUNDS = BoundingBox(
    west=11.2673442,
    north=52.1670717,
    east=20.7703153,
    south=48.1,
)
