"""Radar image handling: models, point list, sampling and download."""

from ledradar.radar.models import (
    EMPTY_SNAPSHOT,
    GeoPoint,
    ObservedPoint,
    Raster,
    Snapshot,
)
from ledradar.radar.points import load_points
from ledradar.radar.sampler import OutOfBoundsPoint, annotate, is_raining, sample
from ledradar.radar.source import DecodeError, FetchError, RadarSource, decode_raster

__all__ = [
    "DecodeError",
    "EMPTY_SNAPSHOT",
    "FetchError",
    "GeoPoint",
    "ObservedPoint",
    "OutOfBoundsPoint",
    "RadarSource",
    "Raster",
    "Snapshot",
    "annotate",
    "decode_raster",
    "is_raining",
    "load_points",
    "sample",
]
