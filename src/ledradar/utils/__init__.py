"""Shared utilities for ledradar."""

from .geo import RADAR_BOUNDS, BoundingBox, project
from .io import DEFAULT_ARTIFACT_DIR, DEFAULT_POINTS_PATH, ensure_dir, get_project_root

__all__ = [
    "BoundingBox",
    "RADAR_BOUNDS",
    "project",
    "DEFAULT_ARTIFACT_DIR",
    "DEFAULT_POINTS_PATH",
    "ensure_dir",
    "get_project_root",
]
