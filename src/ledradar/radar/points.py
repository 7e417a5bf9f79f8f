"""Point list loading.

The point file is semicolon separated, without a header:

    1;Praha;50.0877;14.4213
"""

import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from ledradar.radar.models import GeoPoint
from ledradar.utils.io import DEFAULT_POINTS_PATH

logger = logging.getLogger(__name__)

POINT_COLUMNS = ["id", "name", "lat", "lon"]


def load_points(path: Optional[Path] = None) -> tuple[GeoPoint, ...]:
    """Load the watched places from a CSV file.

    Rows with a non-integer id, an empty name, or a non-numeric latitude
    or longitude are dropped.

    Args:
        path: Path to the CSV file. Defaults to data/mesta.csv.

    Returns:
        Tuple of GeoPoint in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    path = Path(path or DEFAULT_POINTS_PATH)
    if not path.exists():
        raise FileNotFoundError(f"Point file not found: {path}")

    df = pd.read_csv(
        path,
        sep=";",
        header=None,
        names=POINT_COLUMNS,
        usecols=range(len(POINT_COLUMNS)),
        dtype=str,
        encoding="utf-8",
        skip_blank_lines=True,
    )

    for col in ("id", "lat", "lon"):
        df[col] = pd.to_numeric(df[col].str.strip(), errors="coerce")

    df["name"] = df["name"].fillna("").str.strip()

    invalid = df[["id", "lat", "lon"]].isna().any(axis=1)
    invalid |= df["id"] % 1 != 0
    invalid |= df["name"] == ""
    if invalid.any():
        logger.warning(f"Skipping {int(invalid.sum())} malformed rows in {path}")
        df = df[~invalid]

    points = tuple(
        GeoPoint(
            id=int(row.id),
            name=row.name,
            lat=float(row.lat),
            lon=float(row.lon),
        )
        for row in df.itertuples(index=False)
    )

    logger.info(f"Loaded {len(points)} points from {path}")
    return points
