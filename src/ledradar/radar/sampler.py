"""Neighbourhood colour sampling and rain classification.

The radar palette encodes "no precipitation" as black (or transparent),
so any non-black average over the neighbourhood counts as rain.
"""

import numpy as np

from ledradar.radar.models import Raster

# 9x9 neighbourhood centred on the point
SAMPLE_RADIUS = 4

# Marker square spans [x - 5, x + 5) on each axis
MARKER_HALF_SIZE = 5

CLEAR_COLOR = (0, 0, 0)


class OutOfBoundsPoint(ValueError):
    """Projected point whose sample window leaves the raster."""

    def __init__(self, x: int, y: int, width: int, height: int):
        self.x = x
        self.y = y
        super().__init__(
            f"Sample window at ({x}, {y}) exceeds raster {width}x{height}"
        )


def sample(raster: Raster, x: int, y: int) -> tuple[int, int, int]:
    """Average colour of the 9x9 neighbourhood around (x, y).

    Channels are alpha-premultiplied before averaging, so transparent
    pixels read as black. The mean is floored to an integer 0-255.

    Args:
        raster: Decoded radar image
        x: Pixel column
        y: Pixel row

    Returns:
        (r, g, b) tuple

    Raises:
        OutOfBoundsPoint: If any pixel of the neighbourhood is outside the raster
    """
    if not (
        raster.contains(x - SAMPLE_RADIUS, y - SAMPLE_RADIUS)
        and raster.contains(x + SAMPLE_RADIUS, y + SAMPLE_RADIUS)
    ):
        raise OutOfBoundsPoint(x, y, raster.width, raster.height)

    window = raster.pixels[
        y - SAMPLE_RADIUS:y + SAMPLE_RADIUS + 1,
        x - SAMPLE_RADIUS:x + SAMPLE_RADIUS + 1,
    ].astype(np.uint32)

    alpha = window[..., 3:4]
    premultiplied = window[..., :3] * alpha // 255

    totals = premultiplied.reshape(-1, 3).sum(axis=0)
    count = window.shape[0] * window.shape[1]
    r, g, b = (int(v) for v in totals // count)
    return r, g, b


def is_raining(color: tuple[int, int, int]) -> bool:
    """Any non-black colour means precipitation."""
    return sum(color) > 0


def annotate(
    raster: Raster,
    x: int,
    y: int,
    raining: bool,
    color: tuple[int, int, int] = CLEAR_COLOR,
) -> None:
    """Draw an opaque 10x10 marker at (x, y), clipped to the raster.

    The marker uses ``color`` when raining and black otherwise.
    """
    r, g, b = color if raining else CLEAR_COLOR

    x0 = max(x - MARKER_HALF_SIZE, 0)
    y0 = max(y - MARKER_HALF_SIZE, 0)
    x1 = min(x + MARKER_HALF_SIZE, raster.width)
    y1 = min(y + MARKER_HALF_SIZE, raster.height)
    if x0 >= x1 or y0 >= y1:
        return

    raster.pixels[y0:y1, x0:x1] = (r, g, b, 255)


def rgb_swatch(r: int, g: int, b: int, text: str = "■") -> str:
    """Wrap text in a 24-bit ANSI colour escape for log output."""
    return f"\x1b[38;2;{r};{g};{b}m{text}\x1b[0m"
