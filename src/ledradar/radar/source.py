"""Radar image source.

Downloads the CHMI precipitation composite for a time bucket and
decodes it into a Raster.
"""

import io
import logging
from typing import Optional

import numpy as np
import requests
from PIL import Image

from ledradar.config import FETCH_TIMEOUT_SECONDS, RADAR_URL_TEMPLATE
from ledradar.radar.models import Raster

logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """Radar image could not be downloaded."""


class DecodeError(ValueError):
    """Downloaded bytes are not a readable image."""


def radar_url(bucket: str, template: str = RADAR_URL_TEMPLATE) -> str:
    """Build the download URL for a time bucket such as '20240501.1230'."""
    return template.format(bucket=bucket)


def decode_raster(content: bytes) -> Raster:
    """Decode image bytes into an RGBA Raster.

    Args:
        content: Raw image file bytes (PNG in practice)

    Returns:
        Raster with non-premultiplied RGBA pixels

    Raises:
        DecodeError: If the bytes cannot be decoded
    """
    if not content:
        raise DecodeError("Empty image payload")

    try:
        with Image.open(io.BytesIO(content)) as img:
            rgba = img.convert("RGBA")
            pixels = np.array(rgba, dtype=np.uint8)
    except Exception as e:
        # Pillow raises OSError, SyntaxError, DecompressionBombError and others
        raise DecodeError(f"Cannot decode radar image: {e}") from e

    return Raster(pixels=pixels)


class RadarSource:
    """HTTP source for radar images.

    Example:
        >>> source = RadarSource()
        >>> content = source.fetch("20240501.1230")
        >>> raster = source.decode(content)
    """

    def __init__(
        self,
        url_template: str = RADAR_URL_TEMPLATE,
        timeout: float = FETCH_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        """Initialize source.

        Args:
            url_template: URL with a ``{bucket}`` placeholder
            timeout: Request timeout in seconds
            session: Optional requests session to reuse connections
        """
        self.url_template = url_template
        self.timeout = timeout
        self.session = session

    def fetch(self, bucket: str) -> bytes:
        """Download the raw image for a time bucket.

        Raises:
            FetchError: On transport failure, timeout or non-200 status
        """
        url = radar_url(bucket, self.url_template)
        logger.info(f"Downloading file: {url}")

        getter = self.session.get if self.session is not None else requests.get
        try:
            response = getter(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchError(f"Cannot download {url}: {e}") from e

        if response.status_code != 200:
            raise FetchError(f"HTTP {response.status_code}: Cannot download {url}")

        logger.info(f"Successfully downloaded {len(response.content)} bytes")
        return response.content

    def decode(self, content: bytes) -> Raster:
        """Decode downloaded bytes. See decode_raster."""
        return decode_raster(content)
