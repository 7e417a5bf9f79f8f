"""Runtime configuration for ledradar.

Defaults are module-level constants. ``Settings.from_env`` applies
``LEDRADAR_*`` environment overrides on top of them.
"""

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from ledradar.utils.io import DEFAULT_ARTIFACT_DIR, DEFAULT_POINTS_PATH

# CHMI max-reflectivity composite, one PNG every 10 minutes
RADAR_URL_TEMPLATE = (
    "https://www.chmi.cz/files/portal/docs/meteo/rad/inca-cz/data/"
    "czrad-z_max3d/pacz2gmaps3.z_max3d.{bucket}.0.png"
)

BUCKET_MINUTES = 10
REFRESH_INTERVAL_SECONDS = 60
ARTIFACT_RETENTION = timedelta(hours=1)
FETCH_TIMEOUT_SECONDS = 30.0
ARTIFACT_PREFIX = "radar_a_mesta_"

HOST = "0.0.0.0"
PORT = 8080


@dataclass
class Settings:
    """Effective settings for one process."""

    points_path: Path = DEFAULT_POINTS_PATH
    artifact_dir: Path = DEFAULT_ARTIFACT_DIR
    interval_seconds: float = REFRESH_INTERVAL_SECONDS
    retention: timedelta = ARTIFACT_RETENTION
    fetch_timeout: float = FETCH_TIMEOUT_SECONDS
    url_template: str = RADAR_URL_TEMPLATE
    host: str = HOST
    port: int = PORT

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """Build settings from environment variables.

        Recognised variables: LEDRADAR_POINTS, LEDRADAR_ARTIFACTS,
        LEDRADAR_INTERVAL, LEDRADAR_RETENTION_MINUTES, LEDRADAR_FETCH_TIMEOUT,
        LEDRADAR_URL_TEMPLATE, LEDRADAR_HOST, LEDRADAR_PORT.

        Raises:
            ValueError: If a numeric variable cannot be parsed
        """
        env = os.environ if environ is None else environ
        settings = cls()

        if env.get("LEDRADAR_POINTS"):
            settings.points_path = Path(env["LEDRADAR_POINTS"])
        if env.get("LEDRADAR_ARTIFACTS"):
            settings.artifact_dir = Path(env["LEDRADAR_ARTIFACTS"])
        if env.get("LEDRADAR_INTERVAL"):
            settings.interval_seconds = float(env["LEDRADAR_INTERVAL"])
        if env.get("LEDRADAR_RETENTION_MINUTES"):
            settings.retention = timedelta(minutes=float(env["LEDRADAR_RETENTION_MINUTES"]))
        if env.get("LEDRADAR_FETCH_TIMEOUT"):
            settings.fetch_timeout = float(env["LEDRADAR_FETCH_TIMEOUT"])
        if env.get("LEDRADAR_URL_TEMPLATE"):
            settings.url_template = env["LEDRADAR_URL_TEMPLATE"]
        if env.get("LEDRADAR_HOST"):
            settings.host = env["LEDRADAR_HOST"]
        if env.get("LEDRADAR_PORT"):
            settings.port = int(env["LEDRADAR_PORT"])

        return settings
