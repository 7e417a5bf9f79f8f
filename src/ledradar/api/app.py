"""FastAPI application publishing the raining places.

Provides:
- GET /        current snapshot of raining places
- GET /health  service status

Example:
    >>> from ledradar.api import create_app
    >>> app = create_app()
    >>> # Run with: uvicorn ledradar.api.app:app
"""

import argparse
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from ledradar.api.schemas import ErrorResponse, HealthResponse, ObservedPointResponse
from ledradar.cache.refresh import RefreshCycle, RefreshScheduler, build_cycle
from ledradar.cache.state import SnapshotStore
from ledradar.config import Settings
from ledradar.radar.source import RadarSource

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


class RadarService:
    """Owns the snapshot store and the background refresh.

    Attributes:
        settings: Effective settings
        store: Snapshot store read by request handlers
        cycle: Refresh cycle, set once points are loaded
        scheduler: Background scheduler, set once started
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[SnapshotStore] = None,
        source: Optional[RadarSource] = None,
    ):
        self.settings = settings or Settings.from_env()
        self.store = store or SnapshotStore()
        self.source = source
        self.cycle: Optional[RefreshCycle] = None
        self.scheduler: Optional[RefreshScheduler] = None

    @property
    def points_loaded(self) -> int:
        return len(self.cycle.points) if self.cycle is not None else 0

    @property
    def refresh_running(self) -> bool:
        return self.scheduler is not None and self.scheduler.is_running

    def load(self) -> RefreshCycle:
        """Load the point list and build the refresh cycle.

        Raises:
            FileNotFoundError: If the point file is missing
        """
        cycle = build_cycle(self.settings, self.store)
        if self.source is not None:
            cycle.source = self.source
        self.cycle = cycle
        return cycle

    def start(self) -> None:
        """Load points if needed and start the background refresh."""
        if self.cycle is None:
            self.load()
        if self.scheduler is None:
            self.scheduler = RefreshScheduler(self.cycle, self.settings.interval_seconds)
        self.scheduler.start()

    def stop(self) -> None:
        if self.scheduler is not None:
            self.scheduler.stop(timeout=self.settings.fetch_timeout)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[SnapshotStore] = None,
    source: Optional[RadarSource] = None,
    start_refresh: bool = True,
) -> FastAPI:
    """Create FastAPI application.

    Args:
        settings: Settings (defaults to environment)
        store: Snapshot store to serve from
        source: Override the radar source (tests)
        start_refresh: Whether to load points and start refreshing on startup

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="LED Radar API",
        description="Places in the Czech Republic where it is raining right now",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    service = RadarService(settings, store, source)
    app.state.service = service

    @app.on_event("startup")
    async def startup_event():
        """Load points and start the refresh loop."""
        if start_refresh:
            try:
                service.start()
            except Exception as e:
                logger.error(f"Failed to start refresh on startup: {e}")

    @app.on_event("shutdown")
    async def shutdown_event():
        service.stop()

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTP exceptions with custom response."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=f"HTTP_{exc.status_code}",
                message=str(exc.detail),
            ).model_dump(),
        )

    @app.get("/", response_model=list[ObservedPointResponse], tags=["radar"])
    def current_snapshot():
        """Places where it is raining, from the latest radar image."""
        snapshot = service.store.current()
        return [ObservedPointResponse(**item) for item in snapshot.to_list()]

    @app.get("/health", response_model=HealthResponse, tags=["info"])
    def health_check():
        """Health check endpoint."""
        snapshot = service.store.current()
        running = service.refresh_running
        return HealthResponse(
            status="healthy" if running else "degraded",
            points_loaded=service.points_loaded,
            refresh_running=running,
            snapshot_bucket=snapshot.bucket,
            version=API_VERSION,
        )

    return app


def main(argv: Optional[list[str]] = None) -> None:
    """Serve the API with uvicorn."""
    import uvicorn

    settings = Settings.from_env()

    parser = argparse.ArgumentParser(description="Serve the LED radar API")
    parser.add_argument("--host", default=settings.host, help="Bind address")
    parser.add_argument("--port", type=int, default=settings.port, help="Bind port")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    uvicorn.run(create_app(settings), host=args.host, port=args.port)


# Default app instance for uvicorn
app = create_app()


if __name__ == "__main__":
    main()
