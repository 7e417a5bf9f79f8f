"""HTTP API for ledradar.

This module provides:

- create_app: Factory function to create FastAPI application
- ObservedPointResponse: Wire schema of a raining place
- HealthResponse: Health check schema

Note: FastAPI-dependent exports (create_app, RadarService) are lazy-loaded
to allow importing schemas without FastAPI installed.
"""

from ledradar.api.schemas import ErrorResponse, HealthResponse, ObservedPointResponse


def __getattr__(name):
    """Lazy load FastAPI-dependent components."""
    if name in ("create_app", "RadarService"):
        from ledradar.api.app import RadarService, create_app
        if name == "create_app":
            return create_app
        return RadarService
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "create_app",
    "RadarService",
    "ObservedPointResponse",
    "HealthResponse",
    "ErrorResponse",
]
