"""Pydantic schemas for API responses.

Field names on the wire follow the original JSON shape (``ID``, ``Name``,
``Lat``, ``Lon``, ``R``, ``G``, ``B``).
"""

from typing import Optional

from pydantic import BaseModel, Field



class ObservedPointResponse(BaseModel):
    """A place where it is currently raining.

    Attributes:
        id: Point identifier
        name: Display name
        lat: Latitude in degrees
        lon: Longitude in degrees
        r, g, b: Averaged radar colour (0-255)
    """

    id: int = Field(..., alias="ID")
    name: str = Field(..., alias="Name")
    lat: float = Field(..., alias="Lat")
    lon: float = Field(..., alias="Lon")
    r: int = Field(..., ge=0, le=255, alias="R")
    g: int = Field(..., ge=0, le=255, alias="G")
    b: int = Field(..., ge=0, le=255, alias="B")

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "ID": 1,
                    "Name": "Praha",
                    "Lat": 50.0877,
                    "Lon": 14.4213,
                    "R": 0,
                    "G": 120,
                    "B": 255,
                }
            ]
        },
    }


class HealthResponse(BaseModel):
    """Health check response.

    Attributes:
        status: Service status ('healthy' or 'degraded')
        points_loaded: Number of watched places
        refresh_running: Whether the background refresh is alive
        snapshot_bucket: Time bucket of the current snapshot
        version: API version
    """

    status: str = Field(
        default="healthy",
        description="Service status",
    )
    points_loaded: int = Field(
        default=0,
        ge=0,
        description="Number of watched places",
    )
    refresh_running: bool = Field(
        default=False,
        description="Whether the background refresh is running",
    )
    snapshot_bucket: Optional[str] = Field(
        default=None,
        description="Time bucket of the published snapshot",
    )
    version: str = Field(
        default="1.0.0",
        description="API version",
    )


class ErrorResponse(BaseModel):
    """Error response schema."""

    error: str = Field(
        ...,
        description="Error type",
    )
    message: str = Field(
        ...,
        description="Error message",
    )
