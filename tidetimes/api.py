"""API handlers for the TideTimes application.

This module contains FastAPI route handlers that expose the tide pipeline.
The pipeline is expected on app.state.pipeline (see main.lifespan).
"""

# Standard library imports
import logging
from typing import Annotated

# Third-party imports
import fastapi
from fastapi import HTTPException, Query

# Local imports
from tidetimes.pipeline import TidePipeline
from tidetimes.types import Coordinate, TideSeriesDocument


def get_pipeline(request: fastapi.Request) -> TidePipeline:
    """Return the pipeline stored on the application state.

    Raises:
        HTTPException: 503 if the application has not finished starting up
    """
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise HTTPException(status_code=503, detail="Tide pipeline not initialized")
    return pipeline


def register_routes(app: fastapi.FastAPI) -> None:
    """Register API routes with the FastAPI application."""

    @app.get("/api/healthy")
    async def healthy(request: fastapi.Request) -> bool:
        """Health check: true once the pipeline is available."""
        get_pipeline(request)
        return True

    @app.get("/api/tides", response_model=TideSeriesDocument)
    async def tides(
        request: fastapi.Request,
        lat: Annotated[float, Query(ge=-90, le=90, description="Latitude")],
        lon: Annotated[float, Query(ge=-180, le=180, description="Longitude")],
    ) -> TideSeriesDocument:
        """Tide heights and high/low tides for the station nearest a coordinate.

        Always answers with data; "atlas" is "MOCK" when NOAA data could not
        be obtained.
        """
        pipeline = get_pipeline(request)
        coordinate = Coordinate(latitude=lat, longitude=lon)
        series = await pipeline.get_tide_data(coordinate)
        if series.is_mock:
            logging.info(f"[api] Serving mock tide data for {coordinate}")
        return series.to_document()
