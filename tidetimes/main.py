#!/usr/bin/env python3
"""
TideTimes - FastAPI web application serving tide predictions

Wires the tide pipeline to a shared aiohttp session and exposes it over HTTP.
"""

# Standard library imports
import contextlib
import logging
import os
import signal
from typing import Any, AsyncGenerator

# Third-party imports
import aiohttp
import fastapi
import uvicorn

# Local imports
from tidetimes import api
from tidetimes import config as config_lib
from tidetimes.logging_utils import setup_logging
from tidetimes.pipeline import TidePipeline


@contextlib.asynccontextmanager
async def lifespan(app: fastapi.FastAPI) -> AsyncGenerator[None, None]:
    """Create the shared HTTP session and tide pipeline for the app's lifetime.

    Args:
        app: The FastAPI application instance

    Yields:
        None when setup is complete
    """
    pipeline_config = config_lib.PipelineConfig.from_env()
    async with aiohttp.ClientSession() as session:
        app.state.http_session = session
        app.state.pipeline = TidePipeline.create(session, config=pipeline_config)
        logging.info("Tide pipeline initialized")
        yield
        logging.info("-----------------------------------------------")
        logging.info("Shutting down app")
        app.state.pipeline = None


app = fastapi.FastAPI(lifespan=lifespan)

# API response headers for preventing caching
NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


@app.middleware("http")
async def add_cache_control_headers(request: fastapi.Request, call_next: Any) -> Any:
    """Add cache control headers to API responses to prevent caching."""
    response = await call_next(request)
    if request.url.path.startswith("/api/"):
        for name, value in NO_CACHE_HEADERS.items():
            response.headers[name] = value
    return response


api.register_routes(app)


def setup_signal_handlers() -> None:
    """Log SIGTERM before handing it to the original handler.

    SIGINT is left alone so uvicorn's Ctrl+C handling keeps working.
    """
    original_sigterm_handler = signal.getsignal(signal.SIGTERM)

    def sigterm_handler(sig: int, frame: Any) -> None:
        logging.warning("Received SIGTERM signal, beginning shutdown")
        if callable(original_sigterm_handler):
            original_sigterm_handler(sig, frame)

    signal.signal(signal.SIGTERM, sigterm_handler)


def start_app() -> fastapi.FastAPI:
    """Initialize logging and return the FastAPI application."""
    setup_logging()
    logging.info("***********************************************")
    logging.info("Starting app")
    setup_signal_handlers()
    return app


if __name__ == "__main__":
    """Run the application directly with uvicorn when executed as a script."""
    uvicorn.run(
        "tidetimes.main:start_app",
        factory=True,
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 8080)),
        log_level="info",
    )
