"""Application configuration.

This module defines the configuration for the tide pipeline: the NOAA CO-OPS
endpoints it talks to, the prediction window and product parameters, the cache
time-to-live, and the timeouts and retry policy applied to network calls.

PipelineConfig objects are immutable (frozen=True). The module-level DEFAULT
config is used unless a caller supplies its own; from_env() builds one with
TIDETIMES_* environment overrides applied.
"""

# Standard library imports
import datetime
import os
from typing import Annotated, Optional

# Third-party imports
from pydantic import BaseModel, ConfigDict, Field

PREDICTIONS_URL = "https://api.tidesandcurrents.noaa.gov/api/prod/datagetter"
STATIONS_URL = "https://api.tidesandcurrents.noaa.gov/mdapi/prod/webapi/stations.json?type=tidepredictions"

# Attribution strings carried on every TideSeries
NOAA_ATTRIBUTION = "NOAA CO-OPS API"
MOCK_ATTRIBUTION = "Mock Data (NOAA API Unavailable)"


class PipelineConfig(BaseModel, frozen=True):
    """Configuration for the tide data pipeline."""

    model_config = ConfigDict(extra="forbid")

    predictions_url: Annotated[
        str, Field(description="NOAA CO-OPS data getter endpoint")
    ] = PREDICTIONS_URL

    stations_url: Annotated[
        str, Field(description="NOAA CO-OPS station directory endpoint")
    ] = STATIONS_URL

    application: Annotated[
        str, Field(description="Application name reported to NOAA with each request")
    ] = "tidetimes"

    window_before: Annotated[
        datetime.timedelta,
        Field(description="How far before 'now' the prediction window starts"),
    ] = datetime.timedelta(hours=12)

    window_after: Annotated[
        datetime.timedelta,
        Field(description="How far after 'now' the prediction window ends"),
    ] = datetime.timedelta(hours=12)

    interval_minutes: Annotated[
        int, Field(gt=0, description="Sampling interval of predictions, in minutes")
    ] = 30

    datum: Annotated[
        str, Field(description="Vertical datum (mean lower low water)")
    ] = "MLLW"

    units: Annotated[str, Field(description="Unit system for heights")] = "metric"

    cache_ttl: Annotated[
        datetime.timedelta,
        Field(description="How long a cached series stays valid"),
    ] = datetime.timedelta(hours=1)

    request_timeout: Annotated[
        float, Field(gt=0, description="Timeout in seconds for a single HTTP request")
    ] = 30.0

    pipeline_timeout: Annotated[
        float,
        Field(
            gt=0,
            description="Timeout in seconds for station resolution plus series fetch",
        ),
    ] = 60.0

    max_retries: Annotated[
        int, Field(ge=1, description="Attempts made for transient network errors")
    ] = 3

    retry_delay: Annotated[
        float, Field(ge=0, description="Base delay in seconds between retries")
    ] = 1.0

    cache_path: Annotated[
        Optional[str],
        Field(
            description="JSON file backing the tide cache; None keeps it in memory"
        ),
    ] = None

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Build a config with TIDETIMES_* environment overrides applied."""
        overrides: dict[str, object] = {}
        if "TIDETIMES_CACHE_PATH" in os.environ:
            overrides["cache_path"] = os.environ["TIDETIMES_CACHE_PATH"]
        if "TIDETIMES_REQUEST_TIMEOUT" in os.environ:
            overrides["request_timeout"] = float(
                os.environ["TIDETIMES_REQUEST_TIMEOUT"]
            )
        if "TIDETIMES_CACHE_TTL_SECONDS" in os.environ:
            overrides["cache_ttl"] = datetime.timedelta(
                seconds=float(os.environ["TIDETIMES_CACHE_TTL_SECONDS"])
            )
        return cls(**overrides)


DEFAULT = PipelineConfig()
