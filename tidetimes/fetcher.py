"""Tide prediction series fetching and normalization.

SeriesFetcher asks NOAA CO-OPS for a station's water-level predictions over a
time window and turns the raw {t, v} string pairs into a sorted, validated
sequence of HeightSample values. A single unparseable pair fails the whole
fetch; there are no partial results.
"""

# Standard library imports
import datetime
import logging
from typing import Any, Mapping, Sequence

# Third-party imports
import pandas as pd
import pandera.errors

# Local imports
from tidetimes import config as config_lib
from tidetimes.clients.base import ParseError
from tidetimes.clients.coops import CoopsApi
from tidetimes.dataframe_models import HeightSeriesDataModel
from tidetimes.types import HeightSample, Station

# Timestamp format of the "t" field in prediction records
PREDICTION_TIME_FORMAT = "%Y-%m-%d %H:%M"


def parse_predictions(records: Sequence[Mapping[str, Any]]) -> pd.DataFrame:
    """Parse raw prediction records into a DataFrame indexed by time.

    Args:
        records: Raw {t, v} records in any order

    Returns:
        DataFrame with a naive UTC DatetimeIndex named "time" and a float
        "height" column, sorted ascending

    Raises:
        ParseError: If any record is malformed or the resulting series is invalid
    """
    try:
        raw = pd.DataFrame(
            {
                "t": [record["t"] for record in records],
                "v": [record["v"] for record in records],
            }
        )
    except (KeyError, TypeError) as e:
        raise ParseError(f"Malformed prediction record: {e}") from e

    try:
        times = pd.to_datetime(raw["t"], format=PREDICTION_TIME_FORMAT, errors="raise")
        heights = pd.to_numeric(raw["v"], errors="raise").astype(float)
    except (ValueError, TypeError) as e:
        raise ParseError(f"Unparseable prediction value: {e}") from e

    df = (
        pd.DataFrame({"height": heights.to_numpy()}, index=pd.DatetimeIndex(times, name="time"))
        # Upstream ordering is not trusted
        .sort_index()
    )
    if df["height"].isna().any():
        raise ParseError("Prediction series contains missing heights")

    try:
        HeightSeriesDataModel.validate(df, lazy=True)
    except (pandera.errors.SchemaError, pandera.errors.SchemaErrors) as e:
        raise ParseError(f"Invalid prediction series: {e}") from e
    return df


def frame_to_samples(df: pd.DataFrame) -> list[HeightSample]:
    """Convert a validated height DataFrame into HeightSample values."""
    return [
        HeightSample(timestamp=ts.to_pydatetime(), height=float(height))
        for ts, height in df["height"].items()
    ]


class SeriesFetcher:
    """Fetches and normalizes one station's prediction series."""

    def __init__(
        self,
        client: CoopsApi,
        config: config_lib.PipelineConfig = config_lib.DEFAULT,
    ) -> None:
        self.client = client
        self.config = config

    def window(
        self, now: datetime.datetime
    ) -> tuple[datetime.datetime, datetime.datetime]:
        """Return the prediction window centered on now."""
        return now - self.config.window_before, now + self.config.window_after

    async def fetch(
        self,
        station: Station,
        window_start: datetime.datetime,
        window_end: datetime.datetime,
    ) -> list[HeightSample]:
        """Fetch a station's height series for a window.

        Returns:
            HeightSamples sorted ascending by timestamp, without duplicates

        Raises:
            NetworkError: Transport failure or timeout
            HttpStatusError: Non-200 response
            ParseError: Malformed payload or unparseable field
        """
        records = await self.client.predictions(station.id, window_start, window_end)
        df = parse_predictions(records)
        logging.info(
            f"[{station.id}][fetcher] Received {len(df)} tide readings for {station.name}"
        )
        return frame_to_samples(df)
