"""NOAA CO-OPS (Center for Operational Oceanographic Products and Services) API client."""

# Standard library imports
import asyncio
import datetime
import json
import logging
from typing import Any, Literal, Optional, TypedDict

# Third-party imports
import aiohttp

# Local imports
from tidetimes import config as config_lib
from tidetimes.clients.base import (
    BaseApiClient,
    HttpStatusError,
    NetworkError,
    ParseError,
)

DateFormat = "%Y%m%d %H:%M"


class CoopsRequestParams(TypedDict, total=False):
    """Parameters for NOAA CO-OPS data getter requests."""

    product: Literal["predictions"]
    datum: str
    begin_date: str
    end_date: str
    station: str
    interval: str
    application: str
    time_zone: str
    units: str
    format: str


class RawPrediction(TypedDict):
    """A prediction entry exactly as returned by the API."""

    t: str  # "yyyy-MM-dd HH:mm"
    v: str  # decimal string


class RawStation(TypedDict, total=False):
    """A station directory entry as returned by the metadata API."""

    id: str
    name: str
    lat: float
    lng: float


class CoopsApi(BaseApiClient):
    """Client for the NOAA CO-OPS Tides and Currents API.

    Provides the two calls the tide pipeline needs: the tide-prediction station
    directory and the water-level predictions for one station over a time window.

    API documentation: https://api.tidesandcurrents.noaa.gov/api/prod/

    Timestamps are requested in GMT so they can be treated as naive UTC.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        config: config_lib.PipelineConfig = config_lib.DEFAULT,
    ) -> None:
        """Initialize CoopsApi with an aiohttp client session."""
        super().__init__(
            session=session,
            max_retries=config.max_retries,
            retry_delay=config.retry_delay,
        )
        self.config = config
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    @property
    def client_type(self) -> str:
        return "coops"

    def _format_date(self, date: datetime.datetime) -> str:
        """Format a datetime for NOAA CO-OPS API requests."""
        return date.strftime(DateFormat)

    async def _execute_request(
        self,
        url: str,
        params: Optional[CoopsRequestParams] = None,
        location_code: str = "unknown",
    ) -> Any:
        """Make a single GET request and decode the JSON body.

        Raises:
            NetworkError: On transport failure or timeout
            HttpStatusError: If the response status is not 200
            ParseError: If the body is not valid JSON
        """
        self.log(f"NOAA CO-OPS API request: {url} {params or ''}", location_code=location_code)
        try:
            async with self._session.get(
                url, params=dict(params) if params else None, timeout=self._timeout
            ) as response:
                if response.status != 200:
                    error = HttpStatusError(response.status)
                    self.log(str(error), level=logging.ERROR, location_code=location_code)
                    raise error
                body = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(
                f"Failed to connect to NOAA CO-OPS API: {e.__class__.__name__}: {e}"
            ) from e

        try:
            return json.loads(body)
        except ValueError as e:
            raise ParseError(f"Malformed JSON from NOAA CO-OPS API: {e}") from e

    async def stations(self, location_code: str = "catalog") -> list[RawStation]:
        """Return the tide-prediction station directory.

        Returns:
            List of raw station records, each with id, name, lat and lng

        Raises:
            NetworkError, HttpStatusError, ParseError
        """
        payload = await self.request_with_retry(
            self.config.stations_url, location_code=location_code
        )
        stations = payload.get("stations") if isinstance(payload, dict) else None
        if not isinstance(stations, list):
            raise ParseError("Station directory response has no 'stations' array")
        self.log(f"Loaded {len(stations)} stations", location_code=location_code)
        return stations

    async def predictions(
        self,
        station: str,
        begin_date: datetime.datetime,
        end_date: datetime.datetime,
    ) -> list[RawPrediction]:
        """Return water-level predictions for a station between two instants.

        Args:
            station: NOAA station ID
            begin_date: Window start (naive UTC)
            end_date: Window end (naive UTC)

        Returns:
            List of raw {t, v} prediction records, in whatever order NOAA sent them

        Raises:
            NetworkError, HttpStatusError, ParseError
        """
        params: CoopsRequestParams = {
            "product": "predictions",
            "datum": self.config.datum,
            "begin_date": self._format_date(begin_date),
            "end_date": self._format_date(end_date),
            "station": station,
            "interval": str(self.config.interval_minutes),
            "application": self.config.application,
            "time_zone": "gmt",
            "units": self.config.units,
            "format": "json",
        }
        self.log(
            f"Fetching tide predictions from {params['begin_date']} to {params['end_date']}",
            location_code=station,
        )
        payload = await self.request_with_retry(
            self.config.predictions_url, params, location_code=station
        )
        if not isinstance(payload, dict):
            raise ParseError("Predictions response is not a JSON object")
        if "error" in payload:
            error = payload["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise ParseError(f"NOAA CO-OPS API data error: {message}")
        predictions = payload.get("predictions")
        if not isinstance(predictions, list):
            raise ParseError("Predictions response has no 'predictions' array")
        return predictions
