"""Tide data pipeline.

TidePipeline resolves a coordinate to its nearest station, serves the
station's series from cache when fresh, otherwise fetches and derives it, and
falls back to synthetic data on any failure. get_tide_data() never raises:
callers always receive a displayable TideSeries and tell real data from
synthetic data by its source_label ("NOAA" or "MOCK").
"""

# Standard library imports
import asyncio
import logging
from typing import Optional

# Third-party imports
import aiohttp

# Local imports
from tidetimes import config as config_lib
from tidetimes.cache import (
    InMemoryStore,
    JsonFileStore,
    KeyValueStore,
    PersistenceError,
    TideCache,
)
from tidetimes.clients.coops import CoopsApi
from tidetimes.extrema import ExtremaDetector
from tidetimes.fetcher import SeriesFetcher
from tidetimes.mock import MockSeriesGenerator
from tidetimes.stations import StationCatalog
from tidetimes.types import SOURCE_NOAA, Coordinate, HeightSample, Station, TideSeries
from tidetimes.util import utc_now


class TidePipeline:
    """Orchestrates station lookup, caching, fetching and the mock fallback."""

    def __init__(
        self,
        catalog: StationCatalog,
        fetcher: SeriesFetcher,
        cache: TideCache,
        detector: Optional[ExtremaDetector] = None,
        mock: Optional[MockSeriesGenerator] = None,
        config: config_lib.PipelineConfig = config_lib.DEFAULT,
    ) -> None:
        self.catalog = catalog
        self.fetcher = fetcher
        self.cache = cache
        self.detector = detector or ExtremaDetector()
        self.mock = mock or MockSeriesGenerator()
        self.config = config
        self.last_coordinate: Optional[Coordinate] = None

    @classmethod
    def create(
        cls,
        session: aiohttp.ClientSession,
        config: config_lib.PipelineConfig = config_lib.DEFAULT,
        store: Optional[KeyValueStore] = None,
    ) -> "TidePipeline":
        """Wire a pipeline against the live NOAA CO-OPS API.

        Args:
            session: Shared aiohttp session
            config: Pipeline configuration
            store: Durable cache store; defaults to a JSON file when
                config.cache_path is set, otherwise memory only
        """
        client = CoopsApi(session=session, config=config)
        if store is None:
            store = JsonFileStore(config.cache_path) if config.cache_path else InMemoryStore()
        return cls(
            catalog=StationCatalog(fetch=client.stations),
            fetcher=SeriesFetcher(client, config=config),
            cache=TideCache(store=store, ttl=config.cache_ttl),
            config=config,
        )

    def log(
        self, message: str, level: int = logging.INFO, station_id: Optional[str] = None
    ) -> None:
        """Log a message with standardized formatting including station ID."""
        prefix = f"[{station_id}][pipeline]" if station_id else "[pipeline]"
        logging.log(level, f"{prefix} {message}")

    async def get_tide_data(self, coordinate: Coordinate) -> TideSeries:
        """Return tide data for a coordinate. Never raises.

        Failures anywhere in station resolution or fetching (including
        timeouts) produce the mock series instead.
        """
        try:
            return await asyncio.wait_for(
                self._resolve_and_fetch(coordinate),
                timeout=self.config.pipeline_timeout,
            )
        except Exception as e:
            self.log(
                f"Error fetching tide data for {coordinate}, falling back to mock data: "
                f"{e.__class__.__name__}: {e}",
                logging.WARNING,
            )
            return self.mock.generate(coordinate)

    async def on_location_selected(self, coordinate: Coordinate) -> TideSeries:
        """Handle a newly selected location by fetching its tide data."""
        self.last_coordinate = coordinate
        return await self.get_tide_data(coordinate)

    async def _resolve_and_fetch(self, coordinate: Coordinate) -> TideSeries:
        station = await self.catalog.nearest(coordinate)

        # The durable store does blocking file I/O
        cached = await asyncio.to_thread(self.cache.get, station.id)
        if cached is not None:
            self.log("Returning cached tide data", station_id=station.id)
            return cached

        now = utc_now()
        window_start, window_end = self.fetcher.window(now)
        samples = await self.fetcher.fetch(station, window_start, window_end)
        series = self._assemble(station, samples)

        try:
            await asyncio.to_thread(self.cache.put, station.id, series)
        except PersistenceError as e:
            self.log(f"Could not persist tide data: {e}", logging.WARNING, station.id)
        return series

    def _assemble(self, station: Station, samples: list[HeightSample]) -> TideSeries:
        extremes = self.detector.derive(samples)
        self.log(
            f"Derived {len(extremes)} extremes from {len(samples)} readings",
            station_id=station.id,
        )
        return TideSeries(
            # Cache entries are shared by every caller resolving to this station
            request_coordinate=station.coordinate,
            response_coordinate=station.coordinate,
            source_label=SOURCE_NOAA,
            attribution=config_lib.NOAA_ATTRIBUTION,
            samples=tuple(samples),
            extremes=tuple(extremes),
        )
