"""Tide station catalog and nearest-station lookup.

The catalog holds a read-only snapshot of the tide-prediction stations. It is
loaded once, on first use, through an injected async fetch capability (in
production, CoopsApi.stations). Nearest-station queries are an exact linear
scan using the haversine great-circle distance on a spherical Earth.
"""

# Standard library imports
import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional, Sequence

# Third-party imports
import numpy as np
from pydantic import ValidationError

# Local imports
from tidetimes.clients.base import NoStationsAvailable, ParseError
from tidetimes.types import Coordinate, Station
from tidetimes.util import EARTH_RADIUS_METERS, haversine_meters

StationFetcher = Callable[[], Awaitable[Sequence[Mapping[str, Any]]]]


def parse_station(record: Mapping[str, Any]) -> Station:
    """Convert a raw station directory record into a Station.

    Raises:
        ParseError: If the record is missing fields or has invalid coordinates
    """
    try:
        return Station(
            id=str(record["id"]),
            name=str(record.get("name", "")),
            coordinate=Coordinate(
                latitude=float(record["lat"]), longitude=float(record["lng"])
            ),
        )
    except (KeyError, TypeError, ValueError, ValidationError) as e:
        raise ParseError(f"Malformed station record {dict(record)!r}: {e}") from e


class StationCatalog:
    """Station snapshot answering nearest-station queries.

    Ties between equidistant stations go to the one that appears first in
    catalog order, so results are deterministic for a given snapshot.
    """

    def __init__(
        self,
        fetch: Optional[StationFetcher] = None,
        stations: Optional[Iterable[Station]] = None,
    ) -> None:
        """Initialize the catalog.

        Args:
            fetch: Async callable returning raw station records; used on first query
            stations: Pre-built stations; when given, no fetch is performed
        """
        if fetch is None and stations is None:
            raise ValueError("StationCatalog needs either a fetch callable or stations")
        self._fetch = fetch
        self._stations: Optional[tuple[Station, ...]] = None
        self._latitudes: Optional[np.ndarray] = None
        self._longitudes: Optional[np.ndarray] = None
        self._lock = asyncio.Lock()
        if stations is not None:
            self._set_stations(tuple(stations))

    def _set_stations(self, stations: tuple[Station, ...]) -> None:
        self._latitudes = np.radians([s.coordinate.latitude for s in stations])
        self._longitudes = np.radians([s.coordinate.longitude for s in stations])
        self._stations = stations

    @property
    def is_loaded(self) -> bool:
        return self._stations is not None

    @property
    def stations(self) -> tuple[Station, ...]:
        if self._stations is None:
            raise ValueError("Station catalog not yet loaded")
        return self._stations

    def __len__(self) -> int:
        return len(self._stations) if self._stations is not None else 0

    async def load(self) -> tuple[Station, ...]:
        """Load the station snapshot if it has not been loaded yet.

        A failed load leaves the catalog unloaded, so the next call retries.

        Raises:
            NetworkError, HttpStatusError, ParseError: From the fetch capability
        """
        if self._stations is not None:
            return self._stations
        async with self._lock:
            # Another task may have finished loading while we waited
            if self._stations is not None:
                return self._stations
            if self._fetch is None:
                raise ValueError("Station catalog has no fetch callable")
            records = await self._fetch()
            stations = tuple(parse_station(r) for r in records)
            self._set_stations(stations)
            logging.info(f"[catalog] Station catalog loaded with {len(stations)} stations")
            return stations

    def distances(self, coordinate: Coordinate) -> np.ndarray:
        """Haversine distance in meters from a coordinate to every station, in catalog order."""
        if self._latitudes is None or self._longitudes is None:
            raise ValueError("Station catalog not yet loaded")
        phi1 = np.radians(coordinate.latitude)
        lambda1 = np.radians(coordinate.longitude)
        dphi = self._latitudes - phi1
        dlambda = self._longitudes - lambda1
        a = (
            np.sin(dphi / 2) ** 2
            + np.cos(phi1) * np.cos(self._latitudes) * np.sin(dlambda / 2) ** 2
        )
        return EARTH_RADIUS_METERS * 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))

    async def nearest(self, coordinate: Coordinate) -> Station:
        """Return the station closest to a coordinate.

        Raises:
            NoStationsAvailable: If the catalog is empty
            NetworkError, HttpStatusError, ParseError: If the catalog could not be loaded
        """
        stations = await self.load()
        if not stations:
            raise NoStationsAvailable("Station catalog is empty")

        # argmin returns the first index among equal minima
        index = int(np.argmin(self.distances(coordinate)))
        station = stations[index]
        logging.info(
            f"[{station.id}][catalog] Nearest station to {coordinate} is {station.name} "
            f"({distance_to(coordinate, station) / 1000:.0f} km)"
        )
        return station


def distance_to(coordinate: Coordinate, station: Station) -> float:
    """Great-circle distance in meters between a coordinate and a station."""
    return haversine_meters(
        coordinate.latitude,
        coordinate.longitude,
        station.coordinate.latitude,
        station.coordinate.longitude,
    )
