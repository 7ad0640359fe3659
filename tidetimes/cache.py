"""Per-station tide series cache with a fixed time-to-live.

Entries expire lazily: an entry older than the TTL is treated as absent on
read but is not purged, and the next put for the same station overwrites it.
The cache always keeps entries in process memory; an optional durable
KeyValueStore additionally persists them as JSON records so they survive a
restart. When the durable store fails, put raises PersistenceError but the
in-memory entry keeps serving.
"""

# Standard library imports
import abc
import contextlib
import datetime
import json
import logging
import os
import tempfile
import threading
from typing import Optional

# Third-party imports
from pydantic import BaseModel, ConfigDict, ValidationError

# Local imports
from tidetimes import config as config_lib
from tidetimes.types import TideSeries, TideSeriesDocument
from tidetimes.util import from_epoch, to_epoch, utc_now

KEY_PREFIX = "tide_data_"


class PersistenceError(Exception):
    """The durable cache store could not be written."""


class KeyValueStore(abc.ABC):
    """String key-value storage capability."""

    @abc.abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value for a key, or None if absent."""
        ...

    @abc.abstractmethod
    def put(self, key: str, value: str) -> None:
        """Store a value, overwriting any previous one.

        Raises:
            PersistenceError: If the value could not be stored
        """
        ...


class InMemoryStore(KeyValueStore):
    """Thread-safe dictionary-backed store."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value


class JsonFileStore(KeyValueStore):
    """Store persisted as a single JSON object in a file.

    Writes go to a temporary file in the same directory which then atomically
    replaces the original.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._lock = threading.Lock()

    def _read_all(self) -> dict[str, str]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logging.warning(f"[cache] Ignoring unreadable cache file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logging.warning(f"[cache] Ignoring malformed cache file {self.path}")
            return {}
        return data

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def put(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = value
            directory = os.path.dirname(os.path.abspath(self.path))
            try:
                fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
            except OSError as e:
                raise PersistenceError(
                    f"Could not write cache file {self.path}: {e}"
                ) from e
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f)
                os.replace(tmp_path, self.path)
            except (OSError, TypeError, ValueError) as e:
                with contextlib.suppress(FileNotFoundError):
                    os.unlink(tmp_path)
                raise PersistenceError(
                    f"Could not write cache file {self.path}: {e}"
                ) from e


class CacheEntry(BaseModel, frozen=True):
    """A cached series and the time it was stored."""

    model_config = ConfigDict(extra="forbid")

    series: TideSeries
    stored_at: datetime.datetime  # Naive UTC

    def age(self, now: Optional[datetime.datetime] = None) -> datetime.timedelta:
        return (now or utc_now()) - self.stored_at

    def is_valid(
        self, ttl: datetime.timedelta, now: Optional[datetime.datetime] = None
    ) -> bool:
        """An entry is valid while its age does not exceed the TTL."""
        return self.age(now) <= ttl


class CacheRecord(BaseModel):
    """Persisted form of a CacheEntry. Both fields are required."""

    model_config = ConfigDict(extra="forbid")

    series: TideSeriesDocument
    stored_at: float  # Unix epoch seconds

    @classmethod
    def from_entry(cls, entry: CacheEntry) -> "CacheRecord":
        return cls(series=entry.series.to_document(), stored_at=to_epoch(entry.stored_at))

    def to_entry(self) -> CacheEntry:
        return CacheEntry(
            series=TideSeries.from_document(self.series),
            stored_at=from_epoch(self.stored_at),
        )


class TideCache:
    """Maps station IDs to previously computed tide series."""

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        ttl: datetime.timedelta = config_lib.DEFAULT.cache_ttl,
    ) -> None:
        """Initialize the cache.

        Args:
            store: Optional durable store; entries are always kept in memory too
            ttl: How long an entry stays valid
        """
        self.store = store
        self.ttl = ttl
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(station_id: str) -> str:
        return f"{KEY_PREFIX}{station_id}"

    def _load(self, station_id: str) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._entries.get(station_id)
        if entry is not None or self.store is None:
            return entry

        raw = self.store.get(self._key(station_id))
        if raw is None:
            return None
        try:
            entry = CacheRecord.model_validate_json(raw).to_entry()
        except (ValidationError, ValueError) as e:
            logging.warning(f"[{station_id}][cache] Discarding unreadable cache record: {e}")
            return None
        with self._lock:
            # Don't clobber an entry written by a concurrent put
            entry = self._entries.setdefault(station_id, entry)
        return entry

    def get_entry(self, station_id: str) -> Optional[CacheEntry]:
        """Return the raw entry for a station, expired or not."""
        return self._load(station_id)

    def get(self, station_id: str) -> Optional[TideSeries]:
        """Return the cached series for a station, or None if absent or expired."""
        entry = self._load(station_id)
        if entry is None:
            return None
        if not entry.is_valid(self.ttl):
            logging.info(
                f"[{station_id}][cache] Cached series expired "
                f"(age {entry.age().total_seconds():.0f}s)"
            )
            return None
        return entry.series

    def put(self, station_id: str, series: TideSeries) -> None:
        """Store a series for a station, overwriting any previous entry.

        The entry is written to memory first, so it is served by get() even
        when persisting it fails.

        Raises:
            PersistenceError: If the durable store could not be written
        """
        entry = CacheEntry(series=series, stored_at=utc_now())
        with self._lock:
            self._entries[station_id] = entry
        if self.store is not None:
            self.store.put(
                self._key(station_id), CacheRecord.from_entry(entry).model_dump_json(by_alias=True)
            )

    def age(self, station_id: str) -> Optional[datetime.timedelta]:
        """Age of the stored entry for a station, or None if there is none."""
        entry = self._load(station_id)
        return entry.age() if entry is not None else None
