"""Type definitions for tidetimes.

This module contains type definitions used throughout the application, separated into
two main categories:
1. Internal types - Immutable value objects produced and consumed by the pipeline
2. Document types - The JSON interchange form of a tide series (API responses and
   persisted cache records)
"""

# Standard library imports
import datetime
import enum
import json
from typing import Annotated, List, Sequence, Tuple

# Third-party imports
from pydantic import BaseModel, ConfigDict, Field, model_validator

# Local imports
from tidetimes.util import from_epoch, to_epoch

# Provenance labels for TideSeries.source_label
SOURCE_NOAA = "NOAA"
SOURCE_MOCK = "MOCK"


#############################################################
# INTERNAL TYPES - Used for internal data processing         #
#############################################################


class TideCategory(enum.Enum):
    HIGH = "High"
    LOW = "Low"


class Coordinate(BaseModel, frozen=True):
    """A point on the Earth's surface in signed decimal degrees."""

    model_config = ConfigDict(extra="forbid")

    latitude: Annotated[
        float,
        Field(ge=-90, le=90, description="Latitude in decimal degrees (-90 to 90)"),
    ]
    longitude: Annotated[
        float,
        Field(
            ge=-180, le=180, description="Longitude in decimal degrees (-180 to 180)"
        ),
    ]

    def __str__(self) -> str:
        return f"({self.latitude:.4f}, {self.longitude:.4f})"


class Station(BaseModel, frozen=True):
    """A tide prediction station from the station directory."""

    model_config = ConfigDict(extra="forbid")

    id: Annotated[str, Field(min_length=1, description="Station identifier")]
    name: Annotated[str, Field(description="Human-readable station name")]
    coordinate: Coordinate


class HeightSample(BaseModel, frozen=True):
    """One point on the continuous tide curve."""

    model_config = ConfigDict(extra="forbid")

    timestamp: datetime.datetime  # Naive UTC
    height: float  # Meters relative to MLLW

    @property
    def dt(self) -> float:
        """Unix epoch seconds of the sample."""
        return to_epoch(self.timestamp)


class TideExtreme(BaseModel, frozen=True):
    """A high or low tide event, derived from a height series."""

    model_config = ConfigDict(extra="forbid")

    timestamp: datetime.datetime  # Naive UTC
    height: float
    type: TideCategory

    @property
    def dt(self) -> float:
        return to_epoch(self.timestamp)

    @property
    def is_high(self) -> bool:
        return self.type is TideCategory.HIGH


def _check_strictly_ascending(
    items: Sequence[HeightSample | TideExtreme], name: str
) -> None:
    for prev, curr in zip(items, items[1:]):
        if curr.timestamp <= prev.timestamp:
            raise ValueError(
                f"{name} must be strictly ascending by timestamp: "
                f"{curr.timestamp} follows {prev.timestamp}"
            )


class TideSeries(BaseModel, frozen=True):
    """Result of the tide pipeline: a height curve plus its high/low tides.

    Instances are immutable once constructed, so the same object can be cached
    and handed to any number of readers. `source_label` tells real NOAA data
    ("NOAA") apart from the synthetic fallback ("MOCK").
    """

    model_config = ConfigDict(extra="forbid")

    request_coordinate: Coordinate
    response_coordinate: Coordinate
    source_label: Annotated[str, Field(description="'NOAA' or 'MOCK'")]
    attribution: Annotated[str, Field(description="Data attribution text")]
    samples: Tuple[HeightSample, ...]
    extremes: Tuple[TideExtreme, ...] = ()
    status: int = 200
    call_count: int = 1

    @model_validator(mode="after")
    def _check_ordering(self) -> "TideSeries":
        _check_strictly_ascending(self.samples, "samples")
        _check_strictly_ascending(self.extremes, "extremes")
        return self

    @property
    def is_mock(self) -> bool:
        return self.source_label == SOURCE_MOCK

    def to_document(self) -> "TideSeriesDocument":
        """Convert to the JSON interchange form."""
        return TideSeriesDocument(
            status=self.status,
            call_count=self.call_count,
            request_lat=self.request_coordinate.latitude,
            request_lon=self.request_coordinate.longitude,
            response_lat=self.response_coordinate.latitude,
            response_lon=self.response_coordinate.longitude,
            atlas=self.source_label,
            copyright=self.attribution,
            heights=[ApiHeight(dt=s.dt, height=s.height) for s in self.samples],
            extremes=[
                ApiExtreme(dt=e.dt, height=e.height, type=e.type.value)
                for e in self.extremes
            ],
        )

    @classmethod
    def from_document(cls, doc: "TideSeriesDocument") -> "TideSeries":
        """Build a TideSeries from its JSON interchange form."""
        return cls(
            request_coordinate=Coordinate(
                latitude=doc.request_lat, longitude=doc.request_lon
            ),
            response_coordinate=Coordinate(
                latitude=doc.response_lat, longitude=doc.response_lon
            ),
            source_label=doc.atlas,
            attribution=doc.copyright,
            samples=tuple(
                HeightSample(timestamp=from_epoch(h.dt), height=h.height)
                for h in doc.heights
            ),
            extremes=tuple(
                TideExtreme(
                    timestamp=from_epoch(e.dt),
                    height=e.height,
                    type=TideCategory(e.type),
                )
                for e in doc.extremes
            ),
            status=doc.status,
            call_count=doc.call_count,
        )

    def to_json(self) -> str:
        return self.to_document().model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, data: str | bytes) -> "TideSeries":
        return cls.from_document(TideSeriesDocument.model_validate_json(data))

    def to_dict(self) -> dict[str, object]:
        """Return the JSON interchange form as plain Python objects."""
        result: dict[str, object] = json.loads(self.to_json())
        return result


#############################################################
# DOCUMENT TYPES - JSON interchange form                     #
#############################################################


class ApiHeight(BaseModel):
    """A single height reading in the JSON document."""

    model_config = ConfigDict(extra="forbid")

    dt: float = Field(..., description="Unix epoch seconds")
    height: float = Field(..., description="Water level in meters above MLLW")


class ApiExtreme(BaseModel):
    """A single high/low tide in the JSON document."""

    model_config = ConfigDict(extra="forbid")

    dt: float = Field(..., description="Unix epoch seconds")
    height: float = Field(..., description="Water level in meters above MLLW")
    type: str = Field(..., pattern=r"^(High|Low)$", description="'High' or 'Low'")


class TideSeriesDocument(BaseModel):
    """Serialized TideSeries as exchanged with API clients and the cache store."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    status: int = Field(200, description="Status code of the originating request")
    call_count: int = Field(1, alias="callCount")
    request_lat: float = Field(..., alias="requestLat")
    request_lon: float = Field(..., alias="requestLon")
    response_lat: float = Field(..., alias="responseLat")
    response_lon: float = Field(..., alias="responseLon")
    atlas: str = Field(..., description="Source label: 'NOAA' or 'MOCK'")
    copyright: str = Field(..., description="Attribution text")
    heights: List[ApiHeight]
    extremes: List[ApiExtreme]
