"""Tests for value types and the JSON document form."""

# Standard library imports
import datetime
import json

# Third-party imports
import pytest
from pydantic import ValidationError

# Local imports
from tidetimes.mock import MockSeriesGenerator
from tidetimes.types import (
    SOURCE_NOAA,
    Coordinate,
    HeightSample,
    TideCategory,
    TideExtreme,
    TideSeries,
)
from tests.helpers import assert_json_serializable

START = datetime.datetime(2025, 4, 19, 0, 0)


@pytest.fixture
def noaa_series() -> TideSeries:
    samples = tuple(
        HeightSample(
            timestamp=START + datetime.timedelta(minutes=30 * i), height=h
        )
        for i, h in enumerate([0.412, 0.958, 1.337, 0.871, 0.205])
    )
    return TideSeries(
        request_coordinate=Coordinate(latitude=40.71, longitude=-74.0),
        response_coordinate=Coordinate(latitude=40.7006, longitude=-74.0142),
        source_label=SOURCE_NOAA,
        attribution="NOAA CO-OPS API",
        samples=samples,
        extremes=(
            TideExtreme(
                timestamp=samples[2].timestamp, height=1.337, type=TideCategory.HIGH
            ),
        ),
    )


def assert_series_close(a: TideSeries, b: TideSeries) -> None:
    assert a.source_label == b.source_label
    assert a.attribution == b.attribution
    assert a.request_coordinate.latitude == pytest.approx(b.request_coordinate.latitude, abs=1e-9)
    assert a.request_coordinate.longitude == pytest.approx(b.request_coordinate.longitude, abs=1e-9)
    assert a.response_coordinate.latitude == pytest.approx(b.response_coordinate.latitude, abs=1e-9)
    assert a.response_coordinate.longitude == pytest.approx(b.response_coordinate.longitude, abs=1e-9)
    assert len(a.samples) == len(b.samples)
    for x, y in zip(a.samples, b.samples):
        assert x.dt == pytest.approx(y.dt, abs=1e-6)
        assert x.height == pytest.approx(y.height, abs=1e-9)
    assert len(a.extremes) == len(b.extremes)
    for x, y in zip(a.extremes, b.extremes):
        assert x.dt == pytest.approx(y.dt, abs=1e-6)
        assert x.height == pytest.approx(y.height, abs=1e-9)
        assert x.type == y.type


def test_json_round_trip(noaa_series: TideSeries) -> None:
    restored = TideSeries.from_json(noaa_series.to_json())
    assert_series_close(restored, noaa_series)
    # Whole-minute timestamps survive exactly
    assert restored == noaa_series


def test_mock_series_round_trip() -> None:
    series = MockSeriesGenerator().generate(
        Coordinate(latitude=12.5, longitude=-45.25),
        now=datetime.datetime(2025, 4, 19, 7, 13, 52, 123456),
    )
    assert_series_close(TideSeries.from_json(series.to_json()), series)


def test_document_field_names(noaa_series: TideSeries) -> None:
    doc = noaa_series.to_dict()
    assert_json_serializable(doc)

    assert set(doc) == {
        "status",
        "callCount",
        "requestLat",
        "requestLon",
        "responseLat",
        "responseLon",
        "atlas",
        "copyright",
        "heights",
        "extremes",
    }
    assert doc["status"] == 200
    assert doc["callCount"] == 1
    assert doc["atlas"] == "NOAA"
    assert doc["requestLat"] == 40.71
    assert doc["responseLat"] == 40.7006
    assert doc["heights"][0] == {
        "dt": START.replace(tzinfo=datetime.timezone.utc).timestamp(),
        "height": 0.412,
    }
    assert doc["extremes"] == [
        {
            "dt": noaa_series.samples[2].dt,
            "height": 1.337,
            "type": "High",
        }
    ]


def test_document_rejects_unknown_extreme_type(noaa_series: TideSeries) -> None:
    doc = noaa_series.to_dict()
    doc["extremes"][0]["type"] = "Slack"  # type: ignore[index]
    with pytest.raises(ValidationError):
        TideSeries.from_json(json.dumps(doc))


@pytest.mark.parametrize(
    "lat,lon", [(90.1, 0), (-90.1, 0), (0, 180.1), (0, -180.1)]
)
def test_coordinate_range(lat: float, lon: float) -> None:
    with pytest.raises(ValidationError):
        Coordinate(latitude=lat, longitude=lon)


def test_coordinate_is_hashable_value() -> None:
    a = Coordinate(latitude=1.5, longitude=2.5)
    b = Coordinate(latitude=1.5, longitude=2.5)
    assert a == b
    assert len({a, b}) == 1


def test_series_is_immutable(noaa_series: TideSeries) -> None:
    with pytest.raises(ValidationError):
        noaa_series.source_label = "MOCK"  # type: ignore[misc]


def test_series_rejects_unsorted_samples(noaa_series: TideSeries) -> None:
    with pytest.raises(ValidationError, match="strictly ascending"):
        TideSeries(
            request_coordinate=noaa_series.request_coordinate,
            response_coordinate=noaa_series.response_coordinate,
            source_label=SOURCE_NOAA,
            attribution="",
            samples=tuple(reversed(noaa_series.samples)),
        )


def test_series_rejects_duplicate_timestamps(noaa_series: TideSeries) -> None:
    sample = noaa_series.samples[0]
    with pytest.raises(ValidationError, match="strictly ascending"):
        TideSeries(
            request_coordinate=noaa_series.request_coordinate,
            response_coordinate=noaa_series.response_coordinate,
            source_label=SOURCE_NOAA,
            attribution="",
            samples=(sample, sample),
        )


def test_extreme_helpers() -> None:
    extreme = TideExtreme(timestamp=START, height=0.1, type=TideCategory.LOW)
    assert not extreme.is_high
    assert extreme.dt == START.replace(tzinfo=datetime.timezone.utc).timestamp()
