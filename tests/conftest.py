"""Configuration for pytest.

Shared fixtures plus setup for integration tests that hit real NOAA CO-OPS API endpoints.
"""

# Standard library imports
import datetime
import math
from typing import Any

# Third-party imports
import pytest

# Local imports
from tidetimes.types import Coordinate, Station

# Real station to use for API availability check
TIDE_STATION = "8518750"  # NYC Battery - comprehensive station with good data coverage

# Start of the half-hourly prediction fixture
PREDICTIONS_START = datetime.datetime(2025, 4, 19, 0, 0)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add custom command line options to pytest."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests that hit live NOAA CO-OPS APIs",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as hitting live NOAA CO-OPS API service"
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Modify test collection to skip integration tests unless requested."""
    if not config.getoption("--run-integration"):
        skip_integration = pytest.mark.skip(
            reason="Need --run-integration option to run"
        )
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def make_prediction_records(count: int = 49) -> list[dict[str, Any]]:
    """Half-hourly {t, v} records following a 12.4 hour tide, as NOAA returns them."""
    records = []
    for i in range(count):
        t = PREDICTIONS_START + datetime.timedelta(minutes=30 * i)
        v = 1.2 + 0.9 * math.sin(2 * math.pi * (i * 0.5) / 12.42)
        records.append({"t": t.strftime("%Y-%m-%d %H:%M"), "v": f"{v:.3f}"})
    return records


@pytest.fixture
def prediction_records() -> list[dict[str, Any]]:
    """Raw NOAA prediction records spanning 24 hours."""
    return make_prediction_records()


@pytest.fixture
def station_records() -> list[dict[str, Any]]:
    """Raw NOAA station directory entries."""
    return [
        {"id": "8518750", "name": "The Battery", "lat": 40.7006, "lng": -74.0142},
        {"id": "9414290", "name": "San Francisco", "lat": 37.8063, "lng": -122.4659},
        {"id": "8443970", "name": "Boston", "lat": 42.3539, "lng": -71.0503},
    ]


@pytest.fixture
def battery() -> Station:
    return Station(
        id="8518750",
        name="The Battery",
        coordinate=Coordinate(latitude=40.7006, longitude=-74.0142),
    )
