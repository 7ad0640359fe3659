"""Utility functions for tests."""

import json
from typing import Any

from tidetimes.types import TideSeries


def assert_json_serializable(obj: Any) -> None:
    """Assert that an object is JSON serializable.

    Raises:
        AssertionError: If the object is not JSON serializable.
    """
    try:
        json.dumps(obj)
    except (TypeError, ValueError) as e:
        raise AssertionError(f"Object is not JSON serializable: {e}") from e


def assert_strictly_ascending(series: TideSeries) -> None:
    """Assert samples are non-empty and strictly ascending with no duplicates."""
    assert len(series.samples) > 0
    timestamps = [s.timestamp for s in series.samples]
    assert all(a < b for a, b in zip(timestamps, timestamps[1:]))
