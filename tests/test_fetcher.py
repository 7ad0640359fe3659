"""Tests for prediction series fetching and parsing."""

# Standard library imports
import datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

# Third-party imports
import pandas as pd
import pytest

# Local imports
from tidetimes.clients.base import NetworkError, ParseError
from tidetimes.clients.coops import CoopsApi
from tidetimes.fetcher import SeriesFetcher, frame_to_samples, parse_predictions
from tidetimes.types import Station


@pytest.fixture
def mock_client() -> MagicMock:
    client = MagicMock(spec=CoopsApi)
    client.predictions = AsyncMock()
    return client


@pytest.fixture
def fetcher(mock_client: MagicMock) -> SeriesFetcher:
    return SeriesFetcher(mock_client)


def test_parse_predictions(prediction_records: list[dict[str, Any]]) -> None:
    df = parse_predictions(prediction_records)

    assert len(df) == 49
    assert list(df.columns) == ["height"]
    assert df.index.name == "time"
    assert df.index[0] == pd.Timestamp("2025-04-19 00:00")
    assert df.index.is_monotonic_increasing
    assert df["height"].iloc[0] == pytest.approx(1.2)


def test_parse_predictions_sorts_input() -> None:
    records = [
        {"t": "2025-04-19 01:00", "v": "0.30"},
        {"t": "2025-04-19 00:00", "v": "0.10"},
        {"t": "2025-04-19 00:30", "v": "0.20"},
    ]
    samples = frame_to_samples(parse_predictions(records))

    assert [s.timestamp for s in samples] == [
        datetime.datetime(2025, 4, 19, 0, 0),
        datetime.datetime(2025, 4, 19, 0, 30),
        datetime.datetime(2025, 4, 19, 1, 0),
    ]
    assert [s.height for s in samples] == [0.1, 0.2, 0.3]


@pytest.mark.parametrize(
    "records",
    [
        [{"t": "2025/04/19 00:00", "v": "0.1"}],
        [{"t": "not a time", "v": "0.1"}],
        [{"t": "2025-04-19 00:00", "v": "0.1"}, {"t": "2025-04-19 00:30", "v": "abc"}],
        [{"t": "2025-04-19 00:00"}],
        [{"v": "0.1"}],
        [],
    ],
    ids=[
        "wrong-date-format",
        "garbage-time",
        "non-numeric-value",
        "missing-value",
        "missing-time",
        "empty",
    ],
)
def test_parse_predictions_rejects_bad_records(records: list[dict[str, Any]]) -> None:
    with pytest.raises(ParseError):
        parse_predictions(records)


def test_parse_predictions_rejects_duplicate_timestamps() -> None:
    records = [
        {"t": "2025-04-19 00:00", "v": "0.1"},
        {"t": "2025-04-19 00:00", "v": "0.2"},
    ]
    with pytest.raises(ParseError):
        parse_predictions(records)


def test_window(fetcher: SeriesFetcher) -> None:
    now = datetime.datetime(2025, 4, 19, 12, 15)
    start, end = fetcher.window(now)
    assert start == datetime.datetime(2025, 4, 19, 0, 15)
    assert end == datetime.datetime(2025, 4, 20, 0, 15)


@pytest.mark.asyncio
async def test_fetch(
    fetcher: SeriesFetcher,
    mock_client: MagicMock,
    battery: Station,
    prediction_records: list[dict[str, Any]],
) -> None:
    mock_client.predictions.return_value = list(reversed(prediction_records))
    start = datetime.datetime(2025, 4, 19, 0, 0)
    end = datetime.datetime(2025, 4, 20, 0, 0)

    samples = await fetcher.fetch(battery, start, end)

    mock_client.predictions.assert_awaited_once_with("8518750", start, end)
    assert len(samples) == 49
    timestamps = [s.timestamp for s in samples]
    assert timestamps == sorted(timestamps)
    assert len(set(timestamps)) == len(timestamps)


@pytest.mark.asyncio
async def test_fetch_propagates_client_errors(
    fetcher: SeriesFetcher, mock_client: MagicMock, battery: Station
) -> None:
    mock_client.predictions.side_effect = NetworkError("Connection reset")
    with pytest.raises(NetworkError, match="Connection reset"):
        await fetcher.fetch(
            battery, datetime.datetime(2025, 4, 19), datetime.datetime(2025, 4, 20)
        )


@pytest.mark.asyncio
async def test_fetch_single_bad_record_fails_whole_fetch(
    fetcher: SeriesFetcher,
    mock_client: MagicMock,
    battery: Station,
    prediction_records: list[dict[str, Any]],
) -> None:
    prediction_records[10]["v"] = "n/a"
    mock_client.predictions.return_value = prediction_records
    with pytest.raises(ParseError):
        await fetcher.fetch(
            battery, datetime.datetime(2025, 4, 19), datetime.datetime(2025, 4, 20)
        )
