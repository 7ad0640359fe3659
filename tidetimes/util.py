"""Shared utilities."""

# Standard library imports
import datetime
import math

# Mean Earth radius used for great-circle distances
EARTH_RADIUS_METERS = 6_371_000.0


def utc_now() -> datetime.datetime:
    """Returns the current time in UTC as a naive datetime (without timezone information).

    All timestamps in the application are naive UTC datetimes. Conversion to
    epoch seconds happens only at the JSON boundary.
    """
    # Get timezone-aware UTC time, then strip the timezone to make it naive
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def to_epoch(timestamp: datetime.datetime) -> float:
    """Convert a naive UTC datetime to Unix epoch seconds.

    Raises:
        ValueError: If the datetime carries timezone info
    """
    if timestamp.tzinfo is not None:
        raise ValueError("Expected naive UTC datetime; got timezone-aware value")
    return timestamp.replace(tzinfo=datetime.timezone.utc).timestamp()


def from_epoch(seconds: float) -> datetime.datetime:
    """Convert Unix epoch seconds to a naive UTC datetime."""
    return datetime.datetime.fromtimestamp(seconds, datetime.timezone.utc).replace(
        tzinfo=None
    )


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two points given in degrees."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = (
        math.sin(dphi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    )
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
