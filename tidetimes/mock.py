"""Synthetic tide series used when NOAA data cannot be obtained."""

# Standard library imports
import datetime
import math
from typing import Optional

# Local imports
from tidetimes.config import MOCK_ATTRIBUTION
from tidetimes.types import (
    SOURCE_MOCK,
    Coordinate,
    HeightSample,
    TideCategory,
    TideExtreme,
    TideSeries,
)
from tidetimes.util import utc_now

BASE_HEIGHT = 1.5  # meters
AMPLITUDE = 0.7  # meters
HOURS_EACH_SIDE = 12
EXTREME_EVERY_HOURS = 6


class MockSeriesGenerator:
    """Generates a sinusoidal 25-hour series around the current time.

    The output depends only on the coordinate and the current time; the hour
    of day shifts the phase of the wave. Extremes are labeled every six hours
    by the sign of the sine term rather than found with ExtremaDetector, and
    carry the nominal peak and trough heights.
    """

    def generate(
        self, coordinate: Coordinate, now: Optional[datetime.datetime] = None
    ) -> TideSeries:
        now = now or utc_now()
        phase_shift = now.hour / 12.0 * math.pi

        samples = []
        extremes = []
        for hour in range(-HOURS_EACH_SIDE, HOURS_EACH_SIDE + 1):
            timestamp = now + datetime.timedelta(hours=hour)
            wave = math.sin((hour / 6.0 + phase_shift) * math.pi)
            samples.append(
                HeightSample(timestamp=timestamp, height=BASE_HEIGHT + AMPLITUDE * wave)
            )
            if hour % EXTREME_EVERY_HOURS == 0:
                is_high = wave > 0
                extremes.append(
                    TideExtreme(
                        timestamp=timestamp,
                        height=BASE_HEIGHT + AMPLITUDE if is_high else BASE_HEIGHT - AMPLITUDE,
                        type=TideCategory.HIGH if is_high else TideCategory.LOW,
                    )
                )

        return TideSeries(
            request_coordinate=coordinate,
            response_coordinate=coordinate,
            source_label=SOURCE_MOCK,
            attribution=MOCK_ATTRIBUTION,
            samples=tuple(samples),
            extremes=tuple(extremes),
        )
