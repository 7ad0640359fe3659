"""High and low tide detection over a height series."""

# Standard library imports
from typing import Sequence

# Third-party imports
import numpy as np

# Local imports
from tidetimes.types import HeightSample, TideCategory, TideExtreme


class ExtremaDetector:
    """Derives high/low tides from a sampled height curve.

    A sample is a High when its height is strictly greater than both neighbors
    and a Low when strictly less. Plateaus never qualify, and the first and last
    samples are never classified because they lack a neighbor on one side, so a
    turning point that falls exactly on the window edge is not reported.
    """

    def derive(self, samples: Sequence[HeightSample]) -> list[TideExtreme]:
        """Return the local extrema of a timestamp-ordered series, in order."""
        if len(samples) < 3:
            return []

        heights = np.fromiter((s.height for s in samples), dtype=float, count=len(samples))
        middle = heights[1:-1]
        is_high = (middle > heights[:-2]) & (middle > heights[2:])
        is_low = (middle < heights[:-2]) & (middle < heights[2:])

        extremes = []
        for offset in np.flatnonzero(is_high | is_low):
            sample = samples[offset + 1]
            extremes.append(
                TideExtreme(
                    timestamp=sample.timestamp,
                    height=sample.height,
                    type=TideCategory.HIGH if is_high[offset] else TideCategory.LOW,
                )
            )
        return extremes


def derive_extremes(samples: Sequence[HeightSample]) -> list[TideExtreme]:
    """Module-level shortcut for ExtremaDetector().derive()."""
    return ExtremaDetector().derive(samples)
