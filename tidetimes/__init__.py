"""TideTimes: nearest-station tide predictions with a cached, never-failing pipeline."""
