"""Input validation for the analytics core."""

from typing import Sequence
import logging
import numpy as np

from .exceptions import InvalidInputError

logger = logging.getLogger(__name__)


class SeriesValidator:
    """Validates and normalizes numeric series before analysis."""

    def __init__(self, min_trend_points: int = 2):
        """
        Initialize validator.

        Args:
            min_trend_points: Minimum series length for regression
        """
        self.min_trend_points = min_trend_points

    def as_array(self, series: Sequence[float], name: str = "series") -> np.ndarray:
        """
        Convert a series to a 1-D float array.

        Raises:
            InvalidInputError: If the values are not numeric, not 1-D,
                or contain NaN/inf
        """
        try:
            values = np.asarray(series, dtype=float)
        except (TypeError, ValueError) as e:
            raise InvalidInputError(f"{name} must contain only numbers: {e}") from e

        if values.ndim != 1:
            raise InvalidInputError(f"{name} must be one-dimensional")
        if values.size and not np.all(np.isfinite(values)):
            raise InvalidInputError(f"{name} contains NaN or infinite values")
        return values

    def validate_trend(self, series: Sequence[float]) -> np.ndarray:
        """Series usable for OLS trend detection (non-negative KPI values)."""
        values = self.as_array(series)
        if values.size < self.min_trend_points:
            raise InvalidInputError(
                f"Trend detection needs at least {self.min_trend_points} points, "
                f"got {values.size}"
            )
        if np.any(values < 0):
            raise InvalidInputError(
                f"KPI values must be non-negative, got minimum {values.min():g}"
            )
        return values

    def validate_forecast(
        self,
        series: Sequence[float],
        trend_line: Sequence[float],
        horizon: int
    ) -> tuple:
        """Series, fitted line and horizon usable for forecasting."""
        if isinstance(horizon, bool) or not isinstance(horizon, (int, np.integer)):
            raise InvalidInputError(f"Forecast horizon must be an integer, got {horizon!r}")
        if horizon < 1:
            raise InvalidInputError(f"Forecast horizon must be >= 1, got {horizon}")

        values = self.validate_trend(series)
        line = self.as_array(trend_line, name="trend line")
        if line.size != values.size:
            raise InvalidInputError(
                f"Trend line length {line.size} does not match series length {values.size}"
            )
        return values, line, int(horizon)
