"""Linear trend detection over an indexed KPI series."""

from typing import Sequence, Tuple
import logging
import numpy as np

from .base_models import TrendLabel, TrendResult
from .validation import SeriesValidator

logger = logging.getLogger(__name__)


class TrendDetector:
    """
    Ordinary least-squares trend over ``i = 0..n-1``.

    The label compares the slope against fractions of the first value
    of the series, so a slope of 1.0 means "strong" for a KPI around 50
    and "stable" for a KPI around 10 000.
    """

    def __init__(
        self,
        strong_threshold: float = 0.015,
        moderate_threshold: float = 0.005
    ):
        """
        Initialize detector.

        Args:
            strong_threshold: Slope/first-value ratio for strong growth/decline
            moderate_threshold: Slope/first-value ratio for moderate growth/decline
        """
        if not 0 <= moderate_threshold <= strong_threshold:
            raise ValueError("Expected 0 <= moderate_threshold <= strong_threshold")
        self.strong_threshold = strong_threshold
        self.moderate_threshold = moderate_threshold
        self.validator = SeriesValidator()

    def detect(self, series: Sequence[float]) -> TrendResult:
        """
        Fit the trend line and label it.

        Args:
            series: Chronological KPI values, at least 2 points

        Returns:
            TrendResult with the fitted line (same length as input)

        Raises:
            InvalidInputError: If fewer than 2 points are given
        """
        values = self.validator.validate_trend(series)
        slope, intercept = self._fit(values)

        index = np.arange(values.size, dtype=float)
        line = slope * index + intercept
        label = self.classify(slope, float(values[0]))

        logger.debug(
            "Trend fitted: n=%d slope=%.6g intercept=%.6g label=%s",
            values.size, slope, intercept, label.value
        )

        return TrendResult(
            line=line.tolist(),
            label=label,
            slope=slope,
            intercept=intercept
        )

    def classify(self, slope: float, first_value: float) -> TrendLabel:
        """
        Map a slope to a label relative to the first value.

        With a zero first value the relative bands collapse, so any
        positive slope is strong growth and any negative slope is a
        strong decline.
        """
        if first_value == 0:
            if slope > 0:
                return TrendLabel.STRONG_GROWTH
            if slope < 0:
                return TrendLabel.STRONG_DECLINE
            return TrendLabel.STABLE

        scale = abs(first_value)
        if slope > self.strong_threshold * scale:
            return TrendLabel.STRONG_GROWTH
        if slope > self.moderate_threshold * scale:
            return TrendLabel.MODERATE_GROWTH
        if slope < -self.strong_threshold * scale:
            return TrendLabel.STRONG_DECLINE
        if slope < -self.moderate_threshold * scale:
            return TrendLabel.MODERATE_DECLINE
        return TrendLabel.STABLE

    def _fit(self, values: np.ndarray) -> Tuple[float, float]:
        """Closed-form OLS slope and intercept."""
        n = values.size
        index = np.arange(n, dtype=float)

        sum_x = index.sum()
        sum_y = values.sum()
        sum_xy = (index * values).sum()
        sum_xx = (index * index).sum()

        slope = (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x)
        intercept = (sum_y - slope * sum_x) / n
        return float(slope), float(intercept)
