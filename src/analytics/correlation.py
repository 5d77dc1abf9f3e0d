"""Pearson correlation between two KPI series."""

from typing import Optional, Sequence, Tuple
import logging
import numpy as np
from scipy import stats

from .base_models import CorrelationDirection, CorrelationReport, CorrelationStrength
from .validation import SeriesValidator

logger = logging.getLogger(__name__)


def _aligned(x: Sequence[float], y: Sequence[float]) -> Tuple[np.ndarray, np.ndarray]:
    """First ``min(len(x), len(y))`` values of each series."""
    validator = SeriesValidator()
    xa = validator.as_array(x, name="x")
    ya = validator.as_array(y, name="y")
    n = min(xa.size, ya.size)
    return xa[:n], ya[:n]


def calculate_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Pearson correlation coefficient.

    Only the first ``min(len(x), len(y))`` values are compared.
    Undefined cases resolve to 0 (empty input, zero variance on either
    side); a series compared with itself is exactly 1.

    Returns:
        Coefficient in [-1, 1]
    """
    xa, ya = _aligned(x, y)
    if xa.size == 0:
        return 0.0
    if x is y or np.array_equal(xa, ya):
        return 1.0

    # ptp is exact on constant input; the squared-deviation sums are not
    if np.ptp(xa) == 0 or np.ptp(ya) == 0:
        return 0.0

    dx = xa - xa.mean()
    dy = ya - ya.mean()
    denom_x = float((dx * dx).sum())
    denom_y = float((dy * dy).sum())
    r = float((dx * dy).sum()) / np.sqrt(denom_x * denom_y)
    return float(np.clip(r, -1.0, 1.0))


class CorrelationAnalyzer:
    """Coefficient plus strength/direction bands for narrative use."""

    def __init__(
        self,
        strong: float = 0.7,
        moderate: float = 0.4,
        weak: float = 0.2
    ):
        """
        Initialize analyzer.

        Args:
            strong: Minimum |r| for a strong relationship
            moderate: Minimum |r| for a moderate relationship
            weak: Minimum |r| for a weak relationship
        """
        self.strong = strong
        self.moderate = moderate
        self.weak = weak

    def analyze(self, x: Sequence[float], y: Sequence[float]) -> CorrelationReport:
        """
        Correlate two series and interpret the result.

        Args:
            x: First KPI series
            y: Second KPI series

        Returns:
            CorrelationReport
        """
        r = calculate_correlation(x, y)
        xa, ya = _aligned(x, y)

        report = CorrelationReport(
            coefficient=r,
            strength=self.strength(r),
            direction=self.direction(r),
            sample_size=int(xa.size),
            p_value=self._p_value(xa, ya)
        )
        logger.debug(
            "Correlation: r=%.4f n=%d strength=%s",
            r, report.sample_size, report.strength.value
        )
        return report

    def strength(self, r: float) -> CorrelationStrength:
        magnitude = abs(r)
        if magnitude >= self.strong:
            return CorrelationStrength.STRONG
        if magnitude >= self.moderate:
            return CorrelationStrength.MODERATE
        if magnitude >= self.weak:
            return CorrelationStrength.WEAK
        return CorrelationStrength.NEGLIGIBLE

    @staticmethod
    def direction(r: float) -> CorrelationDirection:
        if r > 0:
            return CorrelationDirection.POSITIVE
        if r < 0:
            return CorrelationDirection.NEGATIVE
        return CorrelationDirection.NONE

    @staticmethod
    def _p_value(xa: np.ndarray, ya: np.ndarray) -> Optional[float]:
        """Two-sided p-value, None where Pearson's r is undefined."""
        if xa.size < 3 or np.ptp(xa) == 0 or np.ptp(ya) == 0:
            return None
        result = stats.pearsonr(xa, ya)
        p_value = float(result[1])
        if np.isnan(p_value):
            return None
        return p_value
