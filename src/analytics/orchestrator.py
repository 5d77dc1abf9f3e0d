"""Composes trend, forecast and drivers into one analysis."""

from typing import Optional, Sequence
import logging
import numpy as np

from .base_models import AnalysisResult, CorrelationReport
from .correlation import CorrelationAnalyzer
from .drivers import DriverSelector
from .forecasting import TrendForecaster
from .kpi_catalog import get_kpi
from .trend import TrendDetector

logger = logging.getLogger(__name__)


class AnalysisOrchestrator:
    """
    Runs TrendDetector -> TrendForecaster -> DriverSelector.

    Holds no per-request state, so one instance can serve concurrent
    requests. Any component error propagates unchanged.
    """

    def __init__(
        self,
        detector: Optional[TrendDetector] = None,
        forecaster: Optional[TrendForecaster] = None,
        driver_selector: Optional[DriverSelector] = None,
        correlation_analyzer: Optional[CorrelationAnalyzer] = None
    ):
        self.detector = detector or TrendDetector()
        self.forecaster = forecaster or TrendForecaster()
        self.driver_selector = driver_selector or DriverSelector()
        self.correlation_analyzer = correlation_analyzer or CorrelationAnalyzer()

    def analyze(
        self,
        series: Sequence[float],
        category: str,
        horizon: Optional[int] = None,
        rng: Optional[np.random.Generator] = None
    ) -> AnalysisResult:
        """
        Full analysis of one KPI series.

        Args:
            series: Chronological KPI values (at least 2)
            category: KPI category for driver selection
            horizon: Forecast periods (forecaster default when omitted)
            rng: Random source for driver sampling

        Returns:
            AnalysisResult

        Raises:
            InvalidInputError: Series too short or horizon < 1
            UnknownCategoryError: Category without driver pools
        """
        trend = self.detector.detect(series)
        forecast = self.forecaster.forecast(series, trend.line, horizon)
        drivers = self.driver_selector.select(category, trend.label, rng=rng)

        logger.info(
            "Analysis complete: category=%s n=%d label=%s horizon=%d",
            category, len(trend.line), trend.label.value, forecast.horizon
        )

        return AnalysisResult(
            data=[float(v) for v in series],
            category=category,
            trend=trend,
            forecast=forecast,
            drivers=drivers
        )

    def analyze_kpi(
        self,
        kpi_id: str,
        series: Sequence[float],
        horizon: Optional[int] = None,
        rng: Optional[np.random.Generator] = None
    ) -> AnalysisResult:
        """Analysis for a catalog KPI, using its registered category."""
        kpi = get_kpi(kpi_id)
        return self.analyze(series, kpi.category, horizon=horizon, rng=rng)

    def correlate(self, x: Sequence[float], y: Sequence[float]) -> CorrelationReport:
        """Correlation of two KPI series, independent of any analysis."""
        return self.correlation_analyzer.analyze(x, y)
