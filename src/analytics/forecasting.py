"""Short-horizon KPI forecasting on top of the fitted trend."""

from typing import Dict, List, Optional, Sequence
from datetime import date
import logging
import numpy as np
import pandas as pd

from .base_models import AnalysisResult, ForecastResult
from .validation import SeriesValidator

logger = logging.getLogger(__name__)


class TrendForecaster:
    """
    Linear projection with seasonal residual reinjection.

    The last ``horizon`` residuals of the series against its trend line
    are replayed on top of the projected line, so a weekly cycle in the
    history carries over into a 7-day forecast.
    """

    def __init__(self, default_horizon: int = 7):
        """
        Initialize forecaster.

        Args:
            default_horizon: Periods to forecast when none are requested
        """
        self.default_horizon = default_horizon
        self.validator = SeriesValidator()

    def forecast(
        self,
        series: Sequence[float],
        trend_line: Sequence[float],
        horizon: Optional[int] = None
    ) -> ForecastResult:
        """
        Project the trend forward and add back the recent residuals.

        Args:
            series: Observed KPI values
            trend_line: Fitted line from TrendDetector, same length as series
            horizon: Number of periods to forecast (>= 1)

        Returns:
            ForecastResult with exactly ``horizon`` values

        Raises:
            InvalidInputError: On short series, mismatched line or horizon < 1
        """
        if horizon is None:
            horizon = self.default_horizon
        values, line, horizon = self.validator.validate_forecast(series, trend_line, horizon)

        n = values.size
        last_trend_value = line[-1]
        slope = line[-1] - line[-2]

        predictions = []
        for step in range(1, horizon + 1):
            # series shorter than horizon: clamp to the first observation
            idx = max(n - horizon + step - 1, 0)
            residual = values[idx] - line[idx]
            predictions.append(float(last_trend_value + slope * step + residual))

        summary = self._describe(predictions)
        logger.debug("Forecast built: n=%d horizon=%d %s", n, horizon, summary)

        return ForecastResult(values=predictions, summary=summary)

    def _describe(self, predictions: List[float]) -> str:
        """Dashboard wording around the mean forecast value."""
        avg_forecast = float(np.mean(predictions))
        return f"прогнозируется значение в районе {avg_forecast:.0f}"


def build_chart_data(
    result: AnalysisResult,
    end_date: Optional[date] = None
) -> Dict:
    """
    Chart payload with history, trend line and forecast on one day axis.

    Args:
        result: Completed analysis
        end_date: Date of the last observation (today by default)

    Returns:
        Dict with labels and datasets, padded with None where a dataset
        has no value for a label
    """
    history = list(result.data)
    forecast_values = list(result.forecast.values)
    end = pd.Timestamp(end_date or date.today())

    historical_labels = pd.date_range(
        end=end, periods=len(history), freq='D'
    ).strftime('%Y-%m-%d').tolist()
    forecast_labels = pd.date_range(
        start=end + pd.Timedelta(days=1), periods=len(forecast_values), freq='D'
    ).strftime('%Y-%m-%d').tolist()

    return {
        'chart_type': 'line',
        'labels': historical_labels + forecast_labels,
        'x_label': 'Date',
        'y_label': 'Value',
        'datasets': [
            {
                'label': 'Historical',
                'data': history + [None] * len(forecast_values)
            },
            {
                'label': 'Trend',
                'data': list(result.trend.line) + [None] * len(forecast_values),
                'borderDash': [5, 5]
            },
            {
                'label': 'Forecast',
                'data': [None] * len(history) + forecast_values
            }
        ]
    }
