"""Descriptive statistics for a single KPI series."""

from typing import Sequence
import numpy as np

from .base_models import SeriesStatistics


def calculate_statistics(series: Sequence[float]) -> SeriesStatistics:
    """
    Mean, extrema and percent change over the whole series.

    An empty series returns the zero record instead of raising, since
    sparse KPIs routinely have no history for the selected period.

    change_percent divides by 1 when the first value is 0, so
    ``[0, 5, 10]`` gives ``(10 - 0) / 1 * 100 == 1000``.

    Args:
        series: Chronological KPI values

    Returns:
        SeriesStatistics
    """
    values = np.asarray(series, dtype=float)
    if values.size == 0:
        return SeriesStatistics()

    first, last = float(values[0]), float(values[-1])
    if values.size > 1:
        change = (last - first) / (first or 1) * 100
    else:
        change = 0.0

    return SeriesStatistics(
        avg=float(values.mean()),
        min=float(values.min()),
        max=float(values.max()),
        change_percent=float(change)
    )
