"""
KPI Analytics Core

Deterministic statistics behind the dashboard. Results are calculated
with fixed code, then optionally narrated by an LLM
(see ``src.analytics.synthesizer``, imported separately so the core
does not depend on the LLM stack).

Modules:
- statistics: mean, extrema and percent change of a series
- trend: OLS trend line and trend label
- forecasting: trend projection with seasonal residuals
- correlation: Pearson correlation and its interpretation
- drivers: candidate explanations per category and trend direction
- orchestrator: trend + forecast + drivers in one result
- kpi_catalog: registered KPIs and synthetic history
- kpi_calculator: what-if scenarios over base metrics
"""

from .base_models import (
    AnalysisResult,
    BaseMetrics,
    CorrelationDirection,
    CorrelationReport,
    CorrelationStrength,
    ForecastResult,
    KpiDefinition,
    KpiScenarioResult,
    SeriesStatistics,
    TrendDirection,
    TrendLabel,
    TrendResult
)
from .exceptions import (
    AnalyticsError,
    InvalidInputError,
    NarrativeConfigurationError,
    UnknownCategoryError
)

from .statistics import calculate_statistics
from .trend import TrendDetector
from .forecasting import TrendForecaster, build_chart_data
from .correlation import CorrelationAnalyzer, calculate_correlation
from .drivers import DRIVER_POOLS, DriverSelector, resolve_direction
from .orchestrator import AnalysisOrchestrator
from .kpi_catalog import KPI_CATALOG, generate_mock_series, get_kpi, list_kpis
from .kpi_calculator import KPIScenarioCalculator

__all__ = [
    # Models
    'AnalysisResult',
    'BaseMetrics',
    'CorrelationDirection',
    'CorrelationReport',
    'CorrelationStrength',
    'ForecastResult',
    'KpiDefinition',
    'KpiScenarioResult',
    'SeriesStatistics',
    'TrendDirection',
    'TrendLabel',
    'TrendResult',

    # Errors
    'AnalyticsError',
    'InvalidInputError',
    'NarrativeConfigurationError',
    'UnknownCategoryError',

    # Analyzers
    'calculate_statistics',
    'TrendDetector',
    'TrendForecaster',
    'build_chart_data',
    'CorrelationAnalyzer',
    'calculate_correlation',
    'DRIVER_POOLS',
    'DriverSelector',
    'resolve_direction',
    'AnalysisOrchestrator',
    'KPI_CATALOG',
    'generate_mock_series',
    'get_kpi',
    'list_kpis',
    'KPIScenarioCalculator'
]
