"""Base models for the KPI analytics core."""

from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum


class TrendDirection(str, Enum):
    """General direction of a trend."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class TrendLabel(str, Enum):
    """Categorical strength/direction of a fitted trend."""
    STRONG_GROWTH = "strong_growth"
    MODERATE_GROWTH = "moderate_growth"
    STABLE = "stable"
    MODERATE_DECLINE = "moderate_decline"
    STRONG_DECLINE = "strong_decline"

    @property
    def direction(self) -> TrendDirection:
        """Direction used for driver selection."""
        if self in (TrendLabel.STRONG_GROWTH, TrendLabel.MODERATE_GROWTH):
            return TrendDirection.POSITIVE
        if self in (TrendLabel.STRONG_DECLINE, TrendLabel.MODERATE_DECLINE):
            return TrendDirection.NEGATIVE
        return TrendDirection.NEUTRAL

    @property
    def description(self) -> str:
        """Dashboard wording for the label."""
        return TREND_DESCRIPTIONS[self]


TREND_DESCRIPTIONS: Dict[TrendLabel, str] = {
    TrendLabel.STRONG_GROWTH: "уверенный рост",
    TrendLabel.MODERATE_GROWTH: "умеренный рост",
    TrendLabel.STABLE: "стабильный",
    TrendLabel.MODERATE_DECLINE: "небольшое снижение",
    TrendLabel.STRONG_DECLINE: "существенное снижение",
}


class CorrelationStrength(str, Enum):
    """Qualitative strength band of a correlation coefficient."""
    STRONG = "strong"
    MODERATE = "moderate"
    WEAK = "weak"
    NEGLIGIBLE = "negligible"


class CorrelationDirection(str, Enum):
    """Sign of a correlation coefficient."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NONE = "none"


class FrozenModel(BaseModel):
    """Immutable result model."""

    model_config = ConfigDict(frozen=True)


class SeriesStatistics(FrozenModel):
    """Summary statistics of a single series."""

    avg: float = 0.0
    min: float = 0.0
    max: float = 0.0
    change_percent: float = Field(
        default=0.0,
        description="(last - first) / (first or 1) * 100"
    )


class TrendResult(FrozenModel):
    """Fitted OLS line and its label."""

    line: List[float] = Field(description="Fitted values, same length as input")
    label: TrendLabel
    slope: float
    intercept: float

    @property
    def description(self) -> str:
        return self.label.description


class ForecastResult(FrozenModel):
    """Short-horizon projection with seasonal residuals."""

    values: List[float] = Field(description="Forecast values, one per period")
    summary: str

    @property
    def horizon(self) -> int:
        return len(self.values)


class AnalysisResult(FrozenModel):
    """Trend, forecast and drivers for one series."""

    data: List[float]
    category: str
    trend: TrendResult
    forecast: ForecastResult
    drivers: List[str]


class CorrelationReport(FrozenModel):
    """Pearson coefficient with its interpretation."""

    coefficient: float = Field(ge=-1, le=1)
    strength: CorrelationStrength
    direction: CorrelationDirection
    sample_size: int
    p_value: Optional[float] = Field(
        default=None,
        description="Two-sided p-value; None when undefined"
    )


class KpiDefinition(FrozenModel):
    """Registered dashboard KPI."""

    id: str
    title: str
    category: str
    value_type: str = Field(description="currency | integer | percent | hours")
    base_value: float
    trend: float = Field(description="Typical change per day")


class BaseMetrics(FrozenModel):
    """Inputs for the scenario calculator."""

    traffic: float = Field(ge=0, description="Visitors")
    conversion_rate: float = Field(ge=0, description="Share, e.g. 0.05 for 5%")
    avg_order_value: float = Field(ge=0)
    costs: float = Field(ge=0)


class KpiScenarioResult(FrozenModel):
    """Base vs. alternative value for a single KPI."""

    key: str
    name: str
    base_value: float
    alternative_value: float
