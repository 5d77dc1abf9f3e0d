"""Analysis request/response schemas."""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field, model_validator

from src.analytics import (
    AnalysisResult,
    BaseMetrics,
    CorrelationReport,
    KpiScenarioResult,
    SeriesStatistics,
)

# Longest accepted forecast or mock history, in days
MAX_HORIZON = 3650


class SeriesRequest(BaseModel):
    """Request schema for series statistics."""
    series: List[float]


class AnalysisRequest(BaseModel):
    """Request schema for a trend/forecast/drivers analysis."""
    series: List[float]
    category: Optional[str] = None
    kpi_id: Optional[str] = None
    horizon: Optional[int] = Field(default=None, ge=1, le=MAX_HORIZON)
    seed: Optional[int] = Field(default=None, description="Seed for driver sampling")

    @model_validator(mode="after")
    def _category_or_kpi(self):
        if not self.category and not self.kpi_id:
            raise ValueError("Either category or kpi_id is required")
        return self


class AnalysisResponse(BaseModel):
    """Response schema for an analysis."""
    result: AnalysisResult
    trend_description: str
    chart: Dict


class CorrelationRequest(BaseModel):
    """Request schema for correlating two series."""
    x: List[float]
    y: List[float]


class ScenarioRequest(BaseModel):
    """Request schema for the what-if KPI calculator."""
    base: BaseMetrics
    scenario: Dict[str, float] = {}
    kpi_keys: Optional[List[str]] = None


class ScenarioResponse(BaseModel):
    """Response schema for the what-if KPI calculator."""
    results: List[KpiScenarioResult]


class NarrativeRequest(AnalysisRequest):
    """Request schema for an AI narrative over an analysis."""
    kpi_title: Optional[str] = None
    period: str = "последние 30 дней"


class NarrativeResponse(BaseModel):
    """Response schema for an AI narrative."""
    result: AnalysisResult
    narrative: str


class DeepDiveRequest(BaseModel):
    """Request schema for an AI deep dive over series statistics."""
    series: List[float] = Field(min_length=1)
    kpi_title: str
    period: str = "последние 30 дней"


class DeepDiveResponse(BaseModel):
    """Response schema for an AI deep dive."""
    statistics: SeriesStatistics
    narrative: str


class CorrelationNarrativeRequest(CorrelationRequest):
    """Request schema for an AI interpretation of a correlation."""
    kpi1_title: str
    kpi2_title: str


class CorrelationNarrativeResponse(BaseModel):
    """Response schema for an AI interpretation of a correlation."""
    report: CorrelationReport
    narrative: str


class OverviewNarrativeRequest(BaseModel):
    """Request schema for a report across several KPIs (title -> series)."""
    kpis: Dict[str, List[float]] = Field(min_length=2)
    period: str = "последние 30 дней"


class OverviewNarrativeResponse(BaseModel):
    """Response schema for a report across several KPIs."""
    narrative: str
