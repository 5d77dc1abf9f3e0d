"""Pydantic schemas for request/response validation."""

from .analysis import (
    AnalysisRequest,
    AnalysisResponse,
    CorrelationNarrativeRequest,
    CorrelationNarrativeResponse,
    CorrelationRequest,
    DeepDiveRequest,
    DeepDiveResponse,
    NarrativeRequest,
    NarrativeResponse,
    OverviewNarrativeRequest,
    OverviewNarrativeResponse,
    ScenarioRequest,
    ScenarioResponse,
    SeriesRequest,
)

__all__ = [
    "AnalysisRequest",
    "AnalysisResponse",
    "CorrelationNarrativeRequest",
    "CorrelationNarrativeResponse",
    "CorrelationRequest",
    "DeepDiveRequest",
    "DeepDiveResponse",
    "NarrativeRequest",
    "NarrativeResponse",
    "OverviewNarrativeRequest",
    "OverviewNarrativeResponse",
    "ScenarioRequest",
    "ScenarioResponse",
    "SeriesRequest",
]
