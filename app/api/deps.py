"""API dependencies."""

from typing import Optional
from functools import lru_cache
from fastapi import Depends
import numpy as np

from app.core.config import Settings, get_settings
from src.analytics import AnalysisOrchestrator, TrendForecaster
from src.analytics.synthesizer import BusinessInsightSynthesizer
from src.utils.llm_client import get_llm


@lru_cache()
def _orchestrator(default_horizon: int) -> AnalysisOrchestrator:
    return AnalysisOrchestrator(forecaster=TrendForecaster(default_horizon=default_horizon))


def get_orchestrator(settings: Settings = Depends(get_settings)) -> AnalysisOrchestrator:
    """Shared stateless orchestrator."""
    return _orchestrator(settings.default_forecast_horizon)


def get_synthesizer(settings: Settings = Depends(get_settings)) -> BusinessInsightSynthesizer:
    """
    Narrative synthesizer backed by Gemini.

    Raises:
        NarrativeConfigurationError: If GEMINI_API_KEY is not configured
    """
    llm = get_llm(
        api_key=settings.gemini_api_key or None,
        temperature=settings.llm_temperature,
        model=settings.gemini_model,
    )
    return BusinessInsightSynthesizer(llm, max_retries=settings.llm_max_retries)


def make_rng(seed: Optional[int]) -> np.random.Generator:
    """Seeded generator when a seed is given, fresh entropy otherwise."""
    return np.random.default_rng(seed)
