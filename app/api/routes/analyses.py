"""Analysis routes: statistics, trend/forecast/drivers, correlation, scenarios, AI narratives."""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from app.api.deps import get_orchestrator, get_synthesizer, make_rng
from app.schemas.analysis import (
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
from src.analytics import (
    AnalysisOrchestrator,
    AnalysisResult,
    CorrelationReport,
    InvalidInputError,
    KPIScenarioCalculator,
    SeriesStatistics,
    UnknownCategoryError,
    build_chart_data,
    calculate_statistics,
    get_kpi,
)
from src.analytics.synthesizer import BusinessInsightSynthesizer

router = APIRouter()


def _run_analysis(request: AnalysisRequest, orchestrator: AnalysisOrchestrator) -> AnalysisResult:
    """Run the orchestrator, mapping core errors to HTTP errors."""
    rng = make_rng(request.seed)
    try:
        if request.category:
            return orchestrator.analyze(
                request.series, request.category, horizon=request.horizon, rng=rng
            )
        return orchestrator.analyze_kpi(
            request.kpi_id, request.series, horizon=request.horizon, rng=rng
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except UnknownCategoryError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _kpi_title(request: NarrativeRequest) -> str:
    if request.kpi_title:
        return request.kpi_title
    if request.kpi_id:
        try:
            return get_kpi(request.kpi_id).title
        except UnknownCategoryError:
            return request.kpi_id
    return request.category


@router.post("/statistics", response_model=SeriesStatistics)
async def series_statistics(request: SeriesRequest):
    """Mean, min, max and percent change of a series."""
    return calculate_statistics(request.series)


@router.post("/analysis", response_model=AnalysisResponse)
async def analyze_series(
    request: AnalysisRequest,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)
):
    """
    Trend, forecast and likely drivers for one KPI series.

    Pass ``seed`` for reproducible driver selection.
    """
    result = _run_analysis(request, orchestrator)
    return AnalysisResponse(
        result=result,
        trend_description=result.trend.description,
        chart=build_chart_data(result)
    )


@router.post("/correlation", response_model=CorrelationReport)
async def correlate_series(
    request: CorrelationRequest,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)
):
    """Pearson correlation between two KPI series."""
    try:
        return orchestrator.correlate(request.x, request.y)
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/scenarios", response_model=ScenarioResponse)
async def calculate_scenario(request: ScenarioRequest):
    """Base vs. alternative KPI values for a what-if scenario."""
    calculator = KPIScenarioCalculator()
    try:
        results = calculator.calculate(request.base, request.scenario, request.kpi_keys)
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return ScenarioResponse(results=results)


@router.post("/analysis/narrative", response_model=NarrativeResponse)
def narrate_analysis(
    request: NarrativeRequest,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
    synthesizer: BusinessInsightSynthesizer = Depends(get_synthesizer)
):
    """Analysis plus an AI-written explanation of it."""
    result = _run_analysis(request, orchestrator)
    narrative = synthesizer.synthesize_analysis(_kpi_title(request), result, request.period)
    return NarrativeResponse(result=result, narrative=narrative)


@router.post("/analysis/narrative/stream")
def stream_analysis_narrative(
    request: NarrativeRequest,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
    synthesizer: BusinessInsightSynthesizer = Depends(get_synthesizer)
):
    """Same as /analysis/narrative, streamed as plain-text chunks."""
    result = _run_analysis(request, orchestrator)
    stream = synthesizer.stream_analysis(_kpi_title(request), result, request.period)
    return StreamingResponse(stream, media_type="text/plain; charset=utf-8")


@router.post("/statistics/narrative", response_model=DeepDiveResponse)
def narrate_statistics(
    request: DeepDiveRequest,
    synthesizer: BusinessInsightSynthesizer = Depends(get_synthesizer)
):
    """Series statistics plus an AI deep dive grounded on them."""
    try:
        statistics = calculate_statistics(request.series)
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    narrative = synthesizer.synthesize_deep_dive(request.kpi_title, request.series, request.period)
    return DeepDiveResponse(statistics=statistics, narrative=narrative)


@router.post("/correlation/narrative", response_model=CorrelationNarrativeResponse)
def narrate_correlation(
    request: CorrelationNarrativeRequest,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
    synthesizer: BusinessInsightSynthesizer = Depends(get_synthesizer)
):
    """Correlation report plus a plain-language interpretation."""
    try:
        report = orchestrator.correlate(request.x, request.y)
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    narrative = synthesizer.synthesize_correlation(request.kpi1_title, request.kpi2_title, report)
    return CorrelationNarrativeResponse(report=report, narrative=narrative)


@router.post("/overview/narrative", response_model=OverviewNarrativeResponse)
def narrate_overview(
    request: OverviewNarrativeRequest,
    synthesizer: BusinessInsightSynthesizer = Depends(get_synthesizer)
):
    """Summary report comparing two or more KPIs."""
    try:
        narrative = synthesizer.synthesize_overall(request.kpis, request.period)
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return OverviewNarrativeResponse(narrative=narrative)
