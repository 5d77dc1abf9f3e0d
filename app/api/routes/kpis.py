"""KPI catalog routes."""

from typing import List, Optional
from fastapi import APIRouter, HTTPException, Query

from app.api.deps import make_rng
from app.schemas.analysis import MAX_HORIZON
from src.analytics import KpiDefinition, generate_mock_series, get_kpi, list_kpis
from src.analytics import UnknownCategoryError

router = APIRouter()


@router.get("/kpis", response_model=List[KpiDefinition])
async def get_catalog():
    """All registered KPIs."""
    return list_kpis()


@router.get("/kpis/{kpi_id}/mock", response_model=List[float])
async def get_mock_series(
    kpi_id: str,
    days: int = Query(default=90, ge=1, le=MAX_HORIZON),
    seed: Optional[int] = None
):
    """Synthetic daily history for a registered KPI (demo data)."""
    try:
        get_kpi(kpi_id)
    except UnknownCategoryError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return generate_mock_series(kpi_id, days=days, rng=make_rng(seed))
