"""Registered dashboard KPIs and synthetic history for demos."""

from typing import Dict, List, Optional
import numpy as np

from .base_models import KpiDefinition
from .exceptions import InvalidInputError, UnknownCategoryError


KPI_CATALOG: Dict[str, KpiDefinition] = {
    kpi.id: kpi for kpi in [
        KpiDefinition(
            id='revenue', title='Выручка', category='Финансы',
            value_type='currency', base_value=50000, trend=250
        ),
        KpiDefinition(
            id='sales', title='Продажи', category='Маркетинг',
            value_type='integer', base_value=800, trend=10
        ),
        KpiDefinition(
            id='new_clients', title='Новые клиенты', category='Клиенты',
            value_type='integer', base_value=150, trend=-0.5
        ),
        KpiDefinition(
            id='conversion', title='Конверсия', category='Маркетинг',
            value_type='percent', base_value=4.5, trend=0.005
        ),
        KpiDefinition(
            id='employee_turnover', title='Текучесть кадров', category='HR',
            value_type='percent', base_value=3.2, trend=-0.01
        ),
        KpiDefinition(
            id='ticket_resolution_time', title='Время решения тикета', category='Разработка',
            value_type='hours', base_value=4.8, trend=-0.05
        ),
    ]
}

# Series for ids outside the catalog
FALLBACK_BASE_VALUE = 1000.0
FALLBACK_TREND = 0.5


def get_kpi(kpi_id: str) -> KpiDefinition:
    """
    Look up a registered KPI.

    Raises:
        UnknownCategoryError: If the id is not registered
    """
    try:
        return KPI_CATALOG[kpi_id]
    except KeyError:
        raise UnknownCategoryError(kpi_id) from None


def list_kpis() -> List[KpiDefinition]:
    return list(KPI_CATALOG.values())


def generate_mock_series(
    kpi_id: str,
    days: int = 90,
    rng: Optional[np.random.Generator] = None
) -> List[float]:
    """
    Realistic-looking daily history with a weekly cycle and noise.

    Args:
        kpi_id: Catalog id; unknown ids get a generic 1000 +/- 0.5/day series
        days: Number of historical points
        rng: Random source for the noise (fresh generator when omitted)

    Returns:
        Non-negative daily values, oldest first
    """
    if days < 1:
        raise InvalidInputError(f"days must be >= 1, got {days}")
    rng = rng if rng is not None else np.random.default_rng()

    kpi = KPI_CATALOG.get(kpi_id)
    base = kpi.base_value if kpi else FALLBACK_BASE_VALUE
    trend = kpi.trend if kpi else FALLBACK_TREND

    index = np.arange(days, dtype=float)
    weekly = np.sin((index % 7) * (np.pi / 3.5))
    noise = rng.random(days) - 0.5

    if kpi_id == 'conversion':
        # percentages: fixed amplitude, floor at 2%
        values = base + index * trend + weekly * 0.2 + noise * 0.1
        return np.maximum(2.0, values).tolist()

    values = base + index * trend + weekly * (base * 0.1) + noise * (base * 0.05)
    return np.maximum(0.0, values).tolist()
