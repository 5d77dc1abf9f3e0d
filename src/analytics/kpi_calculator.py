"""What-if KPI calculator: base metrics vs. an alternative scenario."""

from typing import Callable, Dict, List, Mapping, Optional, Sequence
import logging

from pydantic import ValidationError

from .base_models import BaseMetrics, KpiScenarioResult
from .exceptions import InvalidInputError

logger = logging.getLogger(__name__)


def _revenue(m: BaseMetrics) -> float:
    return m.traffic * m.conversion_rate * m.avg_order_value


def _sales_count(m: BaseMetrics) -> float:
    return m.traffic * m.conversion_rate


def _profit(m: BaseMetrics) -> float:
    return _revenue(m) - m.costs


def _roi(m: BaseMetrics) -> float:
    if m.costs == 0:
        return 0.0
    return _profit(m) / m.costs


def _cpa(m: BaseMetrics) -> float:
    sales = _sales_count(m)
    if sales == 0:
        return 0.0
    return m.costs / sales


class KPIScenarioCalculator:
    """Recalculates derived KPIs after scaling the base metrics."""

    KPI_LIBRARY: Dict[str, Dict] = {
        'revenue': {
            'name': 'Выручка',
            'formula': _revenue,
            'description': 'traffic * conversion_rate * avg_order_value'
        },
        'sales_count': {
            'name': 'Кол-во продаж',
            'formula': _sales_count,
            'description': 'traffic * conversion_rate'
        },
        'profit': {
            'name': 'Прибыль',
            'formula': _profit,
            'description': 'revenue - costs'
        },
        'roi': {
            'name': 'ROI',
            'formula': _roi,
            'description': 'profit / costs (0 without costs)'
        },
        'cpa': {
            'name': 'CPA (Стоимость привлечения)',
            'formula': _cpa,
            'description': 'costs / sales_count (0 without sales)'
        },
    }

    def apply_scenario(
        self,
        base: BaseMetrics,
        scenario: Mapping[str, float]
    ) -> BaseMetrics:
        """
        Multiply base metrics by the scenario factors.

        Unknown metric names in the scenario are ignored.

        Raises:
            InvalidInputError: If a factor drives a metric below zero
        """
        updates = {}
        for metric, factor in scenario.items():
            if metric in BaseMetrics.model_fields:
                updates[metric] = getattr(base, metric) * factor
            else:
                logger.debug("Ignoring unknown scenario metric: %s", metric)

        try:
            return BaseMetrics.model_validate({**base.model_dump(), **updates})
        except ValidationError as e:
            raise InvalidInputError(f"Scenario produces invalid metrics: {e}") from e

    def calculate(
        self,
        base: BaseMetrics,
        scenario: Mapping[str, float],
        kpi_keys: Optional[Sequence[str]] = None
    ) -> List[KpiScenarioResult]:
        """
        Base and alternative value for each requested KPI.

        Args:
            base: Current metrics
            scenario: Metric name -> multiplier, e.g. {'traffic': 1.2}
            kpi_keys: KPIs to compute (all known KPIs by default)

        Returns:
            One KpiScenarioResult per key, in request order; unknown keys
            get zero values and their key as name
        """
        alternative = self.apply_scenario(base, scenario)
        keys = list(kpi_keys) if kpi_keys is not None else list(self.KPI_LIBRARY)

        results = []
        for key in keys:
            entry = self.KPI_LIBRARY.get(key)
            if entry is None:
                results.append(KpiScenarioResult(
                    key=key, name=key, base_value=0.0, alternative_value=0.0
                ))
                continue

            formula: Callable[[BaseMetrics], float] = entry['formula']
            results.append(KpiScenarioResult(
                key=key,
                name=entry['name'],
                base_value=float(formula(base)),
                alternative_value=float(formula(alternative))
            ))
        return results
