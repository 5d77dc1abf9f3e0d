"""Plausible drivers behind a KPI trend."""

from typing import Dict, List, Mapping, Optional, Sequence, Union
import logging
import numpy as np

from .base_models import TrendDirection, TrendLabel
from .exceptions import UnknownCategoryError

logger = logging.getLogger(__name__)


# "positive" drivers push a KPI up, "negative" drivers pull it down.
DRIVER_POOLS: Dict[str, Dict[str, List[str]]] = {
    'Финансы': {
        'positive': [
            "Новая маркетинговая кампания",
            "Сезонный спрос",
            "Увеличение среднего чека",
        ],
        'negative': [
            "Снижение рекламного бюджета",
            "Технические проблемы на сайте",
            "Активность конкурентов",
        ],
    },
    'Маркетинг': {
        'positive': [
            "Запуск промо-акции",
            "Рост трафика из соц. сетей",
            "Оптимизация воронки продаж",
        ],
        'negative': [
            "Неудачная акция",
            "Падение органического трафика",
            "Баг в корзине",
        ],
    },
    'Клиенты': {
        'positive': [
            "Успешная PR-активность",
            "Реферальная программа",
            "Снижение стоимости привлечения",
        ],
        'negative': [
            "Негативные отзывы",
            "Рост стоимости привлечения (CPA)",
        ],
    },
    'HR': {
        'positive': [
            "Конкурентные предложения на рынке труда",
            "Рост нагрузки на сотрудников",
        ],
        'negative': [
            "Программа удержания сотрудников",
            "Рост вовлечённости команды",
        ],
    },
    'Разработка': {
        'positive': [
            "Рост числа обращений после релиза",
            "Накопленный технический долг",
        ],
        'negative': [
            "Автоматизация тестирования",
            "Расширение команды поддержки",
        ],
    },
}

GROWTH_KEYWORDS = ("рост", "growth")
DECLINE_KEYWORDS = ("снижение", "decline")

TrendSignal = Union[TrendLabel, TrendDirection, str]


def resolve_direction(signal: TrendSignal) -> TrendDirection:
    """
    Three-way direction from a label, a direction or free text.

    Free text is matched on growth/decline keywords in Russian or
    English; anything else is neutral.
    """
    if isinstance(signal, TrendLabel):
        return signal.direction
    if isinstance(signal, TrendDirection):
        return signal

    text = str(signal).lower()
    if text in {label.value for label in TrendLabel}:
        return TrendLabel(text).direction
    if text in {direction.value for direction in TrendDirection}:
        return TrendDirection(text)
    if any(word in text for word in GROWTH_KEYWORDS):
        return TrendDirection.POSITIVE
    if any(word in text for word in DECLINE_KEYWORDS):
        return TrendDirection.NEGATIVE
    return TrendDirection.NEUTRAL


class DriverSelector:
    """
    Samples candidate explanations for an observed trend.

    Selection is random by design; pass a seeded ``numpy.random.Generator``
    for reproducible output.
    """

    def __init__(
        self,
        pools: Optional[Mapping[str, Mapping[str, Sequence[str]]]] = None,
        sample_size: int = 2
    ):
        """
        Initialize selector.

        Args:
            pools: Category -> {'positive': [...], 'negative': [...]}
            sample_size: Drivers returned per call
        """
        self.pools = {
            category: {
                'positive': list(entry.get('positive', [])),
                'negative': list(entry.get('negative', [])),
            }
            for category, entry in (pools or DRIVER_POOLS).items()
        }
        self.sample_size = sample_size

        for category, entry in self.pools.items():
            for side, candidates in entry.items():
                if len(set(candidates)) < sample_size:
                    raise ValueError(
                        f"Driver pool {category}/{side} needs at least "
                        f"{sample_size} distinct entries"
                    )

    @property
    def categories(self) -> List[str]:
        return list(self.pools)

    def candidates(self, category: str, signal: TrendSignal) -> List[str]:
        """
        Candidate pool for a category and direction.

        Raises:
            UnknownCategoryError: If the category has no registered pools
        """
        if category not in self.pools:
            raise UnknownCategoryError(category)

        entry = self.pools[category]
        direction = resolve_direction(signal)
        if direction == TrendDirection.POSITIVE:
            pool = entry['positive']
        elif direction == TrendDirection.NEGATIVE:
            pool = entry['negative']
        else:
            pool = entry['positive'] + entry['negative']
        # dict.fromkeys keeps order and drops duplicates
        return list(dict.fromkeys(pool))

    def select(
        self,
        category: str,
        signal: TrendSignal,
        rng: Optional[np.random.Generator] = None
    ) -> List[str]:
        """
        Sample distinct drivers without replacement.

        Args:
            category: KPI category, e.g. 'Финансы'
            signal: TrendLabel, TrendDirection or free-text trend description
            rng: Random source (fresh unseeded generator when omitted)

        Returns:
            ``sample_size`` distinct driver strings
        """
        pool = self.candidates(category, signal)
        rng = rng if rng is not None else np.random.default_rng()

        order = rng.permutation(len(pool))[:self.sample_size]
        drivers = [pool[i] for i in order]
        logger.debug("Drivers for %s (%s): %s", category, signal, drivers)
        return drivers
