"""Business insight synthesizer - turns computed KPI results into narrative."""

from typing import Any, Iterable, Iterator, Mapping, Sequence
import logging
import time

from langchain_core.prompts import PromptTemplate

from .base_models import AnalysisResult, CorrelationDirection, CorrelationReport, CorrelationStrength
from .exceptions import InvalidInputError
from .statistics import calculate_statistics
from .trend import TrendDetector
from src.utils.llm_client import retry_with_exponential_backoff

logger = logging.getLogger(__name__)


STRENGTH_WORDING = {
    CorrelationStrength.STRONG: "сильная",
    CorrelationStrength.MODERATE: "умеренная",
    CorrelationStrength.WEAK: "слабая",
    CorrelationStrength.NEGLIGIBLE: "очень слабая или отсутствует",
}

DIRECTION_WORDING = {
    CorrelationDirection.POSITIVE: "прямая (положительная)",
    CorrelationDirection.NEGATIVE: "обратная (отрицательная)",
    CorrelationDirection.NONE: "не выражена",
}


ANALYSIS_PROMPT = PromptTemplate.from_template("""
Ты — бизнес-аналитик. Объясни руководителю динамику KPI "{kpi_title}" за период "{period}".

## Рассчитанные данные (не пересчитывай их):
- Тренд: {trend}
- Наклон тренда: {slope} в день
- Прогноз на {horizon} дн.: {forecast_summary}
- Вероятные факторы: {drivers}

## Задача:
Напиши короткий отчёт в Markdown на русском языке:

### Что происходит
(2-3 предложения о тренде и прогнозе)

### Почему
(Свяжи динамику с перечисленными факторами, не придумывай новых цифр)

### Что делать
(2 конкретные рекомендации списком)
""")

DEEP_DIVE_PROMPT = PromptTemplate.from_template("""
Ты — старший дата-аналитик. Проведи глубокий анализ KPI "{kpi_title}" за период "{period}".

## Входные данные:
- Среднее значение: {avg}
- Максимум: {max}
- Минимум: {min}
- Общее изменение за период: {change_percent}%

## Задача:
Краткий аналитический отчёт в Markdown на русском языке с разделами
"Ключевые наблюдения", "Возможные причины" (2-3 гипотезы) и
"Рекомендации" (2 пункта списком). Используй только приведённые числа.
""")

CORRELATION_PROMPT = PromptTemplate.from_template("""
Ты — опытный бизнес-аналитик. Интерпретируй для менеджера связь между двумя KPI.

## Данные:
- KPI 1: "{kpi1_title}"
- KPI 2: "{kpi2_title}"
- Коэффициент корреляции: {coefficient}
- Сила связи: {strength}
- Направление связи: {direction}
- Число наблюдений: {sample_size}

## Задача:
2-3 предложения простым текстом на русском языке, без заголовков и Markdown.
Без статистических терминов. Предложи одну возможную причину такой связи.
""")


OVERALL_PROMPT = PromptTemplate.from_template("""
Ты — ведущий бизнес-аналитик. Проведи комплексный анализ нескольких KPI за период "{period}" и подготовь сводный отчёт для руководства.

## Набор KPI (значения рассчитаны, не пересчитывай их):
{kpi_summaries}

## Задача:
Отчёт в Markdown на русском языке строго по структуре:

# Сводный аналитический отчёт

## 1. Общая оценка ситуации
(2-3 предложения: компания растёт, стагнирует или сталкивается с проблемами?)

## 2. Ключевые взаимосвязи и инсайты
(2-3 инсайта о том, как показатели влияют друг на друга, со ссылкой на их изменения)

## 3. Стратегические рекомендации
(3-4 конкретные рекомендации маркированным списком)
""")


def _message_text(message: Any) -> str:
    """Text of an LLM message or chunk (content may be a list of parts)."""
    content = getattr(message, 'content', message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and 'text' in part:
                parts.append(part['text'])
        return "".join(parts)
    return str(content)


class NarrativeStream:
    """
    Lazy, finite, non-restartable sequence of text chunks.

    ``cancel()`` sets a flag that is checked before each chunk is pulled;
    once cancelled or exhausted the stream yields nothing more.
    """

    def __init__(self, chunks: Iterable[Any]):
        self._source = iter(chunks)
        self._cancelled = False
        self._finished = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Stop after the chunk currently being consumed."""
        if not self._finished:
            logger.warning("Narrative stream cancelled by consumer")
        self._cancelled = True

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        while not (self._cancelled or self._finished):
            try:
                chunk = next(self._source)
            except StopIteration:
                self._finished = True
                break
            text = _message_text(chunk)
            if text:
                return text
        self._close()
        raise StopIteration

    def _close(self) -> None:
        self._finished = True
        close = getattr(self._source, 'close', None)
        if close is not None:
            close()


class BusinessInsightSynthesizer:
    """
    Converts computed KPI results into human-readable business insights.

    The LLM only ever sees numbers produced by the analytics core; it
    receives no raw computation work.
    """

    def __init__(
        self,
        llm: Any,
        max_retries: int = 5,
        initial_delay: float = 30,
        sleep=time.sleep
    ):
        """
        Initialize synthesizer.

        Args:
            llm: Chat model exposing ``invoke(prompt)`` and ``stream(prompt)``
                (e.g. from ``src.utils.llm_client.get_llm``)
            max_retries: Attempts for rate-limited blocking calls
            initial_delay: First backoff delay in seconds
            sleep: Sleep function used between retries
        """
        self.llm = llm
        self.detector = TrendDetector()
        self._invoke = retry_with_exponential_backoff(
            max_retries=max_retries, initial_delay=initial_delay, sleep=sleep
        )(self._invoke_once)

    # Prompt assembly

    def build_analysis_prompt(
        self,
        kpi_title: str,
        result: AnalysisResult,
        period: str = "последние 30 дней"
    ) -> str:
        return ANALYSIS_PROMPT.format(
            kpi_title=kpi_title,
            period=period,
            trend=result.trend.label.description,
            slope=f"{result.trend.slope:+.2f}",
            horizon=result.forecast.horizon,
            forecast_summary=result.forecast.summary,
            drivers=", ".join(result.drivers)
        )

    def build_deep_dive_prompt(
        self,
        kpi_title: str,
        series: Sequence[float],
        period: str = "последние 30 дней"
    ) -> str:
        stats = calculate_statistics(series)
        return DEEP_DIVE_PROMPT.format(
            kpi_title=kpi_title,
            period=period,
            avg=f"{stats.avg:.2f}",
            max=f"{stats.max:.2f}",
            min=f"{stats.min:.2f}",
            change_percent=f"{stats.change_percent:.1f}"
        )

    def build_correlation_prompt(
        self,
        kpi1_title: str,
        kpi2_title: str,
        report: CorrelationReport
    ) -> str:
        return CORRELATION_PROMPT.format(
            kpi1_title=kpi1_title,
            kpi2_title=kpi2_title,
            coefficient=f"{report.coefficient:.3f}",
            strength=STRENGTH_WORDING[report.strength],
            direction=DIRECTION_WORDING[report.direction],
            sample_size=report.sample_size
        )

    def build_overall_prompt(
        self,
        kpis: Mapping[str, Sequence[float]],
        period: str = "последние 30 дней"
    ) -> str:
        """
        Prompt comparing several KPIs at once.

        Args:
            kpis: KPI title -> series, at least two entries

        Raises:
            InvalidInputError: On fewer than two KPIs or an unusable series
        """
        if len(kpis) < 2:
            raise InvalidInputError(f"Overall analysis needs at least 2 KPIs, got {len(kpis)}")

        lines = []
        for title, series in kpis.items():
            trend = self.detector.detect(series)
            stats = calculate_statistics(series)
            lines.append(
                f"- **{title}**: текущее значение {float(series[-1]):.2f} "
                f"(изменение {stats.change_percent:+.1f}% за период). "
                f"Тренд: {trend.description}."
            )
        return OVERALL_PROMPT.format(period=period, kpi_summaries="\n".join(lines))

    # Generation

    def synthesize_analysis(
        self,
        kpi_title: str,
        result: AnalysisResult,
        period: str = "последние 30 дней"
    ) -> str:
        """Markdown narrative for a completed analysis."""
        logger.info("Generating analysis narrative for %s", kpi_title)
        return self._invoke(self.build_analysis_prompt(kpi_title, result, period))

    def synthesize_deep_dive(
        self,
        kpi_title: str,
        series: Sequence[float],
        period: str = "последние 30 дней"
    ) -> str:
        """Markdown deep dive grounded on series statistics."""
        logger.info("Generating deep-dive narrative for %s", kpi_title)
        return self._invoke(self.build_deep_dive_prompt(kpi_title, series, period))

    def synthesize_correlation(
        self,
        kpi1_title: str,
        kpi2_title: str,
        report: CorrelationReport
    ) -> str:
        """Plain-text interpretation of a correlation coefficient."""
        logger.info("Generating correlation narrative for %s vs %s", kpi1_title, kpi2_title)
        return self._invoke(self.build_correlation_prompt(kpi1_title, kpi2_title, report))

    def synthesize_overall(
        self,
        kpis: Mapping[str, Sequence[float]],
        period: str = "последние 30 дней"
    ) -> str:
        """Markdown report across several KPIs."""
        logger.info("Generating overall narrative for %d KPIs", len(kpis))
        return self._invoke(self.build_overall_prompt(kpis, period))

    def stream_analysis(
        self,
        kpi_title: str,
        result: AnalysisResult,
        period: str = "последние 30 дней"
    ) -> NarrativeStream:
        """Streaming variant of synthesize_analysis; chunks are never retried."""
        logger.info("Streaming analysis narrative for %s", kpi_title)
        prompt = self.build_analysis_prompt(kpi_title, result, period)
        return NarrativeStream(self.llm.stream(prompt))

    def _invoke_once(self, prompt: str) -> str:
        response = self.llm.invoke(prompt)
        return _message_text(response).strip()
