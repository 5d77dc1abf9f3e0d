"""Tests for narrative prompt assembly and streaming (fake LLM, no network)."""

import pytest

from src.analytics import AnalysisOrchestrator, CorrelationAnalyzer, InvalidInputError
from src.analytics.synthesizer import BusinessInsightSynthesizer, NarrativeStream
from tests.conftest import FakeLLM


@pytest.fixture
def analysis(weekly_series, rng):
    return AnalysisOrchestrator().analyze(weekly_series, 'Финансы', rng=rng)


class TestPrompts:

    def test_analysis_prompt_carries_core_output(self, fake_llm, analysis):
        prompt = BusinessInsightSynthesizer(fake_llm).build_analysis_prompt('Выручка', analysis, 'неделя')

        assert 'Выручка' in prompt
        assert 'неделя' in prompt
        assert analysis.trend.description in prompt
        assert analysis.forecast.summary in prompt
        for driver in analysis.drivers:
            assert driver in prompt

    def test_deep_dive_prompt_uses_statistics(self, fake_llm):
        prompt = BusinessInsightSynthesizer(fake_llm).build_deep_dive_prompt('Выручка', [0, 5, 10])
        assert '5.00' in prompt
        assert '1000.0%' in prompt

    def test_correlation_prompt(self, fake_llm):
        report = CorrelationAnalyzer().analyze([1, 2, 3], [3, 2, 1])
        prompt = BusinessInsightSynthesizer(fake_llm).build_correlation_prompt('Выручка', 'Продажи', report)
        assert '-1.000' in prompt
        assert 'сильная' in prompt
        assert 'обратная' in prompt


class TestGeneration:

    def test_synthesize_returns_stripped_text(self, fake_llm, analysis):
        text = BusinessInsightSynthesizer(fake_llm).synthesize_analysis('Выручка', analysis)
        assert text == 'Ответ модели'
        assert len(fake_llm.prompts) == 1

    def test_rate_limit_is_retried(self, weekly_series):
        llm = FakeLLM(failures=[RuntimeError("429 Resource exhausted"), RuntimeError("quota exceeded")])
        delays = []
        synthesizer = BusinessInsightSynthesizer(llm, max_retries=3, initial_delay=1, sleep=delays.append)

        assert synthesizer.synthesize_deep_dive('Выручка', weekly_series) == 'Ответ модели'
        assert delays == [1, 2]
        assert len(llm.prompts) == 3

    def test_rate_limit_gives_up(self, weekly_series):
        llm = FakeLLM(failures=[RuntimeError("429")] * 3)
        synthesizer = BusinessInsightSynthesizer(llm, max_retries=2, initial_delay=1, sleep=lambda s: None)
        with pytest.raises(RuntimeError):
            synthesizer.synthesize_deep_dive('Выручка', weekly_series)
        assert len(llm.prompts) == 2

    def test_other_errors_are_not_retried(self, weekly_series):
        llm = FakeLLM(failures=[RuntimeError("invalid argument")])
        synthesizer = BusinessInsightSynthesizer(llm, sleep=lambda s: pytest.fail("should not sleep"))
        with pytest.raises(RuntimeError):
            synthesizer.synthesize_deep_dive('Выручка', weekly_series)
        assert len(llm.prompts) == 1

    def test_list_content_is_joined(self, analysis):
        class PartsLLM(FakeLLM):
            def invoke(self, prompt):
                from types import SimpleNamespace
                return SimpleNamespace(content=[{'type': 'text', 'text': 'a'}, 'b'])

        assert BusinessInsightSynthesizer(PartsLLM()).synthesize_analysis('X', analysis) == 'ab'


class TestNarrativeStream:

    def test_streams_non_empty_chunks(self, fake_llm, analysis):
        stream = BusinessInsightSynthesizer(fake_llm).stream_analysis('Выручка', analysis)
        assert isinstance(stream, NarrativeStream)
        assert list(stream) == ['Выручка ', 'растёт']
        assert fake_llm.stream_closed

    def test_not_restartable(self):
        stream = NarrativeStream(iter(['a', 'b']))
        assert list(stream) == ['a', 'b']
        assert list(stream) == []

    def test_cancel_between_chunks(self):
        llm = FakeLLM(chunks=['one', 'two', 'three'])
        stream = NarrativeStream(llm._generate())

        assert next(stream) == 'one'
        stream.cancel()
        assert stream.cancelled
        assert list(stream) == []
        assert llm.stream_closed

    def test_cancel_before_start(self):
        stream = NarrativeStream(['a'])
        stream.cancel()
        assert list(stream) == []


class TestOverallReport:

    KPIS = {'Выручка': [100, 110, 120], 'Продажи': [50, 50, 50]}

    def test_prompt_summarizes_every_kpi(self, fake_llm):
        prompt = BusinessInsightSynthesizer(fake_llm).build_overall_prompt(self.KPIS, 'квартал')

        assert 'квартал' in prompt
        assert '**Выручка**: текущее значение 120.00 (изменение +20.0% за период). Тренд: уверенный рост.' in prompt
        assert '**Продажи**: текущее значение 50.00 (изменение +0.0% за период). Тренд: стабильный.' in prompt

    def test_needs_two_kpis(self, fake_llm):
        with pytest.raises(InvalidInputError):
            BusinessInsightSynthesizer(fake_llm).synthesize_overall({'Выручка': [1, 2, 3]})
        assert fake_llm.prompts == []

    def test_bad_series_fails_before_llm_call(self, fake_llm):
        with pytest.raises(InvalidInputError):
            BusinessInsightSynthesizer(fake_llm).synthesize_overall({'A': [1, 2], 'B': [3]})
        assert fake_llm.prompts == []

    def test_synthesize_overall(self, fake_llm):
        assert BusinessInsightSynthesizer(fake_llm).synthesize_overall(self.KPIS) == 'Ответ модели'
        assert 'Сводный аналитический отчёт' in fake_llm.prompts[0]


class TestRetryConfiguration:

    def test_zero_retries_rejected_at_construction(self, fake_llm):
        with pytest.raises(ValueError):
            BusinessInsightSynthesizer(fake_llm, max_retries=0)

    def test_single_attempt_still_calls_model(self, fake_llm):
        synthesizer = BusinessInsightSynthesizer(fake_llm, max_retries=1)
        assert synthesizer.synthesize_deep_dive('X', [1, 2, 3]) == 'Ответ модели'
