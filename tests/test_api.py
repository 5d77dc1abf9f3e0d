"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_synthesizer
from app.main import app
from src.analytics import DRIVER_POOLS
from src.analytics.synthesizer import BusinessInsightSynthesizer
from tests.conftest import WEEKLY_SERIES, FakeLLM


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def fake_synthesizer():
    llm = FakeLLM(reply="Выручка уверенно растёт", chunks=["Выручка ", "уверенно ", "растёт"])
    app.dependency_overrides[get_synthesizer] = lambda: BusinessInsightSynthesizer(llm)
    return llm


class TestHealth:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert "narrative_enabled" in body


class TestKpiRoutes:

    def test_catalog(self, client):
        ids = [kpi["id"] for kpi in client.get("/api/kpis").json()]
        assert "revenue" in ids and "ticket_resolution_time" in ids

    def test_mock_series_is_seeded(self, client):
        first = client.get("/api/kpis/revenue/mock", params={"days": 14, "seed": 3}).json()
        second = client.get("/api/kpis/revenue/mock", params={"days": 14, "seed": 3}).json()
        assert len(first) == 14
        assert first == second

    def test_mock_series_unknown_kpi(self, client):
        assert client.get("/api/kpis/churn/mock").status_code == 404


class TestAnalysisRoutes:

    def test_statistics(self, client):
        body = client.post("/api/statistics", json={"series": [0, 5, 10]}).json()
        assert body["change_percent"] == pytest.approx(1000.0)
        assert body["avg"] == pytest.approx(5.0)

    def test_analysis(self, client):
        response = client.post("/api/analysis", json={
            "series": WEEKLY_SERIES, "category": "Финансы", "horizon": 7, "seed": 1
        })
        assert response.status_code == 200

        body = response.json()
        result = body["result"]
        assert result["trend"]["label"] in {"moderate_growth", "strong_growth"}
        assert len(result["forecast"]["values"]) == 7
        assert set(result["drivers"]) <= set(DRIVER_POOLS["Финансы"]["positive"])
        assert body["trend_description"] == "уверенный рост"
        assert len(body["chart"]["labels"]) == 14

    def test_analysis_by_kpi_id(self, client):
        body = client.post("/api/analysis", json={"series": WEEKLY_SERIES, "kpi_id": "revenue"}).json()
        assert body["result"]["category"] == "Финансы"

    def test_analysis_requires_category_or_kpi(self, client):
        assert client.post("/api/analysis", json={"series": WEEKLY_SERIES}).status_code == 422

    def test_analysis_short_series(self, client):
        response = client.post("/api/analysis", json={"series": [1], "category": "Финансы"})
        assert response.status_code == 422

    def test_analysis_bad_horizon(self, client):
        response = client.post("/api/analysis", json={
            "series": WEEKLY_SERIES, "category": "Финансы", "horizon": 0
        })
        assert response.status_code == 422

    def test_analysis_unknown_category(self, client):
        response = client.post("/api/analysis", json={"series": WEEKLY_SERIES, "category": "Логистика"})
        assert response.status_code == 404

    def test_correlation(self, client):
        body = client.post("/api/correlation", json={"x": [5, 5, 5], "y": [1, 2, 3]}).json()
        assert body["coefficient"] == 0
        assert body["strength"] == "negligible"
        assert body["p_value"] is None

    def test_scenarios(self, client):
        response = client.post("/api/scenarios", json={
            "base": {"traffic": 10000, "conversion_rate": 0.05, "avg_order_value": 1500, "costs": 200000},
            "scenario": {"traffic": 1.2, "costs": 0.9},
            "kpi_keys": ["revenue", "roi"]
        })
        results = response.json()["results"]
        assert results[0]["alternative_value"] == pytest.approx(900000)
        assert results[1]["alternative_value"] == pytest.approx(4.0)


class TestNarrativeRoutes:

    def test_narrative(self, client, fake_synthesizer):
        response = client.post("/api/analysis/narrative", json={
            "series": WEEKLY_SERIES, "kpi_id": "revenue", "seed": 2
        })
        assert response.status_code == 200
        assert response.json()["narrative"] == "Выручка уверенно растёт"
        assert 'KPI "Выручка"' in fake_synthesizer.prompts[0]

    def test_narrative_stream(self, client, fake_synthesizer):
        response = client.post("/api/analysis/narrative/stream", json={
            "series": WEEKLY_SERIES, "category": "Финансы", "kpi_title": "Оборот"
        })
        assert response.status_code == 200
        assert response.text == "Выручка уверенно растёт"
        assert 'KPI "Оборот"' in fake_synthesizer.prompts[0]

    def test_narrative_errors_before_llm_call(self, client, fake_synthesizer):
        response = client.post("/api/analysis/narrative", json={"series": [1], "category": "Финансы"})
        assert response.status_code == 422
        assert fake_synthesizer.prompts == []

    def test_narrative_without_api_key(self, client, monkeypatch):
        from app.core.config import Settings, get_settings

        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        app.dependency_overrides[get_settings] = lambda: Settings(gemini_api_key="")

        response = client.post("/api/analysis/narrative", json={
            "series": WEEKLY_SERIES, "category": "Финансы"
        })
        assert response.status_code == 503

    def test_statistics_narrative(self, client, fake_synthesizer):
        response = client.post("/api/statistics/narrative", json={
            "series": [0, 5, 10], "kpi_title": "Продажи"
        })
        assert response.status_code == 200

        body = response.json()
        assert body["statistics"]["change_percent"] == pytest.approx(1000.0)
        assert body["narrative"] == "Выручка уверенно растёт"
        assert '"Продажи"' in fake_synthesizer.prompts[0]
        assert "1000.0%" in fake_synthesizer.prompts[0]

    def test_statistics_narrative_empty_series(self, client, fake_synthesizer):
        response = client.post("/api/statistics/narrative", json={"series": [], "kpi_title": "Продажи"})
        assert response.status_code == 422
        assert fake_synthesizer.prompts == []

    def test_correlation_narrative(self, client, fake_synthesizer):
        response = client.post("/api/correlation/narrative", json={
            "x": [1, 2, 3], "y": [3, 2, 1], "kpi1_title": "Выручка", "kpi2_title": "Отток"
        })
        assert response.status_code == 200

        body = response.json()
        assert body["report"]["coefficient"] == pytest.approx(-1.0)
        assert body["report"]["direction"] == "negative"
        assert body["narrative"] == "Выручка уверенно растёт"
        assert '"Отток"' in fake_synthesizer.prompts[0]

    def test_overview_narrative(self, client, fake_synthesizer):
        response = client.post("/api/overview/narrative", json={
            "kpis": {"Выручка": [100, 110, 120], "Продажи": [50, 50, 50]},
            "period": "квартал"
        })
        assert response.status_code == 200
        assert response.json()["narrative"] == "Выручка уверенно растёт"
        assert "**Продажи**" in fake_synthesizer.prompts[0]

    def test_overview_needs_two_kpis(self, client, fake_synthesizer):
        response = client.post("/api/overview/narrative", json={"kpis": {"Выручка": [1, 2, 3]}})
        assert response.status_code == 422
        assert fake_synthesizer.prompts == []

    def test_overview_short_series(self, client, fake_synthesizer):
        response = client.post("/api/overview/narrative", json={"kpis": {"A": [1, 2], "B": [3]}})
        assert response.status_code == 422
        assert fake_synthesizer.prompts == []


class TestRequestBounds:

    def test_horizon_upper_bound(self, client):
        response = client.post("/api/analysis", json={
            "series": WEEKLY_SERIES, "category": "Финансы", "horizon": 10 ** 8
        })
        assert response.status_code == 422

    def test_negative_series_rejected(self, client):
        response = client.post("/api/analysis", json={"series": [-100] * 30, "category": "Финансы"})
        assert response.status_code == 422

    def test_negative_scenario_rejected(self, client):
        response = client.post("/api/scenarios", json={
            "base": {"traffic": 10000, "conversion_rate": 0.05, "avg_order_value": 1500, "costs": 200000},
            "scenario": {"costs": -1}
        })
        assert response.status_code == 422
