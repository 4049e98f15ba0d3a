"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from mmm_attribution.api import create_app
from mmm_attribution.api.app import _status_for
from mmm_attribution.config import EngineConfig
from mmm_attribution.connectors import InMemoryProvider, SQLiteProvider
from mmm_attribution.core.exceptions import (
    ConnectorError,
    DegenerateTarget,
    DimensionMismatch,
    SingularMatrix,
)


@pytest.fixture
def client(scenario_provider):
    return TestClient(create_app(provider=scenario_provider, config=EngineConfig()))


class TestEndpoints:
    """Successful requests."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["provider"] == "InMemoryProvider"

    def test_regression(self, client):
        response = client.get("/api/regression", params={"target": "revenue"})

        assert response.status_code == 200
        assert response.json() == {
            "target": "revenue",
            "intercept": 100.0,
            "coefficients": {"TV": 2.0},
            "r_squared": 1.0,
            "observations": 3,
        }

    def test_contributions(self, client):
        response = client.get("/api/contributions")

        assert response.status_code == 200
        body = response.json()
        assert body["contributions"][1] == {
            "period": "2023-01-09",
            "base": 100.0,
            "channels": {"TV": 40.0},
            "total": 140.0,
        }
        assert body["summary"]["TV"]["percent_of_total"] == 28.6

    def test_period_range(self, client):
        response = client.get("/api/regression", params={"start": "2023-01-09"})

        assert response.status_code == 200
        assert response.json()["observations"] == 2

    def test_chart_series(self, client):
        response = client.get("/api/charts/spend_over_time")

        assert response.status_code == 200
        body = response.json()
        assert body["chart_type"] == "spend_over_time"
        assert body["series"][0]["y"] == [10.0, 20.0, 30.0]

    def test_chart_plotly(self, client):
        response = client.get(
            "/api/charts/contribution_breakdown", params={"format": "plotly"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["data"][0]["type"] == "bar"
        assert body["layout"]["barmode"] == "stack"


class TestErrors:
    """Error envelopes and status codes."""

    def test_unknown_target(self, client):
        assert client.get("/api/regression", params={"target": "profit"}).status_code == 422

    def test_unknown_chart_type(self, client):
        assert client.get("/api/charts/pie").status_code == 422

    def test_unknown_format(self, client):
        response = client.get("/api/charts/spend_over_time", params={"format": "svg"})
        assert response.status_code == 422

    def test_degenerate_target(self, scenario_channels, scenario_spend):
        outcomes = [
            {"period": r.period, "revenue": 1.0, "conversions": 1.0} for r in scenario_spend
        ]
        provider = InMemoryProvider(scenario_channels, scenario_spend, outcomes)
        client = TestClient(create_app(provider=provider, config=EngineConfig()))

        response = client.get("/api/regression")

        assert response.status_code == 422
        assert response.json()["error"] == "DEGENERATE_TARGET"

    def test_data_integrity(self, scenario_channels, scenario_spend, scenario_outcomes):
        provider = InMemoryProvider(scenario_channels, scenario_spend, scenario_outcomes[:2])
        client = TestClient(create_app(provider=provider, config=EngineConfig()))

        response = client.get("/api/contributions")

        assert response.status_code == 422
        assert response.json()["error"] == "DATA_INTEGRITY_ERROR"

    def test_missing_database(self, tmp_path):
        provider = SQLiteProvider(tmp_path / "absent.db")
        client = TestClient(create_app(provider=provider, config=EngineConfig()))

        response = client.get("/api/regression")

        assert response.status_code == 503
        assert response.json()["error"] == "CONNECTOR_ERROR"

    def test_status_mapping(self):
        assert _status_for(SingularMatrix("singular")) == 422
        assert _status_for(DegenerateTarget("revenue")) == 422
        assert _status_for(ConnectorError("down")) == 503
        assert _status_for(DimensionMismatch("bug")) == 500
