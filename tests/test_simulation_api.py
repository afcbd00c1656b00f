"""Tests for simulation and suggestion API endpoints."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.core.simulation.sessions import SimulationSessions, get_simulation_sessions
from app.main import app

client = TestClient(app)

LOYALTY_APP = {
    "title": "Loyalty app",
    "description": "Reward repeat visits",
    "impact": {"revenue": 10, "profit": 5, "innovationIndex": 8},
    "coachId": "coach-1",
}


@pytest.fixture(autouse=True)
def override_sessions(sessions):
    """Give every test a fresh in-memory session registry."""
    app.dependency_overrides[get_simulation_sessions] = lambda: sessions
    yield sessions
    app.dependency_overrides.clear()


@pytest.fixture
def failing_sessions():
    broken = MagicMock(spec=SimulationSessions)
    broken.get.side_effect = Exception("storage offline")
    broken.set_readiness.side_effect = Exception("storage offline")
    app.dependency_overrides[get_simulation_sessions] = lambda: broken
    return broken


# =============================================================================
# Reading
# =============================================================================


class TestGetSimulation:
    def test_new_session_is_idle_with_defaults(self):
        response = client.get("/v1/simulations/session-1")

        assert response.status_code == 200
        data = response.json()
        assert data["sessionId"] == "session-1"
        assert data["phase"] == "idle"
        assert data["innovationReadiness"] == 0
        assert data["currentMetrics"]["customerSatisfaction"] == 70
        assert data["oneYearProjection"] == data["currentMetrics"]
        assert data["implementedIdeas"] == []
        assert len(data["display"]) == 6

    def test_invalid_session_id_rejected(self):
        response = client.get("/v1/simulations/bad.id")
        assert response.status_code == 422

    def test_error_returns_500(self, failing_sessions):
        response = client.get("/v1/simulations/session-1")

        assert response.status_code == 500
        assert "Failed to load simulation" in response.json()["detail"]


# =============================================================================
# Mutations
# =============================================================================


class TestImplementIdea:
    def test_implement_idea_returns_created(self):
        response = client.post("/v1/simulations/session-1/ideas", json=LOYALTY_APP)

        assert response.status_code == 201
        data = response.json()
        assert data["id"].startswith("idea-")
        assert data["title"] == "Loyalty app"
        assert data["coachId"] == "coach-1"
        assert data["impact"]["innovationIndex"] == 8
        assert "implementationDate" in data

    def test_projections_include_idea_and_readiness(self):
        client.put("/v1/simulations/session-1/readiness", json={"innovationReadiness": 50})
        client.post("/v1/simulations/session-1/ideas", json=LOYALTY_APP)

        data = client.get("/v1/simulations/session-1").json()

        assert data["phase"] == "active"
        assert data["oneYearProjection"] == {
            "revenue": 110,
            "profit": 15,
            "customerSatisfaction": 70,
            "marketShare": 5,
            "employeeEngagement": 60,
            "innovationIndex": 54,
        }
        assert data["twoYearProjection"]["innovationIndex"] == 60
        assert data["twoYearProjection"]["revenue"] == 118

    def test_missing_title_rejected(self):
        response = client.post("/v1/simulations/session-1/ideas", json={"impact": {}})
        assert response.status_code == 422

    def test_malformed_impact_counts_as_zero(self):
        response = client.post(
            "/v1/simulations/session-1/ideas",
            json={"title": "Vague", "impact": {"revenue": "a lot", "profit": None}},
        )

        assert response.status_code == 201
        assert response.json()["impact"]["revenue"] == 0
        assert response.json()["impact"]["profit"] == 0


class TestBaselineAndReset:
    def test_replace_baseline(self):
        response = client.put(
            "/v1/simulations/session-1/baseline",
            json={"revenue": 250, "profit": 30, "customerSatisfaction": 80},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["currentMetrics"]["revenue"] == 250
        assert data["currentMetrics"]["marketShare"] == 0
        assert data["oneYearProjection"]["revenue"] == 250
        assert data["phase"] == "active"

    def test_reset_restores_defaults(self):
        client.post("/v1/simulations/session-1/ideas", json=LOYALTY_APP)
        client.put("/v1/simulations/session-1/baseline", json={"revenue": 5})

        response = client.post("/v1/simulations/session-1/reset")

        assert response.status_code == 200
        data = response.json()
        assert data["phase"] == "idle"
        assert data["implementedIdeas"] == []
        assert data["currentMetrics"]["revenue"] == 100


class TestCloseSimulation:
    def test_delete_resets_session(self, override_sessions):
        client.post("/v1/simulations/session-1/ideas", json=LOYALTY_APP)

        response = client.delete("/v1/simulations/session-1")

        assert response.status_code == 204
        assert "session-1" not in override_sessions
        data = client.get("/v1/simulations/session-1").json()
        assert data["implementedIdeas"] == []

    def test_error_returns_500(self, failing_sessions):
        failing_sessions.close.side_effect = Exception("storage offline")

        response = client.delete("/v1/simulations/session-1")

        assert response.status_code == 500
        assert "Failed to close simulation" in response.json()["detail"]


class TestReadiness:
    def test_set_readiness_recomputes(self):
        response = client.put(
            "/v1/simulations/session-1/readiness", json={"innovationReadiness": 100}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["innovationReadiness"] == 100
        assert data["oneYearProjection"]["innovationIndex"] == 52
        assert data["currentMetrics"]["innovationIndex"] == 40

    def test_null_readiness_counts_as_zero(self):
        response = client.put(
            "/v1/simulations/session-1/readiness", json={"innovationReadiness": None}
        )

        assert response.status_code == 200
        assert response.json()["oneYearProjection"]["innovationIndex"] == 40

    @pytest.mark.parametrize("readiness", [-1, 101])
    def test_out_of_range_readiness_rejected(self, readiness):
        response = client.put(
            "/v1/simulations/session-1/readiness", json={"innovationReadiness": readiness}
        )
        assert response.status_code == 422

    def test_error_returns_500(self, failing_sessions):
        response = client.put(
            "/v1/simulations/session-1/readiness", json={"innovationReadiness": 10}
        )

        assert response.status_code == 500
        assert "Failed to update readiness" in response.json()["detail"]


# =============================================================================
# Projections and estimate
# =============================================================================


class TestProjections:
    @pytest.mark.parametrize(("horizon", "expected_revenue"), [(1, 110), (2, 118)])
    def test_projection_by_horizon(self, horizon, expected_revenue):
        client.post("/v1/simulations/session-1/ideas", json=LOYALTY_APP)

        response = client.get(f"/v1/simulations/session-1/projections/{horizon}")

        assert response.status_code == 200
        assert response.json()["revenue"] == expected_revenue

    def test_unsupported_horizon_returns_400(self):
        response = client.get("/v1/simulations/session-1/projections/3")

        assert response.status_code == 400
        assert "Unsupported projection horizon" in response.json()["detail"]

    def test_non_integer_horizon_returns_422(self):
        response = client.get("/v1/simulations/session-1/projections/two")
        assert response.status_code == 422

    def test_fallback_estimate(self):
        response = client.get("/v1/simulations/session-1/estimate")

        assert response.status_code == 200
        data = response.json()
        assert data["oneYear"]["revenue"] == 115
        assert data["twoYears"]["innovationIndex"] == 50


# =============================================================================
# Suggestions
# =============================================================================


class TestParseSuggestions:
    def test_parse_numbered_reply(self):
        text = (
            "IDEA 1:\nTitle: Loyalty app\nDescription: Points for repeat visits.\n"
            "Impact:\n- Revenue: 10\n- Innovation Index: 8\n"
        )

        response = client.post("/v1/suggestions/parse", json={"text": text, "coach_id": "c1"})

        assert response.status_code == 200
        (proposal,) = response.json()
        assert proposal["title"] == "Loyalty app"
        assert proposal["coachId"] == "c1"
        assert proposal["impact"]["innovationIndex"] == 8

    def test_parsed_proposal_can_be_implemented(self):
        text = "IDEA:\nTitle: Seasonal menu\nDescription: Local produce.\n"
        (proposal,) = client.post("/v1/suggestions/parse", json={"text": text}).json()

        response = client.post("/v1/simulations/session-1/ideas", json=proposal)

        assert response.status_code == 201
        assert response.json()["impact"]["innovationIndex"] == 15

    def test_too_large_text_returns_413(self):
        response = client.post("/v1/suggestions/parse", json={"text": "x" * 20_001})
        assert response.status_code == 413
