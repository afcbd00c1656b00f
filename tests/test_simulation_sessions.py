"""Tests for app.core.simulation.sessions: per-session store registry."""

import pytest

from app.core.simulation.projection import adjust_baseline
from app.core.simulation.sessions import SimulationSessions
from app.core.simulation.types import DEFAULT_METRICS


class TestSimulationSessions:
    def test_same_store_for_same_session(self, sessions):
        assert sessions.get("a") is sessions.get("a")

    def test_sessions_are_isolated(self, sessions):
        sessions.get("a").register_idea({"title": "only in a", "impact": {"revenue": 5}})
        assert sessions.get("b").state.implemented_ideas == ()
        assert len(sessions.get("a").state.implemented_ideas) == 1

    def test_readiness_defaults_to_none(self, sessions):
        assert sessions.readiness("a") is None
        assert sessions.get("a").readiness == 0

    def test_set_readiness_recomputes(self, sessions):
        store = sessions.set_readiness("a", 50)

        assert sessions.readiness("a") == 50
        assert store.state.one_year_projection == adjust_baseline(DEFAULT_METRICS, 50)

    def test_readiness_is_per_session(self, sessions):
        sessions.set_readiness("a", 100)
        assert sessions.get("b").readiness == 0

    def test_clearing_readiness_counts_as_zero(self, sessions):
        sessions.set_readiness("a", 100)
        store = sessions.set_readiness("a", None)
        assert store.state.one_year_projection == DEFAULT_METRICS

    def test_restores_from_shared_persistence(self, memory_persistence):
        SimulationSessions(memory_persistence).get("a").register_idea({"title": "kept"})

        restored = SimulationSessions(memory_persistence).get("a")

        assert [idea.title for idea in restored.state.implemented_ideas] == ["kept"]


class TestSessionLimit:
    def test_least_recently_used_session_is_dropped(self, memory_persistence):
        sessions = SimulationSessions(memory_persistence, max_sessions=2)
        sessions.get("a")
        sessions.get("b")
        sessions.get("a")
        sessions.get("c")

        assert len(sessions) == 2
        assert "a" in sessions
        assert "b" not in sessions

    def test_dropped_session_is_restored_from_persistence(self, memory_persistence):
        sessions = SimulationSessions(memory_persistence, max_sessions=1)
        sessions.set_readiness("a", 50)
        idea = sessions.get("a").register_idea({"title": "kept", "impact": {"revenue": 5}})
        sessions.get("b")

        restored = sessions.get("a")

        assert restored.state.implemented_ideas == (idea,)
        assert restored.readiness == 50
        assert restored.state.one_year_projection.innovation_index == 46

    def test_limit_must_be_positive(self, memory_persistence):
        with pytest.raises(ValueError):
            SimulationSessions(memory_persistence, max_sessions=0)


class TestClose:
    def test_close_forgets_session(self, sessions, memory_persistence):
        sessions.set_readiness("a", 80)
        sessions.get("a").register_idea({"title": "gone"})

        sessions.close("a")

        assert "a" not in sessions
        assert sessions.readiness("a") is None
        assert memory_persistence.load("a") is None
        assert sessions.get("a").state.implemented_ideas == ()

    def test_close_unknown_session_is_noop(self, sessions):
        sessions.close("never-opened")
        assert len(sessions) == 0
