"""Pytest configuration and fixtures."""

import os
from datetime import UTC, datetime, timedelta

import pytest

from app.core.simulation.sessions import SimulationSessions
from app.db.simulations import InMemorySimulationPersistence


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ["SANDBOX_ENV"] = "test"
    os.environ["SIMULATION_PERSISTENCE"] = "memory"


class FakeClock:
    """Deterministic clock: each call advances by ``step``."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)):
        self.now = start or datetime(2024, 1, 1, tzinfo=UTC)
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_persistence() -> InMemorySimulationPersistence:
    return InMemorySimulationPersistence()


@pytest.fixture
def sessions(memory_persistence) -> SimulationSessions:
    return SimulationSessions(memory_persistence)
