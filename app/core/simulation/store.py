"""Session simulation store: the single owner of simulation state.

All mutations go through the store. Each one runs synchronously to
completion: the inputs change, both projections are recomputed, and the new
state is handed to the persistence strategy before the call returns.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from app.core.logging import get_logger, log_with_context
from app.core.simulation.ledger import Clock, ImpactLedger
from app.core.simulation.projection import compute_projections, normalize_readiness, project
from app.core.simulation.types import (
    DEFAULT_METRICS,
    IdeaProposal,
    ImplementedIdea,
    MetricsVector,
    SimulationPhase,
    SimulationState,
)

if TYPE_CHECKING:
    from app.db.simulations import SimulationPersistence

logger = get_logger(__name__)

ReadinessProvider = Callable[[], float | None]


def _no_readiness() -> float | None:
    return None


class SimulationStore:
    """Owns one session's baseline, impact ledger and derived projections."""

    def __init__(
        self,
        session_id: str,
        persistence: SimulationPersistence | None = None,
        readiness_provider: ReadinessProvider | None = None,
        initial_state: SimulationState | None = None,
        clock: Clock | None = None,
    ):
        self.session_id = session_id
        self._persistence = persistence
        self._readiness_provider = readiness_provider or _no_readiness
        self._lock = threading.RLock()

        initial_state = initial_state or SimulationState()
        self._baseline = initial_state.current_metrics
        self._ledger = ImpactLedger(
            initial_state.implemented_ideas,
            on_change=self._on_ledger_change,
            clock=clock,
        )
        # Stored projections are never trusted; derive them from the inputs
        self._state = self._recompute()

    @classmethod
    def load(
        cls,
        session_id: str,
        persistence: SimulationPersistence,
        readiness_provider: ReadinessProvider | None = None,
        clock: Clock | None = None,
    ) -> "SimulationStore":
        """Build a store from the persisted document, or from defaults if there is none."""
        try:
            saved = persistence.load(session_id)
        except (ValidationError, UnicodeDecodeError, OSError):
            logger.warning(
                f"Discarding unreadable simulation for session {session_id}",
                exc_info=True,
                extra={"session_id": session_id},
            )
            saved = None

        if saved is not None:
            logger.info(
                f"Restored simulation for session {session_id} "
                f"({len(saved.implemented_ideas)} ideas)",
                extra={"session_id": session_id},
            )

        return cls(
            session_id,
            persistence=persistence,
            readiness_provider=readiness_provider,
            initial_state=saved,
            clock=clock,
        )

    # ==========================================================================
    # Read side
    # ==========================================================================

    @property
    def state(self) -> SimulationState:
        return self._state

    @property
    def phase(self) -> SimulationPhase:
        return self._state.phase

    @property
    def readiness(self) -> float:
        return normalize_readiness(self._readiness_provider())

    def projection(self, horizon_years: int) -> MetricsVector:
        """Project the current inputs at one horizon.

        Raises:
            InvalidHorizonError: If ``horizon_years`` is not 1 or 2.
        """
        state = self._state
        return project(
            state.current_metrics, state.implemented_ideas, self.readiness, horizon_years
        )

    # ==========================================================================
    # Mutations
    # ==========================================================================

    def register_idea(self, proposal: IdeaProposal | Mapping[str, Any]) -> ImplementedIdea:
        """Implement an idea: append it to the ledger and recompute projections."""
        with self._lock:
            idea = self._ledger.append(proposal)

        log_with_context(
            logger,
            logging.INFO,
            f"Implemented idea '{idea.title}'",
            session_id=self.session_id,
            idea_id=idea.id,
            coach_id=idea.coach_id,
            ideas=len(self._ledger),
        )
        return idea

    def replace_baseline(self, metrics: MetricsVector | Mapping[str, Any]) -> SimulationState:
        """Overwrite the baseline wholesale; the ledger is left untouched."""
        if not isinstance(metrics, MetricsVector):
            metrics = MetricsVector.model_validate(metrics)

        with self._lock:
            self._baseline = metrics
            self._commit()

        log_with_context(
            logger,
            logging.INFO,
            "Replaced simulation baseline",
            session_id=self.session_id,
            revenue=metrics.revenue,
            profit=metrics.profit,
        )
        return self._state

    def reset(self) -> SimulationState:
        """Restore the default baseline and empty the ledger."""
        with self._lock:
            self._baseline = DEFAULT_METRICS
            # clear() notifies the store, which recomputes and saves
            self._ledger.clear()

        log_with_context(logger, logging.INFO, "Reset simulation", session_id=self.session_id)
        return self._state

    def refresh(self, apply: Callable[[], None] | None = None) -> SimulationState:
        """Recompute after an input owned elsewhere (readiness) changed.

        Args:
            apply: Optional update to that input, run under the store lock so
                the write and the recompute happen together
        """
        with self._lock:
            if apply is not None:
                apply()
            self._commit()
        return self._state

    # ==========================================================================
    # Internals
    # ==========================================================================

    def _on_ledger_change(self, ideas: tuple[ImplementedIdea, ...]) -> None:
        self._commit()

    def _recompute(self) -> SimulationState:
        inputs = SimulationState(
            current_metrics=self._baseline,
            implemented_ideas=self._ledger.all(),
        )
        return compute_projections(inputs, self.readiness)

    def _commit(self) -> None:
        self._state = self._recompute()
        self._save()

    def _save(self) -> None:
        if self._persistence is None:
            return
        try:
            self._persistence.save(self.session_id, self._state)
        except Exception:
            # In-memory state stays authoritative; the next mutation retries the save
            logger.warning(
                f"Failed to persist simulation for session {self.session_id}",
                exc_info=True,
                extra={"session_id": self.session_id},
            )
