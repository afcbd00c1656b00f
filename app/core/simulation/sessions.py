"""Per-session registry of simulation stores and business profile readiness."""

import threading
from collections import OrderedDict
from functools import lru_cache, partial

from app.core.config import get_settings
from app.core.logging import get_logger
from app.core.simulation.ledger import Clock
from app.core.simulation.store import SimulationStore
from app.db.simulations import SimulationPersistence, get_simulation_persistence

logger = get_logger(__name__)

DEFAULT_MAX_SESSIONS = 1000


class SimulationSessions:
    """Hands out one ``SimulationStore`` per session id.

    Readiness belongs to the business profile, not the simulation, so it is
    held here and read by each store through a provider callback.

    At most ``max_sessions`` stores stay in memory. The least recently used
    one is dropped when the limit is reached; every mutation is already saved,
    so a dropped session is restored from persistence on its next use. Readiness
    is only set explicitly and is kept until ``close``.
    """

    def __init__(
        self,
        persistence: SimulationPersistence,
        clock: Clock | None = None,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
    ):
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self._persistence = persistence
        self._clock = clock
        self._max_sessions = max_sessions
        self._stores: OrderedDict[str, SimulationStore] = OrderedDict()
        self._readiness: dict[str, float | None] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._stores)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._stores

    def get(self, session_id: str) -> SimulationStore:
        """Return the session's store, restoring it from persistence on first use."""
        with self._lock:
            store = self._stores.get(session_id)
            if store is not None:
                self._stores.move_to_end(session_id)
                return store

            store = SimulationStore.load(
                session_id,
                self._persistence,
                readiness_provider=partial(self._readiness.get, session_id),
                clock=self._clock,
            )
            self._stores[session_id] = store
            logger.debug(f"Opened simulation session {session_id}")

            while len(self._stores) > self._max_sessions:
                evicted, _ = self._stores.popitem(last=False)
                logger.debug(f"Evicted simulation session {evicted} from memory")
            return store

    def close(self, session_id: str) -> None:
        """Forget a session: drop its store and readiness, and delete its saved document."""
        with self._lock:
            self._stores.pop(session_id, None)
            self._readiness.pop(session_id, None)
            self._persistence.delete(session_id)
        logger.info(f"Closed simulation session {session_id}", extra={"session_id": session_id})

    def readiness(self, session_id: str) -> float | None:
        return self._readiness.get(session_id)

    def set_readiness(self, session_id: str, readiness: float | None) -> SimulationStore:
        """Record the profile's readiness and recompute the session's projections."""
        store = self.get(session_id)
        store.refresh(apply=partial(self._readiness.__setitem__, session_id, readiness))
        logger.info(
            f"Innovation readiness for session {session_id} set to {readiness}",
            extra={"session_id": session_id},
        )
        return store


@lru_cache(maxsize=1)
def get_simulation_sessions() -> SimulationSessions:
    """Get the process-wide session registry (cached singleton)."""
    return SimulationSessions(
        get_simulation_persistence(),
        max_sessions=get_settings().SIMULATION_MAX_SESSIONS,
    )
