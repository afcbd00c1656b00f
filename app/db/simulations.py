"""Persistence strategies for session simulations.

The simulation store never talks to storage directly; it is handed one of
these strategies and calls ``save`` after every mutation.
"""

import re
from abc import ABC, abstractmethod
from functools import lru_cache
from pathlib import Path

from app.core.config import get_settings
from app.core.simulation.types import SimulationState

# Anchored for HTTP path validation; storage keys use fullmatch so a trailing
# newline is rejected too
SESSION_ID_PATTERN = r"^[A-Za-z0-9_-]{1,64}$"
_SESSION_ID_RE = re.compile(r"[A-Za-z0-9_-]{1,64}")


class InvalidSessionIdError(ValueError):
    """Raised when a session id cannot be used as a storage key."""


def validate_session_id(session_id: str) -> str:
    if not _SESSION_ID_RE.fullmatch(session_id):
        raise InvalidSessionIdError(f"Invalid session id: {session_id!r}")
    return session_id


class SimulationPersistence(ABC):
    """Save/load contract for one simulation document per session."""

    @abstractmethod
    def load(self, session_id: str) -> SimulationState | None:
        """Return the saved state, or None if nothing was saved.

        Raises:
            pydantic.ValidationError: If the stored document is corrupt
            OSError: If the stored document cannot be read
        """
        ...

    @abstractmethod
    def save(self, session_id: str, state: SimulationState) -> None:
        ...

    @abstractmethod
    def delete(self, session_id: str) -> None:
        ...


class InMemorySimulationPersistence(SimulationPersistence):
    """Keeps serialized documents in a dict. Used for dev and tests."""

    def __init__(self):
        self.documents: dict[str, str] = {}

    def load(self, session_id: str) -> SimulationState | None:
        raw = self.documents.get(validate_session_id(session_id))
        if raw is None:
            return None
        return SimulationState.model_validate_json(raw)

    def save(self, session_id: str, state: SimulationState) -> None:
        self.documents[validate_session_id(session_id)] = state.model_dump_json(by_alias=True)

    def delete(self, session_id: str) -> None:
        self.documents.pop(validate_session_id(session_id), None)


class FileSimulationPersistence(SimulationPersistence):
    """One ``<session_id>.json`` document per session under a directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, session_id: str) -> Path:
        return self.directory / f"{validate_session_id(session_id)}.json"

    def load(self, session_id: str) -> SimulationState | None:
        path = self._path(session_id)
        if not path.exists():
            return None
        return SimulationState.model_validate_json(path.read_bytes())

    def save(self, session_id: str, state: SimulationState) -> None:
        path = self._path(session_id)
        self.directory.mkdir(parents=True, exist_ok=True)
        # Write then rename so a crash never leaves a half-written document
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(state.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
        tmp_path.replace(path)

    def delete(self, session_id: str) -> None:
        self._path(session_id).unlink(missing_ok=True)


@lru_cache(maxsize=1)
def get_simulation_persistence() -> SimulationPersistence:
    """
    Get the configured persistence strategy (cached singleton).

    Returns:
        In-memory or file-backed persistence, per SIMULATION_PERSISTENCE
    """
    settings = get_settings()
    if settings.SIMULATION_PERSISTENCE == "file":
        return FileSimulationPersistence(settings.SIMULATION_STORE_DIR)
    return InMemorySimulationPersistence()
