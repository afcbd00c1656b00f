"""Append-only ledger of implemented ideas."""

from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from app.core.simulation.types import IdeaProposal, ImplementedIdea

LedgerListener = Callable[[tuple[ImplementedIdea, ...]], None]
Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


class ImpactLedger:
    """Ordered, append-only storage of ``ImplementedIdea`` records.

    Entries are only added by ``append`` and only removed all at once by
    ``clear``. The owning store subscribes through ``on_change`` and is told
    about every mutation so it can recompute and persist.
    """

    def __init__(
        self,
        ideas: Iterable[ImplementedIdea] = (),
        on_change: LedgerListener | None = None,
        clock: Clock | None = None,
    ):
        self._ideas: list[ImplementedIdea] = list(ideas)
        self._on_change = on_change
        self._clock = clock or _utc_now

    def __len__(self) -> int:
        return len(self._ideas)

    def all(self) -> tuple[ImplementedIdea, ...]:
        """Read-only snapshot in insertion order."""
        return tuple(self._ideas)

    def append(self, proposal: IdeaProposal | Mapping[str, Any]) -> ImplementedIdea:
        """Register an idea: assign id and implementation date, then store it last."""
        if not isinstance(proposal, IdeaProposal):
            proposal = IdeaProposal.model_validate(proposal)

        implemented_at = self._next_timestamp()
        idea = ImplementedIdea(
            id=self._new_id(implemented_at),
            title=proposal.title,
            description=proposal.description,
            impact=proposal.impact,
            implementation_date=implemented_at,
            coach_id=proposal.coach_id,
        )
        self._ideas.append(idea)
        self._notify()
        return idea

    def clear(self) -> None:
        self._ideas.clear()
        self._notify()

    def _next_timestamp(self) -> datetime:
        now = self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        # Dates never go backwards in ledger order, even if the wall clock does
        if self._ideas and now < self._ideas[-1].implementation_date:
            return self._ideas[-1].implementation_date
        return now

    def _new_id(self, implemented_at: datetime) -> str:
        existing = {idea.id for idea in self._ideas}
        millis = int(implemented_at.timestamp() * 1000)
        while True:
            candidate = f"idea-{millis}-{uuid4().hex[:8]}"
            if candidate not in existing:
                return candidate

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.all())
