"""Pydantic models for the business simulation engine."""

import math
import sys
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# =============================================================================
# Metric schema
# =============================================================================

METRIC_FIELDS: tuple[str, ...] = (
    "revenue",
    "profit",
    "customer_satisfaction",
    "market_share",
    "employee_engagement",
    "innovation_index",
)

# Conventionally 0-100; clamped at the presentation boundary only
PERCENT_FIELDS: frozenset[str] = frozenset(
    {"customer_satisfaction", "market_share", "employee_engagement", "innovation_index"}
)

PERCENT_MIN = 0.0
PERCENT_MAX = 100.0

# Largest magnitude a computed metric can take
METRIC_LIMIT = sys.float_info.max


def saturate(value: float) -> float:
    """Pin an overflowed result to the largest finite float of the same sign."""
    if math.isinf(value):
        return math.copysign(METRIC_LIMIT, value)
    return value


def round_half_up(value: float) -> float:
    """Round to the nearest whole number, halves toward positive infinity.

    Python's ``round`` uses banker's rounding (``round(0.5) == 0``); metric
    points always round ``.5`` upward.
    """
    value = saturate(value)
    return float(math.floor(value + 0.5))


def to_metric_number(value: Any) -> float:
    """Coerce a raw metric value to a finite float, 0 for anything unusable."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire; both accepted on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# =============================================================================
# MetricsVector
# =============================================================================


class MetricsVector(CamelModel):
    """Six named business metrics. Immutable; every operation returns a new vector."""

    revenue: float = 0.0
    profit: float = 0.0
    customer_satisfaction: float = 0.0
    market_share: float = 0.0
    employee_engagement: float = 0.0
    innovation_index: float = 0.0

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_metric(cls, value: Any) -> float:
        return to_metric_number(value)

    @classmethod
    def zero(cls) -> "MetricsVector":
        return cls()

    @classmethod
    def _computed(cls, values: dict[str, float]) -> "MetricsVector":
        # Results of arithmetic skip input coercion; overflow saturates instead of
        # collapsing to 0
        return cls.model_construct(**{name: saturate(values[name]) for name in METRIC_FIELDS})

    def as_dict(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in METRIC_FIELDS}

    def add(self, other: "MetricsVector") -> "MetricsVector":
        """Field-wise sum."""
        return self._computed(
            {name: getattr(self, name) + getattr(other, name) for name in METRIC_FIELDS}
        )

    def scale(self, factor: float) -> "MetricsVector":
        """Field-wise multiplication by a scalar."""
        return self._computed({name: getattr(self, name) * factor for name in METRIC_FIELDS})

    def clamp_percent_fields(self) -> "MetricsVector":
        """Clamp the percent-like fields into [0, 100]; revenue and profit pass through."""
        values = self.as_dict()
        for name in PERCENT_FIELDS:
            values[name] = max(PERCENT_MIN, min(PERCENT_MAX, values[name]))
        return self._computed(values)

    def rounded(self) -> "MetricsVector":
        """Round every field to whole metric points."""
        return self._computed({name: round_half_up(v) for name, v in self.as_dict().items()})


DEFAULT_METRICS = MetricsVector(
    revenue=100,
    profit=10,
    customer_satisfaction=70,
    market_share=5,
    employee_engagement=60,
    innovation_index=40,
)


# =============================================================================
# Ideas
# =============================================================================


def _coerce_impact(value: Any) -> Any:
    # Anything that is not a mapping or vector is treated as "no impact"
    if isinstance(value, (MetricsVector, dict)):
        return value
    return MetricsVector.zero()


class IdeaProposal(CamelModel):
    """An idea suggested by a coach, not yet implemented."""

    title: str = Field(..., description="Short idea title")
    description: str = Field(default="", description="One or two sentence summary")
    impact: MetricsVector = Field(
        default_factory=MetricsVector, description="Signed metric delta"
    )
    coach_id: str | None = Field(default=None, description="Coach that proposed the idea")

    @field_validator("impact", mode="before")
    @classmethod
    def _default_impact(cls, value: Any) -> Any:
        return _coerce_impact(value)


class ImplementedIdea(CamelModel):
    """A registered idea in the impact ledger. Never mutated after creation."""

    id: str
    title: str
    description: str = ""
    impact: MetricsVector = Field(default_factory=MetricsVector)
    implementation_date: datetime
    coach_id: str | None = None

    @field_validator("impact", mode="before")
    @classmethod
    def _default_impact(cls, value: Any) -> Any:
        return _coerce_impact(value)

    @field_validator("implementation_date")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


# =============================================================================
# Business profile input
# =============================================================================


class BusinessProfileReadiness(CamelModel):
    """Readiness scalar owned by the business profile."""

    innovation_readiness: float | None = Field(
        default=None, ge=0, le=100, description="Organizational innovation capability (0-100)"
    )


# =============================================================================
# Simulation state
# =============================================================================


class SimulationPhase(StrEnum):
    idle = "idle"
    active = "active"


class SimulationState(CamelModel):
    """Complete state of one session's simulation.

    Projections are derived: they are only ever produced by
    ``compute_projections`` and never set directly by callers.
    """

    current_metrics: MetricsVector = Field(default_factory=lambda: DEFAULT_METRICS)
    one_year_projection: MetricsVector = Field(default_factory=lambda: DEFAULT_METRICS)
    two_year_projection: MetricsVector = Field(default_factory=lambda: DEFAULT_METRICS)
    implemented_ideas: tuple[ImplementedIdea, ...] = ()

    @property
    def phase(self) -> SimulationPhase:
        if self.implemented_ideas or self.current_metrics != DEFAULT_METRICS:
            return SimulationPhase.active
        return SimulationPhase.idle
