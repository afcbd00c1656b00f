"""Business simulation engine.

Projects business metrics one and two years ahead from a baseline, the
ideas implemented so far, and the business profile's innovation readiness:

- MetricsVector: six named metrics with add / scale / clamp
- ImpactLedger: append-only record of implemented ideas
- aggregate_impact: summed idea impact at a horizon (x1.0 year one, x1.8 year two)
- project / compute_projections: readiness-adjusted baseline plus impact
- SimulationStore: per-session owner of state; recomputes on every mutation

Usage:
    from app.core.simulation import SimulationStore

    store = SimulationStore("demo", readiness_provider=lambda: 50)
    store.register_idea({"title": "Loyalty app", "impact": {"revenue": 10}})
    print(store.state.one_year_projection.revenue)  # 110.0
"""

from app.core.simulation.types import (
    DEFAULT_METRICS,
    METRIC_FIELDS,
    PERCENT_FIELDS,
    BusinessProfileReadiness,
    IdeaProposal,
    ImplementedIdea,
    MetricsVector,
    SimulationPhase,
    SimulationState,
)
from app.core.simulation.aggregation import (
    HORIZON_MULTIPLIERS,
    SUPPORTED_HORIZONS,
    InvalidHorizonError,
    aggregate_impact,
    horizon_multiplier,
)
from app.core.simulation.ledger import ImpactLedger
from app.core.simulation.projection import (
    READINESS_AMPLIFICATION,
    adjust_baseline,
    compute_projections,
    normalize_readiness,
    project,
)
from app.core.simulation.store import SimulationStore

__all__ = [
    "DEFAULT_METRICS",
    "METRIC_FIELDS",
    "PERCENT_FIELDS",
    "BusinessProfileReadiness",
    "IdeaProposal",
    "ImplementedIdea",
    "MetricsVector",
    "SimulationPhase",
    "SimulationState",
    "HORIZON_MULTIPLIERS",
    "SUPPORTED_HORIZONS",
    "InvalidHorizonError",
    "aggregate_impact",
    "horizon_multiplier",
    "ImpactLedger",
    "READINESS_AMPLIFICATION",
    "adjust_baseline",
    "compute_projections",
    "normalize_readiness",
    "project",
    "SimulationStore",
]
