"""Projection calculator: adjusted baseline plus aggregated idea impact.

Everything here is a pure function of its arguments. ``compute_projections``
is the reducer the store runs after every mutation; the one- and two-year
horizons are always recomputed together.
"""

import math
from collections.abc import Iterable

from app.core.simulation.aggregation import aggregate_impact, horizon_multiplier
from app.core.simulation.types import (
    ImplementedIdea,
    MetricsVector,
    SimulationState,
    round_half_up,
)

# Readiness of 100 lifts the innovation index by at most 30%
READINESS_AMPLIFICATION = 0.3

READINESS_MIN = 0.0
READINESS_MAX = 100.0


def normalize_readiness(readiness: float | None) -> float:
    """Missing or unusable readiness counts as 0; values are kept within [0, 100]."""
    if readiness is None:
        return READINESS_MIN
    try:
        value = float(readiness)
    except (TypeError, ValueError):
        return READINESS_MIN
    if math.isnan(value):
        return READINESS_MIN
    return max(READINESS_MIN, min(READINESS_MAX, value))


def adjust_baseline(baseline: MetricsVector, innovation_readiness: float | None) -> MetricsVector:
    """Amplify the baseline innovation index by organizational readiness.

    Only ``innovation_index`` changes; other metrics move solely through
    implemented ideas.
    """
    readiness = normalize_readiness(innovation_readiness)
    factor = 1 + (readiness / 100) * READINESS_AMPLIFICATION
    return baseline.model_copy(
        update={"innovation_index": round_half_up(baseline.innovation_index * factor)}
    )


def project(
    baseline: MetricsVector,
    ideas: Iterable[ImplementedIdea],
    innovation_readiness: float | None,
    horizon_years: int,
) -> MetricsVector:
    """Project metrics ``horizon_years`` ahead.

    Horizon scaling resolves to whole metric points: where the multiplier is
    not 1 the aggregated impact is rounded before it is added to the adjusted
    baseline. Unscaled one-year deltas, fractional ones included, pass through.

    The result is not clamped: callers clamp percent fields at the presentation
    boundary so signed deltas survive for analytics.

    Raises:
        InvalidHorizonError: If ``horizon_years`` is not 1 or 2.
    """
    impact = aggregate_impact(ideas, horizon_years)
    if horizon_multiplier(horizon_years) != 1.0:
        impact = impact.rounded()
    return adjust_baseline(baseline, innovation_readiness).add(impact)


def compute_projections(
    state: SimulationState, innovation_readiness: float | None
) -> SimulationState:
    """Return a copy of ``state`` with both projections recomputed from its inputs."""
    ideas = state.implemented_ideas
    return state.model_copy(
        update={
            "one_year_projection": project(state.current_metrics, ideas, innovation_readiness, 1),
            "two_year_projection": project(state.current_metrics, ideas, innovation_readiness, 2),
        }
    )
