"""Aggregate impact of implemented ideas at a projection horizon."""

from collections.abc import Iterable

from app.core.simulation.types import ImplementedIdea, MetricsVector

# Ideas are assumed to keep paying off in the second year. The year-two factor
# is flat: it does not depend on how long an individual idea has been live.
HORIZON_MULTIPLIERS: dict[int, float] = {
    1: 1.0,
    2: 1.8,
}

SUPPORTED_HORIZONS: tuple[int, ...] = tuple(HORIZON_MULTIPLIERS)


class InvalidHorizonError(ValueError):
    """Raised when a projection horizon other than 1 or 2 years is requested."""


def horizon_multiplier(horizon_years: int) -> float:
    """Return the impact multiplier for a horizon.

    Raises:
        InvalidHorizonError: If the horizon is not 1 or 2.
    """
    # bool is an int subclass; True is not a horizon
    if isinstance(horizon_years, bool) or horizon_years not in HORIZON_MULTIPLIERS:
        raise InvalidHorizonError(
            f"Unsupported projection horizon: {horizon_years!r} "
            f"(expected one of {list(SUPPORTED_HORIZONS)})"
        )
    return HORIZON_MULTIPLIERS[horizon_years]


def aggregate_impact(ideas: Iterable[ImplementedIdea], horizon_years: int) -> MetricsVector:
    """Sum every idea's impact, scaled by the horizon multiplier.

    An empty idea list yields the zero vector.
    """
    multiplier = horizon_multiplier(horizon_years)

    # Every idea shares the multiplier, so scale the sum once
    total = MetricsVector.zero()
    for idea in ideas:
        total = total.add(idea.impact)
    return total.scale(multiplier)
