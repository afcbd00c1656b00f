"""Heuristic growth estimate used when no model-backed evaluation is available."""

from app.core.simulation.types import (
    PERCENT_FIELDS,
    PERCENT_MAX,
    CamelModel,
    MetricsVector,
    round_half_up,
)

ONE_YEAR_GROWTH: dict[str, float] = {
    "revenue": 1.15,
    "profit": 1.12,
    "customer_satisfaction": 1.05,
    "market_share": 1.08,
    "employee_engagement": 1.03,
    "innovation_index": 1.12,
}

TWO_YEAR_GROWTH: dict[str, float] = {
    "revenue": 1.32,
    "profit": 1.25,
    "customer_satisfaction": 1.08,
    "market_share": 1.15,
    "employee_engagement": 1.06,
    "innovation_index": 1.25,
}


class FallbackEstimate(CamelModel):
    one_year: MetricsVector
    two_years: MetricsVector


def _grow(current: MetricsVector, growth: dict[str, float]) -> MetricsVector:
    values = {}
    for name, value in current.as_dict().items():
        grown = round_half_up(value * growth[name])
        # Percent fields are capped at 100 but not floored
        values[name] = min(PERCENT_MAX, grown) if name in PERCENT_FIELDS else grown
    return MetricsVector(**values)


def estimate_fallback_projection(current: MetricsVector) -> FallbackEstimate:
    """Flat percentage growth over one and two years, rounded to whole points."""
    return FallbackEstimate(
        one_year=_grow(current, ONE_YEAR_GROWTH),
        two_years=_grow(current, TWO_YEAR_GROWTH),
    )
