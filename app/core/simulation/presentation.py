"""Presentation view of a simulation: clamped, whole-point, formatted metrics.

The engine keeps raw signed values; this module is the boundary where percent
fields are clamped to [0, 100] and numbers become display strings.
"""

import re
from enum import StrEnum

from pydantic import Field
from pydantic.alias_generators import to_camel

from app.core.simulation.types import (
    METRIC_FIELDS,
    PERCENT_FIELDS,
    CamelModel,
    ImplementedIdea,
    MetricsVector,
    SimulationPhase,
    SimulationState,
)

CURRENCY_FIELDS: frozenset[str] = frozenset({"revenue", "profit"})

# Differences within +/- this many points read as flat
TREND_THRESHOLD = 5


class MetricTrend(StrEnum):
    up = "up"
    down = "down"
    flat = "flat"


TREND_ARROWS: dict[MetricTrend, str] = {
    MetricTrend.up: "↑",
    MetricTrend.down: "↓",
    MetricTrend.flat: "→",
}


def _to_snake(metric: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", metric).lower()


def metric_label(metric: str) -> str:
    """``customerSatisfaction`` or ``customer_satisfaction`` -> ``Customer Satisfaction``."""
    return " ".join(word.capitalize() for word in _to_snake(metric).split("_") if word)


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"


def format_metric_value(value: float, metric: str) -> str:
    """Revenue and profit read as ``$110K``; percent metrics as ``70%``."""
    key = _to_snake(metric)
    number = _format_number(value)
    if key in CURRENCY_FIELDS:
        return f"${number}K"
    if key in PERCENT_FIELDS:
        return f"{number}%"
    return number


def metric_trend(current: float, projected: float) -> MetricTrend:
    difference = projected - current
    if difference > TREND_THRESHOLD:
        return MetricTrend.up
    if difference < -TREND_THRESHOLD:
        return MetricTrend.down
    return MetricTrend.flat


class MetricDisplayRow(CamelModel):
    """One metric across the three horizons, ready for display."""

    metric: str = Field(..., description="Wire name of the metric (camelCase)")
    label: str
    current: float
    one_year: float
    two_year: float
    current_display: str
    one_year_display: str
    two_year_display: str
    trend: MetricTrend = Field(..., description="Current vs one-year projection")
    trend_arrow: str


class SimulationView(CamelModel):
    """Outbound snapshot: raw state plus display rows."""

    session_id: str | None = None
    phase: SimulationPhase
    innovation_readiness: float
    current_metrics: MetricsVector
    one_year_projection: MetricsVector
    two_year_projection: MetricsVector
    implemented_ideas: tuple[ImplementedIdea, ...]
    display: list[MetricDisplayRow]


def display_metrics(metrics: MetricsVector) -> MetricsVector:
    """Clamp percent fields and round to whole points."""
    return metrics.clamp_percent_fields().rounded()


def build_display_rows(state: SimulationState) -> list[MetricDisplayRow]:
    current = display_metrics(state.current_metrics)
    one_year = display_metrics(state.one_year_projection)
    two_year = display_metrics(state.two_year_projection)

    rows: list[MetricDisplayRow] = []
    for name in METRIC_FIELDS:
        now, year_one, year_two = (
            getattr(current, name),
            getattr(one_year, name),
            getattr(two_year, name),
        )
        trend = metric_trend(now, year_one)
        rows.append(
            MetricDisplayRow(
                metric=to_camel(name),
                label=metric_label(name),
                current=now,
                one_year=year_one,
                two_year=year_two,
                current_display=format_metric_value(now, name),
                one_year_display=format_metric_value(year_one, name),
                two_year_display=format_metric_value(year_two, name),
                trend=trend,
                trend_arrow=TREND_ARROWS[trend],
            )
        )
    return rows


def build_simulation_view(
    state: SimulationState,
    session_id: str | None = None,
    innovation_readiness: float = 0.0,
) -> SimulationView:
    return SimulationView(
        session_id=session_id,
        phase=state.phase,
        innovation_readiness=innovation_readiness,
        current_metrics=state.current_metrics,
        one_year_projection=state.one_year_projection,
        two_year_projection=state.two_year_projection,
        implemented_ideas=state.implemented_ideas,
        display=build_display_rows(state),
    )
