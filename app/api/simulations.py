"""API endpoints for session business simulations."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path

from app.core.logging import get_logger
from app.core.simulation import (
    BusinessProfileReadiness,
    IdeaProposal,
    ImplementedIdea,
    InvalidHorizonError,
    MetricsVector,
    SimulationStore,
)
from app.core.simulation.fallback import FallbackEstimate, estimate_fallback_projection
from app.core.simulation.presentation import SimulationView, build_simulation_view
from app.core.simulation.sessions import SimulationSessions, get_simulation_sessions
from app.db.simulations import SESSION_ID_PATTERN

logger = get_logger(__name__)

router = APIRouter()

SessionId = Annotated[
    str, Path(pattern=SESSION_ID_PATTERN, description="Browser session identifier")
]


def _view(store: SimulationStore) -> SimulationView:
    return build_simulation_view(store.state, store.session_id, store.readiness)


@router.get("/simulations/{session_id}", response_model=SimulationView)
async def get_simulation(
    session_id: SessionId,
    sessions: SimulationSessions = Depends(get_simulation_sessions),  # noqa: B008
) -> SimulationView:
    """
    Get the session's current metrics, projections and implemented ideas.

    Raw values are returned unclamped; the ``display`` rows carry clamped,
    formatted values for rendering.

    Raises:
        HTTPException 500: If the simulation cannot be loaded
    """
    try:
        return _view(sessions.get(session_id))
    except Exception as e:
        logger.exception(f"Failed to load simulation for session {session_id}")
        raise HTTPException(status_code=500, detail="Failed to load simulation") from e


@router.post("/simulations/{session_id}/ideas", response_model=ImplementedIdea, status_code=201)
async def implement_idea(
    session_id: SessionId,
    proposal: IdeaProposal,
    sessions: SimulationSessions = Depends(get_simulation_sessions),  # noqa: B008
) -> ImplementedIdea:
    """
    Implement a coach's idea and recompute projections.

    Missing or malformed impact fields count as 0.

    Returns:
        The stored idea with its generated id and implementation date
    """
    try:
        return sessions.get(session_id).register_idea(proposal)
    except Exception as e:
        logger.exception(f"Failed to implement idea for session {session_id}")
        raise HTTPException(status_code=500, detail="Failed to implement idea") from e


@router.put("/simulations/{session_id}/baseline", response_model=SimulationView)
async def replace_baseline(
    session_id: SessionId,
    metrics: MetricsVector,
    sessions: SimulationSessions = Depends(get_simulation_sessions),  # noqa: B008
) -> SimulationView:
    """Replace the baseline metrics (e.g. after document extraction)."""
    try:
        store = sessions.get(session_id)
        store.replace_baseline(metrics)
        return _view(store)
    except Exception as e:
        logger.exception(f"Failed to replace baseline for session {session_id}")
        raise HTTPException(status_code=500, detail="Failed to replace baseline") from e


@router.post("/simulations/{session_id}/reset", response_model=SimulationView)
async def reset_simulation(
    session_id: SessionId,
    sessions: SimulationSessions = Depends(get_simulation_sessions),  # noqa: B008
) -> SimulationView:
    """Restore default metrics and clear implemented ideas."""
    try:
        store = sessions.get(session_id)
        store.reset()
        return _view(store)
    except Exception as e:
        logger.exception(f"Failed to reset simulation for session {session_id}")
        raise HTTPException(status_code=500, detail="Failed to reset simulation") from e


@router.put("/simulations/{session_id}/readiness", response_model=SimulationView)
async def set_readiness(
    session_id: SessionId,
    profile: BusinessProfileReadiness,
    sessions: SimulationSessions = Depends(get_simulation_sessions),  # noqa: B008
) -> SimulationView:
    """
    Update the business profile's innovation readiness and recompute.

    A null readiness counts as 0.
    """
    try:
        store = sessions.set_readiness(session_id, profile.innovation_readiness)
        return _view(store)
    except Exception as e:
        logger.exception(f"Failed to update readiness for session {session_id}")
        raise HTTPException(status_code=500, detail="Failed to update readiness") from e


@router.get("/simulations/{session_id}/projections/{horizon}", response_model=MetricsVector)
async def get_projection(
    session_id: SessionId,
    horizon: int,
    sessions: SimulationSessions = Depends(get_simulation_sessions),  # noqa: B008
) -> MetricsVector:
    """
    Get the raw projection at one horizon.

    Raises:
        HTTPException 400: If horizon is not 1 or 2
    """
    try:
        return sessions.get(session_id).projection(horizon)
    except InvalidHorizonError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except Exception as e:
        logger.exception(f"Failed to project simulation for session {session_id}")
        raise HTTPException(status_code=500, detail="Failed to compute projection") from e


@router.get("/simulations/{session_id}/estimate", response_model=FallbackEstimate)
async def get_fallback_estimate(
    session_id: SessionId,
    sessions: SimulationSessions = Depends(get_simulation_sessions),  # noqa: B008
) -> FallbackEstimate:
    """Heuristic growth estimate from the current baseline, independent of ideas."""
    try:
        return estimate_fallback_projection(sessions.get(session_id).state.current_metrics)
    except Exception as e:
        logger.exception(f"Failed to estimate projection for session {session_id}")
        raise HTTPException(status_code=500, detail="Failed to estimate projection") from e


@router.delete("/simulations/{session_id}", status_code=204)
async def close_simulation(
    session_id: SessionId,
    sessions: SimulationSessions = Depends(get_simulation_sessions),  # noqa: B008
) -> None:
    """Forget the session's simulation and delete its saved document."""
    try:
        sessions.close(session_id)
    except Exception as e:
        logger.exception(f"Failed to close simulation for session {session_id}")
        raise HTTPException(status_code=500, detail="Failed to close simulation") from e
