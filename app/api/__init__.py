"""API router for v1 endpoints."""

from fastapi import APIRouter

from app.api import simulations, suggestions

router = APIRouter()

# Include session simulation routes (ideas, baseline, readiness, projections)
router.include_router(simulations.router, tags=["simulations"])

# Include coach suggestion parsing routes
router.include_router(suggestions.router, tags=["suggestions"])
