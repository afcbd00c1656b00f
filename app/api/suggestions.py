"""API endpoint for turning coach replies into idea proposals."""

from fastapi import APIRouter, HTTPException

from app.core.logging import get_logger
from app.core.schemas_suggestions import SuggestionParseRequest
from app.core.simulation import IdeaProposal
from app.core.suggestion_parser import SuggestionTooLargeError, parse_idea_suggestions

logger = get_logger(__name__)

router = APIRouter()


@router.post("/suggestions/parse", response_model=list[IdeaProposal])
async def parse_suggestions(request: SuggestionParseRequest) -> list[IdeaProposal]:
    """
    Parse a coach reply into idea proposals.

    Returns an empty list when the reply holds no recognizable idea.

    Raises:
        HTTPException 413: If the reply exceeds SUGGESTION_MAX_CHARS
    """
    try:
        return parse_idea_suggestions(request.text, coach_id=request.coach_id)
    except SuggestionTooLargeError as e:
        raise HTTPException(status_code=413, detail=str(e)) from e
    except Exception as e:
        logger.exception("Failed to parse coach suggestions")
        raise HTTPException(status_code=500, detail="Failed to parse suggestions") from e
