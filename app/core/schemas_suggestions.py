"""Pydantic schemas for coach suggestion parsing."""

from pydantic import BaseModel, Field


class SuggestionParseRequest(BaseModel):
    """Raw coach reply to turn into idea proposals."""

    text: str = Field(..., description="Coach reply in the IDEA n: / Title: / Impact: layout")
    coach_id: str | None = Field(None, description="Coach the ideas are attributed to")
