"""Parse coach replies into idea proposals.

Coaches are prompted to answer in a fixed plain-text layout:

    IDEA 1:
    Title: Loyalty app
    Description: Reward repeat visits with points.
    Impact:
    - Revenue: 10
    - Profit: 5
    ...

Blocks without a title and description are dropped. Impact lines that are
missing or unreadable count as 0.
"""

import re

from app.core.config import get_settings
from app.core.logging import get_logger
from app.core.simulation.types import IdeaProposal, MetricsVector

logger = get_logger(__name__)

_NUMBERED_IDEA_RE = re.compile(r"IDEA\s+\d+\s*:")
_SINGLE_IDEA_RE = re.compile(r"IDEA\s*:")
_TITLE_RE = re.compile(r"Title:\s*(.+?)\s*(?:\n|$)")
_DESCRIPTION_RE = re.compile(r"Description:\s*(.+?)\s*(?:\n|$)")

_NUMBER = r"([+-]?\d+(?:\.\d+)?)"
_IMPACT_PATTERNS: dict[str, re.Pattern[str]] = {
    "revenue": re.compile(rf"Revenue:\s*{_NUMBER}", re.IGNORECASE),
    "profit": re.compile(rf"Profit:\s*{_NUMBER}", re.IGNORECASE),
    "customer_satisfaction": re.compile(rf"Customer Satisfaction:\s*{_NUMBER}", re.IGNORECASE),
    "market_share": re.compile(rf"Market Share:\s*{_NUMBER}", re.IGNORECASE),
    "employee_engagement": re.compile(rf"Employee Engagement:\s*{_NUMBER}", re.IGNORECASE),
    "innovation_index": re.compile(rf"Innovation Index:\s*{_NUMBER}", re.IGNORECASE),
}

# Impact given to a single unnumbered idea, whose reply format carries no numbers we trust
DEFAULT_SUGGESTION_IMPACT = MetricsVector(
    revenue=10,
    profit=8,
    customer_satisfaction=12,
    market_share=7,
    employee_engagement=9,
    innovation_index=15,
)


class SuggestionTooLargeError(ValueError):
    """Raised when coach text exceeds SUGGESTION_MAX_CHARS."""


def _parse_impact(block: str) -> MetricsVector:
    values: dict[str, str] = {}
    for name, pattern in _IMPACT_PATTERNS.items():
        match = pattern.search(block)
        if match:
            values[name] = match.group(1)
    return MetricsVector(**values)


def _title_and_description(block: str) -> tuple[str, str] | None:
    title = _TITLE_RE.search(block)
    description = _DESCRIPTION_RE.search(block)
    if not title or not description:
        return None
    return title.group(1).strip(), description.group(1).strip()


def parse_single_idea(text: str, coach_id: str | None = None) -> IdeaProposal | None:
    """Parse the short ``IDEA:`` layout; the proposal carries the default impact."""
    match = _SINGLE_IDEA_RE.search(text)
    block = text[match.end():] if match else text
    fields = _title_and_description(block)
    if fields is None:
        return None
    title, description = fields
    return IdeaProposal(
        title=title,
        description=description,
        impact=DEFAULT_SUGGESTION_IMPACT,
        coach_id=coach_id,
    )


def parse_idea_suggestions(text: str, coach_id: str | None = None) -> list[IdeaProposal]:
    """
    Extract idea proposals from a coach reply.

    Args:
        text: Raw coach reply
        coach_id: Coach to attribute the proposals to

    Returns:
        Proposals in reply order. A reply in the short ``IDEA:`` layout yields
        at most one proposal with the default impact; text without any marker
        is parsed as a single block. Empty if nothing parses.

    Raises:
        SuggestionTooLargeError: If text exceeds SUGGESTION_MAX_CHARS
    """
    max_chars = get_settings().SUGGESTION_MAX_CHARS
    if len(text) > max_chars:
        raise SuggestionTooLargeError(
            f"Suggestion text is {len(text)} characters (limit {max_chars})"
        )

    # The short unnumbered layout gets the default impact
    if not _NUMBERED_IDEA_RE.search(text) and _SINGLE_IDEA_RE.search(text):
        single = parse_single_idea(text, coach_id=coach_id)
        logger.debug("Parsed reply in the single IDEA layout")
        return [single] if single is not None else []

    proposals: list[IdeaProposal] = []
    for block in _NUMBERED_IDEA_RE.split(text):
        fields = _title_and_description(block)
        if fields is None:
            continue
        title, description = fields
        proposals.append(
            IdeaProposal(
                title=title,
                description=description,
                impact=_parse_impact(block),
                coach_id=coach_id,
            )
        )

    logger.info(f"Parsed {len(proposals)} idea suggestions")
    return proposals
