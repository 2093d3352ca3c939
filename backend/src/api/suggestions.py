"""
Suggestions API endpoint for event name autocomplete.

GET /api/suggestions?q=fl returns up to N distinct event summaries that
contain the query (case-insensitive), alphabetically. Queries shorter than
two characters return an empty list rather than an error.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from backend.src.config.settings import AppSettings, get_settings
from backend.src.db.database import get_db
from backend.src.services.suggestion_service import SuggestionService
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(
    prefix="/suggestions",
    tags=["Suggestions"],
)


def get_suggestion_service(
    db: Session = Depends(get_db),
    settings: AppSettings = Depends(get_settings),
) -> SuggestionService:
    """Create SuggestionService instance with database session."""
    return SuggestionService(db=db, limit=settings.suggestion_limit)


@router.get(
    "",
    response_model=List[str],
    summary="Suggest event names",
    description="Distinct event summaries containing the query text",
)
async def suggest_summaries(
    q: Optional[str] = Query(default=None, description="Search text (2+ characters)"),
    suggestion_service: SuggestionService = Depends(get_suggestion_service),
) -> List[str]:
    """
    Autocomplete event names.

    Query Parameters:
        q: Free text, at least 2 characters

    Returns:
        Matching summaries (may be empty)

    Example:
        GET /api/suggestions?q=fl

        Response:
        ["Flash", "Fluffy"]
    """
    try:
        return suggestion_service.search_summaries(q)

    except Exception as e:
        logger.error(f"Error fetching suggestions: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch suggestions",
        )
