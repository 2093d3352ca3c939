"""
Suggestion service for event name autocomplete.

Answers substring queries against stored event summaries. Read-only.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from backend.src.models import Event
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


MIN_QUERY_LENGTH = 2
DEFAULT_LIMIT = 10


def escape_like(value: str, escape: str = "\\") -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return (
        value.replace(escape, escape * 2)
        .replace("%", f"{escape}%")
        .replace("_", f"{escape}_")
    )


class SuggestionService:
    """
    Service for autocomplete suggestions.

    Usage:
        >>> service = SuggestionService(db_session)
        >>> service.search_summaries("fl")
        ['Flash', 'Fluffy']
    """

    def __init__(self, db: Session, limit: int = DEFAULT_LIMIT):
        self.db = db
        self.limit = limit

    def search_summaries(self, query: Optional[str]) -> List[str]:
        """
        Find distinct summaries containing the query, case-insensitively.

        Args:
            query: Free text; surrounding whitespace is ignored

        Returns:
            Up to ``limit`` distinct summaries in ascending order, or an
            empty list when the query is shorter than 2 characters
        """
        term = (query or "").strip()
        if len(term) < MIN_QUERY_LENGTH:
            return []

        pattern = f"%{escape_like(term)}%"
        rows = (
            self.db.query(Event.summary)
            .filter(Event.summary.ilike(pattern, escape="\\"))
            .distinct()
            .order_by(Event.summary.asc())
            .limit(self.limit)
            .all()
        )
        suggestions = [row.summary for row in rows]
        logger.debug(f"Suggestions for {term!r}: {len(suggestions)} matches")
        return suggestions
