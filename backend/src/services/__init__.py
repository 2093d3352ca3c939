"""
Service layer for business logic.

This module exports all service classes for use in API endpoints.
"""

from backend.src.services.event_service import EventService
from backend.src.services.suggestion_service import SuggestionService
from backend.src.services.exceptions import (
    ServiceError,
    ValidationError,
)

__all__ = [
    "EventService",
    "SuggestionService",
    "ServiceError",
    "ValidationError",
]
