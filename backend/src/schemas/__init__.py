"""
Pydantic schemas for API request/response validation.

This module exports all schema classes for use in API endpoints.
"""

from backend.src.schemas.event import (
    EventCreate,
    EventUpdate,
    EventSeriesReplace,
    EventResponse,
    MessageResponse,
)

__all__ = [
    "EventCreate",
    "EventUpdate",
    "EventSeriesReplace",
    "EventResponse",
    "MessageResponse",
]
