"""
Events API endpoints for managing calendar events.

Provides one collection resource, classified by method and query parameters:
- GET: list all events ordered by start
- POST: insert a batch of events atomically
- PUT ?seriesId=: regenerate every instance of a recurring series
- PUT ?uid=: patch a single event
- DELETE ?uid=: delete a single event
- DELETE ?seriesId=: delete every instance of a series

Any other combination (no identifier, or both) answers 405.

Design:
- Uses dependency injection for services
- Service ValidationError maps to 400, request schema errors to 422
- Store failures are logged and returned as a generic 500
- Updating or deleting an unknown identifier is not an error (count: 0)
"""

from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from backend.src.config.settings import AppSettings, get_settings
from backend.src.db.database import get_db
from backend.src.schemas.event import (
    EventCreate,
    EventUpdate,
    EventSeriesReplace,
    EventResponse,
    MessageResponse,
)
from backend.src.services.event_service import EventService
from backend.src.services.exceptions import ValidationError
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(
    prefix="/events",
    tags=["Events"],
)

ALLOWED_METHODS = "GET, POST, PUT, DELETE"


# ============================================================================
# Dependencies
# ============================================================================


def get_event_service(
    db: Session = Depends(get_db),
    settings: AppSettings = Depends(get_settings),
) -> EventService:
    """Create EventService instance with database session and expansion timezone."""
    return EventService(db=db, tz=settings.tzinfo, series_lock=settings.series_lock)


def _method_not_allowed() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method Not Allowed",
        headers={"Allow": ALLOWED_METHODS},
    )


def _single_target(uid: Optional[str], series_id: Optional[str]) -> bool:
    """Exactly one of uid / seriesId must be given."""
    return (uid is None) != (series_id is None)


def _validate_body(schema, payload: Any):
    """Validate a JSON body against a schema, mapping failures to 422."""
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Request body is required",
        )
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=jsonable_encoder(e.errors(include_url=False, include_context=False)),
        )


# ============================================================================
# API Endpoints
# ============================================================================


@router.get(
    "",
    response_model=List[EventResponse],
    summary="List events",
    description="List all events ordered by start time",
)
async def list_events(
    event_service: EventService = Depends(get_event_service),
) -> List[EventResponse]:
    """
    List all events.

    Returns:
        Every event, ascending by dtstart

    Example:
        GET /api/events
    """
    try:
        events = event_service.list_all()

        logger.info(f"Listed {len(events)} events")

        return [EventResponse.model_validate(e) for e in events]

    except Exception as e:
        logger.error(f"Error listing events: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list events",
        )


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create events",
    description="Insert a batch of events; either all are stored or none",
)
async def create_events(
    events: List[EventCreate],
    event_service: EventService = Depends(get_event_service),
) -> MessageResponse:
    """
    Insert a batch of events atomically.

    Request Body:
        JSON array of event objects (uid, summary, type, dtstart, dtend, ...)

    Returns:
        Acknowledgement with the number of stored events (201 Created)

    Raises:
        422: Invalid event payload
        500: Store failure (e.g. duplicate uid); nothing was stored

    Example:
        POST /api/events
        [
          {
            "uid": "manual-1",
            "summary": "Biscuit",
            "type": "walk",
            "dtstart": "2026-01-05T09:00:00Z",
            "dtend": "2026-01-05T10:00:00Z"
          }
        ]
    """
    try:
        count = event_service.insert_batch(events)

        return MessageResponse(message="Events added successfully", count=count)

    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    except Exception as e:
        logger.error(f"Error creating events: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create events",
        )


@router.put(
    "",
    response_model=MessageResponse,
    summary="Update an event or regenerate a series",
    description="With seriesId, regenerate the whole series; with uid, patch one event",
)
async def update_events(
    uid: Optional[str] = Query(default=None, description="Event uid to patch"),
    series_id: Optional[str] = Query(default=None, alias="seriesId", description="Series to regenerate"),
    payload: Any = Body(default=None),
    event_service: EventService = Depends(get_event_service),
) -> MessageResponse:
    """
    Update a single event or regenerate a recurring series.

    Query Parameters:
        seriesId: Regenerate the series (body: series spec)
        uid: Patch one event (body: partial event object)

    Returns:
        Acknowledgement with the number of rows written

    Raises:
        400: Malformed identifier or invalid patch
        405: Neither or both identifiers given
        422: Invalid body
        500: Store failure; nothing was changed

    Example:
        PUT /api/events?seriesId=walks-biscuit
        {
          "summary": "Biscuit",
          "type": "walk",
          "series_start_date": "2026-01-05",
          "recur_until": "2026-02-27",
          "time_of_day": "09:00",
          "duration_minutes": 60,
          "recurring_days": [1, 3, 5]
        }
    """
    if not _single_target(uid, series_id):
        raise _method_not_allowed()

    try:
        if series_id is not None:
            series_data = _validate_body(EventSeriesReplace, payload)
            instances = event_service.replace_series(series_id, series_data.to_spec())
            return MessageResponse(
                message=f"Event series {series_id} regenerated.",
                count=len(instances),
            )

        event_data = _validate_body(EventUpdate, payload)
        updated = event_service.update_single(uid, event_data.model_dump(exclude_unset=True))
        return MessageResponse(message="Event updated successfully", count=updated)

    except HTTPException:
        raise

    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    except Exception as e:
        logger.error(f"Error updating events (uid={uid}, seriesId={series_id}): {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update events",
        )


@router.delete(
    "",
    response_model=MessageResponse,
    summary="Delete an event or a series",
    description="With uid, delete one event; with seriesId, delete the whole series",
)
async def delete_events(
    uid: Optional[str] = Query(default=None, description="Event uid to delete"),
    series_id: Optional[str] = Query(default=None, alias="seriesId", description="Series to delete"),
    event_service: EventService = Depends(get_event_service),
) -> MessageResponse:
    """
    Delete a single event or every instance of a series.

    Query Parameters:
        uid: Delete one event
        seriesId: Delete the series

    Returns:
        Acknowledgement with the number of deleted rows (0 if nothing matched)

    Raises:
        400: Malformed identifier
        405: Neither or both identifiers given
        500: Store failure

    Example:
        DELETE /api/events?uid=manual-1
        DELETE /api/events?seriesId=walks-biscuit
    """
    if not _single_target(uid, series_id):
        raise _method_not_allowed()

    try:
        if uid is not None:
            deleted = event_service.delete_single(uid)
            return MessageResponse(message=f"Event {uid} deleted.", count=deleted)

        deleted = event_service.delete_series(series_id)
        return MessageResponse(message=f"Event series {series_id} deleted.", count=deleted)

    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    except Exception as e:
        logger.error(f"Error deleting events (uid={uid}, seriesId={series_id}): {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete events",
        )
