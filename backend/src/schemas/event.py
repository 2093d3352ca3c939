"""
Pydantic schemas for event API request/response validation.

Provides data validation and serialization for:
- Batch event creation requests
- Single event patch requests
- Series regeneration requests
- Event API responses

Design:
- All field names on the wire are snake_case
- Timestamps must carry a UTC offset; responses are always UTC
- Weekday selectors use 0=Sunday..6=Saturday
"""

from datetime import datetime, date, timezone
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator, field_serializer, model_validator

from backend.src.services.guid import GuidService, MAX_IDENTIFIER_LENGTH
from backend.src.services.series_expander import (
    MAX_SERIES_DAYS,
    SeriesSpec,
    TIME_OF_DAY_PATTERN,
    parse_time_of_day,
)


# ============================================================================
# Shared validators
# ============================================================================


def _require_offset(v: Optional[datetime]) -> Optional[datetime]:
    """Reject naive timestamps; events are absolute instants."""
    if v is not None and v.tzinfo is None:
        raise ValueError("Timestamp must include a UTC offset (e.g. 2026-01-05T09:00:00Z)")
    return v


def _validate_weekdays(v: Optional[List[int]]) -> Optional[List[int]]:
    if v is None:
        return v
    invalid = [d for d in v if not 0 <= d <= 6]
    if invalid:
        raise ValueError(f"Weekday selectors must be between 0 (Sunday) and 6 (Saturday), got {invalid}")
    return sorted(set(v))


def _validate_series_id(v: Optional[str]) -> Optional[str]:
    """Series ids must be addressable by the ?seriesId= query later on."""
    if v is not None and not GuidService.is_valid_identifier(v):
        raise ValueError("series_id must be non-empty without surrounding whitespace")
    return v


# ============================================================================
# Request Schemas
# ============================================================================


class EventCreate(BaseModel):
    """
    Schema for one event in a batch creation request.

    Required:
        uid: Caller-chosen unique identifier
        summary: Display name
        type: Category tag
        dtstart: Start instant (with offset)
        dtend: End instant (with offset, not before dtstart)

    Optional:
        description: Free text
        is_recurring: Part of a recurring series (default: False)
        recurring_days: Weekday selectors (0=Sunday..6=Saturday)
        series_id: Series identifier shared by all instances
        recur_until: Inclusive last day of the series window
        series_start_date: First day of the series window
    """

    uid: str = Field(..., min_length=1, max_length=MAX_IDENTIFIER_LENGTH)
    summary: str = Field(..., min_length=1, max_length=255)
    type: str = Field(..., min_length=1, max_length=64)
    dtstart: datetime
    dtend: datetime
    description: Optional[str] = Field(default=None)

    is_recurring: bool = Field(default=False)
    recurring_days: Optional[List[int]] = Field(default=None)
    series_id: Optional[str] = Field(default=None, min_length=1, max_length=MAX_IDENTIFIER_LENGTH)
    recur_until: Optional[date] = Field(default=None)
    series_start_date: Optional[date] = Field(default=None)

    @field_validator("dtstart", "dtend")
    @classmethod
    def validate_offset(cls, v: datetime) -> datetime:
        """Reject naive timestamps."""
        return _require_offset(v)

    @field_validator("recurring_days")
    @classmethod
    def validate_recurring_days(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        """Ensure weekday selectors are in range, sorted and distinct."""
        return _validate_weekdays(v)

    @field_validator("series_id")
    @classmethod
    def validate_series_id(cls, v: Optional[str]) -> Optional[str]:
        """Apply the identifier rule used by series replace/delete."""
        return _validate_series_id(v)

    @field_validator("uid", "summary")
    @classmethod
    def validate_not_whitespace(cls, v: str) -> str:
        """Ensure identifiers and names are not just whitespace."""
        if not v.strip():
            raise ValueError("Value cannot be empty or whitespace")
        return v.strip()

    @model_validator(mode="after")
    def validate_time_range(self) -> "EventCreate":
        """Ensure the event does not end before it starts."""
        if self.dtend < self.dtstart:
            raise ValueError("dtend must not be before dtstart")
        return self

    model_config = {
        "json_schema_extra": {
            "example": {
                "uid": "manual-1736067600000",
                "summary": "Biscuit",
                "type": "walk",
                "dtstart": "2026-01-05T09:00:00Z",
                "dtend": "2026-01-05T10:00:00Z",
                "description": "Side gate code 1234",
            }
        }
    }


class EventUpdate(BaseModel):
    """
    Schema for patching a single event.

    All fields are optional; only fields present in the request are changed.
    Sibling instances of a series are never affected.
    """

    summary: Optional[str] = Field(default=None, min_length=1, max_length=255)
    type: Optional[str] = Field(default=None, min_length=1, max_length=64)
    dtstart: Optional[datetime] = Field(default=None)
    dtend: Optional[datetime] = Field(default=None)
    description: Optional[str] = Field(default=None)

    is_recurring: Optional[bool] = Field(default=None)
    recurring_days: Optional[List[int]] = Field(default=None)
    series_id: Optional[str] = Field(default=None, min_length=1, max_length=MAX_IDENTIFIER_LENGTH)
    recur_until: Optional[date] = Field(default=None)
    series_start_date: Optional[date] = Field(default=None)

    @field_validator("dtstart", "dtend")
    @classmethod
    def validate_offset(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Reject naive timestamps."""
        return _require_offset(v)

    @field_validator("recurring_days")
    @classmethod
    def validate_recurring_days(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        """Ensure weekday selectors are in range, sorted and distinct."""
        return _validate_weekdays(v)

    @field_validator("series_id")
    @classmethod
    def validate_series_id(cls, v: Optional[str]) -> Optional[str]:
        """Apply the identifier rule used by series replace/delete."""
        return _validate_series_id(v)

    @model_validator(mode="after")
    def validate_required_not_null(self) -> "EventUpdate":
        """Columns that cannot be NULL may be omitted but not cleared."""
        for name in ("summary", "type", "dtstart", "dtend", "is_recurring"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    @model_validator(mode="after")
    def validate_time_range(self) -> "EventUpdate":
        """Ensure the event does not end before it starts when both are given."""
        if self.dtstart and self.dtend and self.dtend < self.dtstart:
            raise ValueError("dtend must not be before dtstart")
        return self


class EventSeriesReplace(BaseModel):
    """
    Schema for regenerating a recurring series.

    Existing instances of the series are deleted and one instance is created
    for every day in [series_start_date, recur_until] whose weekday is in
    recurring_days (empty = every day).

    Required:
        summary: Display name for every instance
        type: Category tag ("meet-and-greet" is always 30 minutes)
        series_start_date: First day of the window
        recur_until: Last day of the window (inclusive)
        time_of_day: Start time, "HH:MM" in the configured timezone

    Optional:
        description: Free text for every instance
        duration_minutes: Instance length (default: 60)
        recurring_days: Weekday selectors (default: every day)
    """

    summary: str = Field(..., min_length=1, max_length=255)
    type: str = Field(..., min_length=1, max_length=64)
    description: Optional[str] = Field(default=None)
    series_start_date: date
    recur_until: date
    time_of_day: str = Field(..., description="Start time (HH:MM)")
    duration_minutes: int = Field(default=60, ge=0, le=24 * 60)
    recurring_days: List[int] = Field(default_factory=list)

    @field_validator("recurring_days")
    @classmethod
    def validate_recurring_days(cls, v: List[int]) -> List[int]:
        """Ensure weekday selectors are in range, sorted and distinct."""
        return _validate_weekdays(v)

    @field_validator("summary")
    @classmethod
    def validate_summary_not_whitespace(cls, v: str) -> str:
        """Ensure summary is not just whitespace."""
        if not v.strip():
            raise ValueError("Summary cannot be empty or whitespace")
        return v.strip()

    @field_validator("time_of_day")
    @classmethod
    def validate_time_of_day(cls, v: str) -> str:
        """Ensure time_of_day is a 24h HH:MM string."""
        if not TIME_OF_DAY_PATTERN.match(v.strip()):
            raise ValueError("time_of_day must be a 24h HH:MM string")
        return v.strip()

    @model_validator(mode="after")
    def validate_window_length(self) -> "EventSeriesReplace":
        """Cap the number of days one regeneration may cover."""
        days = (self.recur_until - self.series_start_date).days + 1
        if days > MAX_SERIES_DAYS:
            raise ValueError(
                f"Series window covers {days} days; at most {MAX_SERIES_DAYS} are allowed"
            )
        return self

    def to_spec(self) -> SeriesSpec:
        """Convert the request into a series definition for expansion."""
        return SeriesSpec(
            summary=self.summary,
            event_type=self.type,
            description=self.description,
            series_start_date=self.series_start_date,
            recur_until=self.recur_until,
            time_of_day=parse_time_of_day(self.time_of_day),
            duration_minutes=self.duration_minutes,
            weekdays=frozenset(self.recurring_days),
        )

    model_config = {
        "json_schema_extra": {
            "example": {
                "summary": "Biscuit",
                "type": "walk",
                "series_start_date": "2026-01-05",
                "recur_until": "2026-02-27",
                "time_of_day": "09:00",
                "duration_minutes": 60,
                "recurring_days": [1, 3, 5],
            }
        }
    }


# ============================================================================
# Response Schemas
# ============================================================================


class EventResponse(BaseModel):
    """Schema for event API responses."""

    uid: str
    summary: str
    type: str
    dtstart: datetime
    dtend: datetime
    description: Optional[str]
    is_recurring: bool
    recurring_days: Optional[List[int]]
    series_id: Optional[str]
    recur_until: Optional[date]
    series_start_date: Optional[date]

    @field_serializer("dtstart", "dtend")
    @classmethod
    def serialize_datetime_utc(cls, v: datetime) -> str:
        """Serialize datetime as ISO 8601 with explicit UTC timezone."""
        return v.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")

    model_config = {
        "from_attributes": True,
        "json_schema_extra": {
            "example": {
                "uid": "gen_01hgw2bbg0000000000000001",
                "summary": "Biscuit",
                "type": "walk",
                "dtstart": "2026-01-05T09:00:00Z",
                "dtend": "2026-01-05T10:00:00Z",
                "description": None,
                "is_recurring": True,
                "recurring_days": [1, 3, 5],
                "series_id": "series-biscuit-walks",
                "recur_until": "2026-02-27",
                "series_start_date": "2026-01-05",
            }
        },
    }


class MessageResponse(BaseModel):
    """Schema for mutation acknowledgements."""

    message: str
    count: int = Field(..., ge=0, description="Number of rows affected")
