"""
Event model for calendar entries.

Each row is one concrete calendar entry with absolute start/end instants.
Rows are either standalone or one instance of a recurring series.

Design Rationale:
- Series-wide attributes (summary, type, recurring_days, recur_until,
  series_start_date) are stored redundantly on every instance rather than
  in a separate series table; a series is simply the set of rows sharing
  a series_id
- Editing a series never patches rows in place: the whole set is deleted
  and regenerated
- dtstart/dtend are timezone-aware and persisted as UTC
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Column, String, Boolean, Date, Text, Index, CheckConstraint
)

from backend.src.models import Base
from backend.src.models.types import JSONBType, UTCDateTime


# Event type with a fixed 30-minute duration
MEET_AND_GREET_TYPE = "meet-and-greet"


class Event(Base):
    """
    Calendar event model.

    Attributes:
        uid: Primary key. Caller-supplied for manual events,
            server-generated (gen_xxx) for expanded series instances
        summary: Display name (shared by all instances of a series)
        type: Free-form category tag
        dtstart: Start instant (UTC)
        dtend: End instant (UTC), never before dtstart
        description: Optional free text
        is_recurring: True for every instance of a series
        recurring_days: Weekday selectors (0=Sunday..6=Saturday) or NULL
        series_id: Identifier shared by all instances of one series
        recur_until: Inclusive last day of the generation window
        series_start_date: First day considered for generation
        created_at: Creation timestamp
        updated_at: Last update timestamp

    Indexes:
        - dtstart (listing order)
        - series_id (series replace/delete)
        - summary (autocomplete)
    """

    __tablename__ = "events"

    uid = Column(String(255), primary_key=True)

    summary = Column(String(255), nullable=False)
    type = Column(String(64), nullable=False)
    dtstart = Column(UTCDateTime, nullable=False)
    dtend = Column(UTCDateTime, nullable=False)
    description = Column(Text, nullable=True)

    # Series fields
    is_recurring = Column(Boolean, default=False, nullable=False)
    recurring_days = Column(JSONBType, nullable=True)
    series_id = Column(String(255), nullable=True)
    recur_until = Column(Date, nullable=True)
    series_start_date = Column(Date, nullable=True)

    # Timestamps
    created_at = Column(UTCDateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(
        UTCDateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    __table_args__ = (
        CheckConstraint("dtend >= dtstart", name="ck_events_dtend_after_dtstart"),
        Index("ix_events_dtstart", "dtstart"),
        Index("ix_events_series_id", "series_id"),
        Index("ix_events_summary", "summary"),
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<Event("
            f"uid='{self.uid}', "
            f"summary='{self.summary}', "
            f"dtstart={self.dtstart}, "
            f"series_id={self.series_id!r}"
            f")>"
        )

    def __str__(self) -> str:
        """Human-readable string representation."""
        return f"{self.summary} ({self.dtstart:%Y-%m-%d %H:%M})"
