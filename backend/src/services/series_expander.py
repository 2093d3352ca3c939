"""
Recurring series expansion.

Turns a series definition (date window, weekday selection, time of day,
duration) into the ordered list of concrete start/end instants. Pure
functions only: no database access, no ambient timezone.

Weekday selectors follow the calendar convention 0=Sunday..6=Saturday.

Timezone discipline:
    The caller passes one tzinfo. The day cursor, the end-of-window bound and
    every emitted instant are built in that zone, and instants are returned
    normalized to UTC.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import FrozenSet, Iterable, List, NamedTuple, Optional

from backend.src.models.event import MEET_AND_GREET_TYPE
from backend.src.services.exceptions import ValidationError


ALL_WEEKDAYS: FrozenSet[int] = frozenset(range(7))

MEET_AND_GREET_DURATION = timedelta(minutes=30)

TIME_OF_DAY_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

# Last representable instant of a calendar day
END_OF_DAY = time(23, 59, 59, 999999)

# Longest window a single regeneration may cover (about ten years)
MAX_SERIES_DAYS = 3660


class Occurrence(NamedTuple):
    """One expanded instance of a series."""
    dtstart: datetime
    dtend: datetime


@dataclass(frozen=True)
class SeriesSpec:
    """
    Definition of a recurring series.

    Attributes:
        summary: Display name shared by every instance
        event_type: Category tag ("meet-and-greet" forces 30 minutes)
        series_start_date: First day considered (inclusive)
        recur_until: Last day considered (inclusive)
        time_of_day: Local wall-clock start time
        duration_minutes: Requested duration in minutes
        weekdays: Selected weekdays, 0=Sunday..6=Saturday; empty = every day
        description: Optional free text copied onto every instance
    """

    summary: str
    event_type: str
    series_start_date: date
    recur_until: date
    time_of_day: time
    duration_minutes: int
    weekdays: FrozenSet[int] = field(default_factory=frozenset)
    description: Optional[str] = None

    def __post_init__(self):
        invalid = sorted(d for d in self.weekdays if not 0 <= d <= 6)
        if invalid:
            raise ValidationError(
                f"Weekday selectors must be between 0 (Sunday) and 6 (Saturday), got {invalid}",
                field="recurring_days",
            )
        if self.duration_minutes < 0:
            raise ValidationError(
                "Duration cannot be negative",
                field="duration_minutes",
            )

    @property
    def effective_weekdays(self) -> FrozenSet[int]:
        """Selected weekdays, with an empty selection meaning every day."""
        return frozenset(self.weekdays) or ALL_WEEKDAYS

    @property
    def recurring_days(self) -> List[int]:
        """Weekday selection as stored on each instance (sorted)."""
        return sorted(self.weekdays)


def parse_time_of_day(value) -> time:
    """
    Parse an "HH:MM" string.

    Args:
        value: "HH:MM" string or an existing time

    Returns:
        time with zero seconds

    Raises:
        ValidationError: If the value is not a valid 24h "HH:MM" time
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if not isinstance(value, str):
        raise ValidationError("Time of day must be an 'HH:MM' string", field="time_of_day")
    match = TIME_OF_DAY_PATTERN.match(value.strip())
    if not match:
        raise ValidationError(f"Invalid time of day '{value}', expected HH:MM", field="time_of_day")
    return time(int(match.group(1)), int(match.group(2)))


def weekday_index(day: date) -> int:
    """Weekday of a date as 0=Sunday..6=Saturday."""
    return day.isoweekday() % 7


def effective_duration(event_type: str, duration_minutes: int) -> timedelta:
    """
    Duration applied to each instance.

    Meet-and-greets are always 30 minutes; everything else uses the
    requested duration.
    """
    if event_type == MEET_AND_GREET_TYPE:
        return MEET_AND_GREET_DURATION
    return timedelta(minutes=duration_minutes)


def iter_series_days(
    start: date,
    until: date,
    weekdays: Iterable[int],
    tz: tzinfo,
) -> List[date]:
    """
    Calendar days in [start, until] whose weekday is selected.

    The stopping bound is the last instant of ``until`` so the final day
    is always considered. ``until`` before ``start`` yields no days.
    """
    selected = frozenset(weekdays) or ALL_WEEKDAYS
    cursor = datetime.combine(start, time.min, tzinfo=tz)
    end_bound = datetime.combine(until, END_OF_DAY, tzinfo=tz)

    days = []
    while cursor <= end_bound:
        day = cursor.date()
        if weekday_index(day) in selected:
            days.append(day)
        if day == until:
            break
        cursor = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return days


def expand_occurrences(spec: SeriesSpec, tz: tzinfo) -> List[Occurrence]:
    """
    Expand a series definition into ordered occurrences.

    Args:
        spec: Series definition
        tz: Zone in which days are walked and wall-clock times are placed

    Returns:
        Occurrences in ascending start order, one per selected day, with
        UTC-normalized dtstart/dtend

    Raises:
        ValidationError: If an occurrence cannot be represented as a UTC
            instant (windows at the edges of the calendar)

    Example:
        >>> spec = SeriesSpec(
        ...     summary="Walk", event_type="walk",
        ...     series_start_date=date(2024, 1, 1), recur_until=date(2024, 1, 7),
        ...     time_of_day=time(9, 0), duration_minutes=60,
        ...     weekdays=frozenset({1, 3, 5}),
        ... )
        >>> [o.dtstart.day for o in expand_occurrences(spec, timezone.utc)]
        [1, 3, 5]
    """
    duration = effective_duration(spec.event_type, spec.duration_minutes)
    occurrences = []
    for day in iter_series_days(spec.series_start_date, spec.recur_until, spec.effective_weekdays, tz):
        local_start = datetime.combine(day, spec.time_of_day, tzinfo=tz)
        try:
            dtstart = local_start.astimezone(timezone.utc)
            dtend = dtstart + duration
        except OverflowError:
            raise ValidationError(
                f"Occurrence on {day.isoformat()} falls outside the supported date range",
                field="recur_until",
            )
        occurrences.append(Occurrence(dtstart=dtstart, dtend=dtend))
    return occurrences
