"""
Unit tests for event request/response schemas.

Tests cover:
- EventCreate required fields, offsets and time range
- EventUpdate partial semantics
- EventSeriesReplace validation and conversion to SeriesSpec
- EventResponse UTC serialization
"""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from backend.src.models import Event
from backend.src.schemas.event import (
    EventCreate,
    EventResponse,
    EventSeriesReplace,
    EventUpdate,
    MessageResponse,
)
from backend.src.services.series_expander import MAX_SERIES_DAYS


class TestEventCreate:
    """Tests for EventCreate."""

    def test_valid(self, sample_event_data):
        event = EventCreate.model_validate(sample_event_data())

        assert event.uid == "manual-1"
        assert event.dtstart == datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)
        assert event.is_recurring is False
        assert event.recurring_days is None

    @pytest.mark.parametrize("missing", ["uid", "summary", "type", "dtstart", "dtend"])
    def test_required_fields(self, sample_event_data, missing):
        data = sample_event_data()
        del data[missing]

        with pytest.raises(ValidationError):
            EventCreate.model_validate(data)

    def test_naive_timestamp_rejected(self, sample_event_data):
        with pytest.raises(ValidationError) as exc_info:
            EventCreate.model_validate(sample_event_data(dtstart="2026-01-05T09:00:00"))
        assert "UTC offset" in str(exc_info.value)

    def test_offset_preserved_as_instant(self, sample_event_data):
        event = EventCreate.model_validate(sample_event_data(
            dtstart="2026-01-05T10:00:00+01:00",
            dtend="2026-01-05T11:00:00+01:00",
        ))
        assert event.dtstart == datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)

    def test_end_before_start_rejected(self, sample_event_data):
        with pytest.raises(ValidationError):
            EventCreate.model_validate(sample_event_data(dtend="2026-01-05T08:59:00Z"))

    def test_zero_length_allowed(self, sample_event_data):
        event = EventCreate.model_validate(sample_event_data(dtend="2026-01-05T09:00:00Z"))
        assert event.dtend == event.dtstart

    def test_whitespace_summary_rejected(self, sample_event_data):
        with pytest.raises(ValidationError):
            EventCreate.model_validate(sample_event_data(summary="   "))

    def test_recurring_days_normalized(self, sample_event_data):
        event = EventCreate.model_validate(sample_event_data(recurring_days=[5, 1, 3, 1]))
        assert event.recurring_days == [1, 3, 5]

    def test_recurring_days_out_of_range(self, sample_event_data):
        with pytest.raises(ValidationError):
            EventCreate.model_validate(sample_event_data(recurring_days=[1, 7]))

    @pytest.mark.parametrize("series_id", [" walks", "walks ", "", "   "])
    def test_series_id_must_be_addressable(self, sample_event_data, series_id):
        with pytest.raises(ValidationError):
            EventCreate.model_validate(sample_event_data(series_id=series_id))

    def test_series_id_kept_verbatim(self, sample_event_data):
        event = EventCreate.model_validate(sample_event_data(series_id="walks biscuit"))
        assert event.series_id == "walks biscuit"


class TestEventUpdate:
    """Tests for EventUpdate."""

    @pytest.mark.parametrize("series_id", [" walks", ""])
    def test_series_id_must_be_addressable(self, series_id):
        with pytest.raises(ValidationError):
            EventUpdate.model_validate({"series_id": series_id})

    def test_series_id_can_be_cleared(self):
        update = EventUpdate.model_validate({"series_id": None})
        assert update.model_dump(exclude_unset=True) == {"series_id": None}

    def test_only_set_fields_dumped(self):
        update = EventUpdate.model_validate({"summary": "Fluffy", "description": None})

        assert update.model_dump(exclude_unset=True) == {"summary": "Fluffy", "description": None}

    def test_empty_patch(self):
        assert EventUpdate.model_validate({}).model_dump(exclude_unset=True) == {}

    @pytest.mark.parametrize("name", ["summary", "type", "dtstart", "dtend", "is_recurring"])
    def test_required_columns_cannot_be_cleared(self, name):
        with pytest.raises(ValidationError):
            EventUpdate.model_validate({name: None})

    def test_naive_timestamp_rejected(self):
        with pytest.raises(ValidationError):
            EventUpdate.model_validate({"dtstart": "2026-01-05T09:00:00"})

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError):
            EventUpdate.model_validate({
                "dtstart": "2026-01-05T09:00:00Z",
                "dtend": "2026-01-05T08:00:00Z",
            })


class TestEventSeriesReplace:
    """Tests for EventSeriesReplace."""

    def test_to_spec(self, sample_series_body):
        spec = EventSeriesReplace.model_validate(sample_series_body(description="Lead in hall")).to_spec()

        assert spec.summary == "Biscuit"
        assert spec.event_type == "walk"
        assert spec.series_start_date == date(2024, 1, 1)
        assert spec.recur_until == date(2024, 1, 7)
        assert spec.time_of_day == time(9, 0)
        assert spec.duration_minutes == 60
        assert spec.weekdays == frozenset({1, 3, 5})
        assert spec.description == "Lead in hall"

    def test_defaults(self, sample_series_body):
        body = sample_series_body()
        del body["duration_minutes"]
        del body["recurring_days"]

        series = EventSeriesReplace.model_validate(body)

        assert series.duration_minutes == 60
        assert series.recurring_days == []

    @pytest.mark.parametrize("value", ["25:00", "9am", "09:5"])
    def test_invalid_time_of_day(self, sample_series_body, value):
        with pytest.raises(ValidationError):
            EventSeriesReplace.model_validate(sample_series_body(time_of_day=value))

    def test_invalid_date(self, sample_series_body):
        with pytest.raises(ValidationError):
            EventSeriesReplace.model_validate(sample_series_body(recur_until="2024-13-01"))

    @pytest.mark.parametrize("value", [-1, 24 * 60 + 1])
    def test_duration_bounds(self, sample_series_body, value):
        with pytest.raises(ValidationError):
            EventSeriesReplace.model_validate(sample_series_body(duration_minutes=value))

    def test_window_at_cap_allowed(self, sample_series_body):
        start = date(2024, 1, 1)
        until = start + timedelta(days=MAX_SERIES_DAYS - 1)

        series = EventSeriesReplace.model_validate(sample_series_body(
            series_start_date=start.isoformat(), recur_until=until.isoformat()
        ))

        assert series.recur_until == until

    def test_window_over_cap_rejected(self, sample_series_body):
        start = date(2024, 1, 1)
        until = start + timedelta(days=MAX_SERIES_DAYS)

        with pytest.raises(ValidationError) as exc_info:
            EventSeriesReplace.model_validate(sample_series_body(
                series_start_date=start.isoformat(), recur_until=until.isoformat()
            ))
        assert "at most" in str(exc_info.value)

    def test_inverted_window_allowed(self, sample_series_body):
        series = EventSeriesReplace.model_validate(sample_series_body(
            series_start_date="2024-02-01", recur_until="2024-01-01"
        ))
        assert series.to_spec().recur_until == date(2024, 1, 1)

    def test_weekday_out_of_range(self, sample_series_body):
        with pytest.raises(ValidationError):
            EventSeriesReplace.model_validate(sample_series_body(recurring_days=[-1]))


class TestEventResponse:
    """Tests for EventResponse."""

    def test_serializes_utc_with_z(self):
        event = Event(
            uid="a",
            summary="Biscuit",
            type="walk",
            dtstart=datetime(2026, 1, 5, 10, 0, tzinfo=ZoneInfo("Europe/Paris")),
            dtend=datetime(2026, 1, 5, 11, 0, tzinfo=ZoneInfo("Europe/Paris")),
            is_recurring=False,
        )

        data = EventResponse.model_validate(event).model_dump(mode="json")

        assert data["dtstart"] == "2026-01-05T09:00:00Z"
        assert data["dtend"] == "2026-01-05T10:00:00Z"
        assert data["series_id"] is None

    def test_message_response_count_not_negative(self):
        with pytest.raises(ValidationError):
            MessageResponse(message="x", count=-1)
