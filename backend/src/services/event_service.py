"""
Event service for managing calendar events.

Provides the event store gateway: listing, batch insertion, single-row
patch/delete, and whole-series replace/delete.

Design:
- Every mutating operation runs in one transaction on the request's session
  and commits on success; any exception rolls back before propagating
- Series are never patched in place: replace_series deletes every row with
  the series_id and inserts a freshly expanded set in the same transaction
- Missing rows are not errors for update/delete; the affected row count
  is returned instead
- On PostgreSQL, series replace/delete take a transaction-scoped advisory
  lock keyed on the series id so concurrent regenerations of one series
  run one after another. Other dialects rely on the store's isolation.
"""

from datetime import tzinfo, timezone
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from backend.src.models import Event
from backend.src.services.exceptions import ValidationError
from backend.src.services.guid import GuidService, SERVER_UID_PREFIX
from backend.src.services.series_expander import SeriesSpec, expand_occurrences
from backend.src.utils.logging_config import get_logger

if TYPE_CHECKING:
    from backend.src.schemas.event import EventCreate


logger = get_logger("services")


# Columns a single-row patch may change
UPDATABLE_FIELDS = (
    "summary",
    "type",
    "dtstart",
    "dtend",
    "description",
    "is_recurring",
    "recurring_days",
    "series_id",
    "recur_until",
    "series_start_date",
)


class EventService:
    """
    Service for managing calendar events.

    Usage:
        >>> service = EventService(db_session, tz=ZoneInfo("Europe/London"))
        >>> service.replace_series("walks-biscuit", spec)
        >>> events = service.list_all()
    """

    def __init__(self, db: Session, tz: Optional[tzinfo] = None, series_lock: bool = False):
        """
        Initialize event service.

        Args:
            db: SQLAlchemy database session
            tz: Timezone used for series expansion (default: UTC)
            series_lock: Take a per-series advisory lock on PostgreSQL
        """
        self.db = db
        self.tz = tz or timezone.utc
        self.series_lock = series_lock

    # =========================================================================
    # Read Operations
    # =========================================================================

    def list_all(self) -> List[Event]:
        """
        List every event.

        Returns:
            Events ordered by dtstart ascending (uid breaks ties)
        """
        return (
            self.db.query(Event)
            .order_by(Event.dtstart.asc(), Event.uid.asc())
            .all()
        )

    # =========================================================================
    # Create Operations
    # =========================================================================

    def insert_batch(self, events: Iterable["EventCreate"]) -> int:
        """
        Insert a batch of caller-supplied events atomically.

        Either every event is persisted or none are.

        Args:
            events: Validated event payloads

        Returns:
            Number of events inserted

        Raises:
            SQLAlchemyError: On any store failure (e.g. duplicate uid);
                the whole batch is rolled back
        """
        rows = [self._event_from_payload(payload) for payload in events]
        try:
            self.db.add_all(rows)
            self.db.flush()
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(f"Rolled back batch insert of {len(rows)} events", exc_info=True)
            raise

        logger.info(f"Inserted {len(rows)} events")
        return len(rows)

    # =========================================================================
    # Series Operations
    # =========================================================================

    def replace_series(self, series_id: str, spec: SeriesSpec) -> List[Event]:
        """
        Regenerate every instance of a series.

        Deletes all rows sharing series_id, expands the series definition and inserts the
        resulting instances, all in one transaction.

        Args:
            series_id: Series identifier
            spec: Series definition

        Returns:
            Newly inserted instances in ascending dtstart order

        Raises:
            ValidationError: If series_id is malformed or the series cannot
                be expanded; nothing is changed
            SQLAlchemyError: On store failure; existing rows are left intact
        """
        self._validate_identifier(series_id, "series_id")
        instances = self._build_series_events(series_id, spec)

        try:
            self._lock_series(series_id)
            deleted = (
                self.db.query(Event)
                .filter(Event.series_id == series_id)
                .delete(synchronize_session=False)
            )
            self.db.add_all(instances)
            self.db.flush()
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(f"Rolled back regeneration of series {series_id}", exc_info=True)
            raise

        logger.info(
            f"Replaced series {series_id}: removed {deleted}, created {len(instances)} instances"
        )
        return instances

    def delete_series(self, series_id: str) -> int:
        """
        Delete every instance of a series.

        Args:
            series_id: Series identifier

        Returns:
            Number of rows deleted (0 is not an error)
        """
        self._validate_identifier(series_id, "series_id")

        try:
            self._lock_series(series_id)
            deleted = (
                self.db.query(Event)
                .filter(Event.series_id == series_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(f"Rolled back delete of series {series_id}", exc_info=True)
            raise

        logger.info(f"Deleted series {series_id} ({deleted} events)")
        return deleted

    # =========================================================================
    # Single Event Operations
    # =========================================================================

    def update_single(self, uid: str, updates: Dict[str, Any]) -> int:
        """
        Patch one event in place.

        Only the matched row changes, even when it belongs to a series.

        Args:
            uid: Event uid
            updates: Field values to set (keys from UPDATABLE_FIELDS)

        Returns:
            1 if the row was updated, 0 if no row has that uid

        Raises:
            ValidationError: If uid is malformed, a field is unknown, or the
                patched event would end before it starts
        """
        self._validate_identifier(uid, "uid")
        unknown = sorted(set(updates) - set(UPDATABLE_FIELDS))
        if unknown:
            raise ValidationError(f"Unknown event fields: {', '.join(unknown)}", field=unknown[0])

        try:
            event = self.db.query(Event).filter(Event.uid == uid).first()
            if event is None:
                logger.info(f"Update skipped, no event with uid {uid}")
                return 0

            for field, value in updates.items():
                setattr(event, field, value)

            if event.dtend < event.dtstart:
                raise ValidationError("dtend must not be before dtstart", field="dtend")

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Updated event {uid} ({', '.join(sorted(updates)) or 'no fields'})")
        return 1

    def delete_single(self, uid: str) -> int:
        """
        Delete one event by uid.

        Args:
            uid: Event uid

        Returns:
            Number of rows deleted (0 or 1)
        """
        self._validate_identifier(uid, "uid")

        try:
            deleted = (
                self.db.query(Event)
                .filter(Event.uid == uid)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(f"Rolled back delete of event {uid}", exc_info=True)
            raise

        logger.info(f"Deleted event {uid} ({deleted} rows)")
        return deleted

    # =========================================================================
    # Helpers
    # =========================================================================

    def _build_series_events(self, series_id: str, spec: SeriesSpec) -> List[Event]:
        """Expand a spec into unsaved Event rows tagged with series_id."""
        recurring_days = spec.recurring_days
        events = []
        for occurrence in expand_occurrences(spec, self.tz):
            events.append(
                Event(
                    uid=GuidService.generate_guid(SERVER_UID_PREFIX),
                    summary=spec.summary,
                    type=spec.event_type,
                    description=spec.description,
                    dtstart=occurrence.dtstart,
                    dtend=occurrence.dtend,
                    is_recurring=True,
                    recurring_days=list(recurring_days),
                    series_id=series_id,
                    recur_until=spec.recur_until,
                    series_start_date=spec.series_start_date,
                )
            )
        return events

    def _event_from_payload(self, payload: "EventCreate") -> Event:
        return Event(
            uid=payload.uid,
            summary=payload.summary,
            type=payload.type,
            dtstart=payload.dtstart,
            dtend=payload.dtend,
            description=payload.description,
            is_recurring=payload.is_recurring,
            recurring_days=payload.recurring_days,
            series_id=payload.series_id,
            recur_until=payload.recur_until,
            series_start_date=payload.series_start_date,
        )

    def _lock_series(self, series_id: str) -> None:
        """Serialise writers of one series on PostgreSQL (released at commit/rollback)."""
        if not self.series_lock or self.db.get_bind().dialect.name != "postgresql":
            return
        self.db.execute(
            text("SELECT pg_advisory_xact_lock(hashtext(:series_id))"),
            {"series_id": series_id},
        )

    @staticmethod
    def _validate_identifier(value: str, field: str) -> None:
        if not GuidService.is_valid_identifier(value):
            raise ValidationError(f"Invalid {field}: {value!r}", field=field)
