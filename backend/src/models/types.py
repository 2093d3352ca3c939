"""
Custom SQLAlchemy types for cross-database compatibility.

Provides types that work across PostgreSQL and SQLite for testing.
"""

from datetime import datetime, timezone

from sqlalchemy import TypeDecorator, JSON, DateTime
from sqlalchemy.dialects.postgresql import JSONB


class JSONBType(TypeDecorator):
    """
    Platform-independent JSONB type.

    Uses PostgreSQL's native JSONB type when available,
    otherwise falls back to JSON for SQLite.
    """

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(JSONB())
        else:
            return dialect.type_descriptor(JSON())


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware timestamp stored as UTC.

    PostgreSQL keeps it in a TIMESTAMP WITH TIME ZONE column. SQLite has no
    native timezone support, so values are written as naive UTC and get
    their UTC tzinfo back on load. Naive values are treated as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        if dialect.name == 'sqlite':
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if isinstance(value, str):
            value = datetime.fromisoformat(value)
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
