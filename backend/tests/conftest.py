"""
Pytest configuration and fixtures for backend tests.

Provides shared fixtures for:
- Test database sessions
- Event services
- Sample data factories
- FastAPI test client
"""

import os
import pytest
from datetime import datetime, timedelta, timezone
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app modules
os.environ['EVENTS_DB_URL'] = 'sqlite:///:memory:'
os.environ['EVENTS_ENV'] = 'test'
os.environ['EVENTS_TIMEZONE'] = 'UTC'

from backend.src.models import Base, Event
from backend.src.services.event_service import EventService
from backend.src.services.suggestion_service import SuggestionService


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture(scope='function')
def test_db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope='function')
def test_db_session(test_db_engine):
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_db_engine
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# ============================================================================
# Service Fixtures
# ============================================================================

@pytest.fixture
def event_service(test_db_session):
    """EventService expanding series in UTC."""
    return EventService(test_db_session, tz=timezone.utc)


@pytest.fixture
def suggestion_service(test_db_session):
    """SuggestionService with the default limit."""
    return SuggestionService(test_db_session)


# ============================================================================
# Sample Data Factories
# ============================================================================

@pytest.fixture
def sample_event_data():
    """Factory for creating sample event payloads (wire format)."""
    def _create(
        uid='manual-1',
        summary='Biscuit',
        event_type='walk',
        dtstart='2026-01-05T09:00:00Z',
        dtend='2026-01-05T10:00:00Z',
        **extra
    ):
        data = {
            'uid': uid,
            'summary': summary,
            'type': event_type,
            'dtstart': dtstart,
            'dtend': dtend,
        }
        data.update(extra)
        return data
    return _create


@pytest.fixture
def sample_event(test_db_session):
    """Factory for creating sample Event models in the database."""
    def _create(
        uid='manual-1',
        summary='Biscuit',
        event_type='walk',
        dtstart=None,
        duration=timedelta(hours=1),
        **extra
    ):
        if dtstart is None:
            dtstart = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)
        event = Event(
            uid=uid,
            summary=summary,
            type=event_type,
            dtstart=dtstart,
            dtend=dtstart + duration,
            is_recurring=extra.pop('is_recurring', False),
            **extra
        )
        test_db_session.add(event)
        test_db_session.commit()
        test_db_session.refresh(event)
        return event
    return _create


@pytest.fixture
def sample_series_body():
    """Factory for series regeneration request bodies."""
    def _create(**overrides):
        data = {
            'summary': 'Biscuit',
            'type': 'walk',
            'series_start_date': '2024-01-01',
            'recur_until': '2024-01-07',
            'time_of_day': '09:00',
            'duration_minutes': 60,
            'recurring_days': [1, 3, 5],
        }
        data.update(overrides)
        return data
    return _create


# ============================================================================
# API Fixtures
# ============================================================================

@pytest.fixture(scope='function')
def test_client(test_db_session):
    """Create a test client for FastAPI application."""
    from fastapi.testclient import TestClient
    from backend.src.main import app

    # Override dependencies
    def get_test_db():
        try:
            yield test_db_session
        finally:
            pass

    from backend.src.db.database import get_db

    app.dependency_overrides[get_db] = get_test_db

    with TestClient(app) as client:
        yield client

    # Clear overrides
    app.dependency_overrides.clear()
