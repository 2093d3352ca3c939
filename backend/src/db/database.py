"""
Database connection and session management.

The engine and session factory live on a ``Database`` object that the
application builds once at start-up (see ``backend.src.main.lifespan``) and
stores on ``app.state``. Each request borrows one session from it through
``get_db`` and the session is closed on every exit path.
"""

from pathlib import Path
from typing import Generator, Optional

from dotenv import load_dotenv
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from backend.src.utils.logging_config import get_logger


# Load environment variables from .env file
# Look for .env in backend directory (parent of src)
env_path = Path(__file__).parent.parent.parent / '.env'
if env_path.exists():
    load_dotenv(dotenv_path=env_path)


logger = get_logger("db")


def create_db_engine(database_url: str, sslmode: Optional[str] = None) -> Engine:
    """
    Create a SQLAlchemy engine for the given URL.

    Args:
        database_url: SQLAlchemy database URL
        sslmode: Optional libpq sslmode for PostgreSQL (e.g. "require")

    Returns:
        Configured Engine
    """
    if database_url.startswith("sqlite"):
        # SQLite doesn't support pool_size, max_overflow, or pool_recycle
        return create_engine(
            database_url,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool,
            echo=False,
            future=True
        )

    connect_args = {"sslmode": sslmode} if sslmode else {}
    return create_engine(
        database_url,
        connect_args=connect_args,
        pool_size=10,          # Maximum connections in pool
        max_overflow=5,        # Additional connections beyond pool_size
        pool_pre_ping=True,    # Verify connections before checkout
        pool_recycle=1800,     # Hosted Postgres drops idle connections
        echo=False,
        future=True
    )


class Database:
    """
    Explicitly constructed store client.

    Lifecycle:
        - created at process start with ``Database.from_settings``
        - one session per request via ``session()``
        - ``dispose()`` at shutdown closes pooled connections

    Usage:
        >>> database = Database("sqlite:///:memory:")
        >>> session = database.session()
        >>> try:
        ...     session.execute(text("SELECT 1"))
        ... finally:
        ...     session.close()
    """

    def __init__(self, database_url: str, sslmode: Optional[str] = None):
        self.engine = create_db_engine(database_url, sslmode=sslmode)
        self.session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
            future=True
        )

    @classmethod
    def from_settings(cls, settings) -> "Database":
        """Build a Database from AppSettings."""
        return cls(settings.database_url, sslmode=settings.db_sslmode or None)

    def session(self) -> Session:
        """Open a new session bound to this database."""
        return self.session_factory()

    def init_schema(self) -> None:
        """
        Create tables directly from model metadata.

        Intended for tests and local SQLite setups.
        For production, use Alembic migrations instead.
        """
        from backend.src.models import Base
        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        """Dispose of the engine and close all pooled connections."""
        self.engine.dispose()
        logger.info("Database engine disposed")


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency for FastAPI routes to get a database session.

    Yields:
        Session: SQLAlchemy database session

    Usage:
        @router.get("/events")
        async def list_events(db: Session = Depends(get_db)):
            ...
    """
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()
