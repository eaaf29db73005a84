"""
Database connection and session management.
The Database handle owns the engine and its connection pool; it is created
once per application and handed to whatever needs persistence.
"""
import logging
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from setlone.config.settings import Settings
from setlone.models import Base

logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> Engine:
    url = settings.database_url
    if url.startswith("sqlite"):
        # In-memory sqlite must share one connection or every session sees an empty database
        pool_kwargs = {"poolclass": StaticPool} if ":memory:" in url or url == "sqlite://" else {}
        return create_engine(url, connect_args={"check_same_thread": False}, echo=False, **pool_kwargs)

    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout_seconds,
        pool_pre_ping=True,
        echo=False,
    )


class Database:
    """Owned engine plus session factory."""

    def __init__(self, settings: Settings, engine: Engine | None = None):
        self.engine = engine or build_engine(settings)
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def init_db(self):
        """Create tables. Safe to call multiple times."""
        logger.info("Initializing database schema...")
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database schema initialized successfully")

    def test_connection(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as exc:
            logger.error(f"Database connection test failed: {exc}")
            return False

    def pool_status(self) -> str:
        return self.engine.pool.status()

    def dispose(self):
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    """
    Dependency for FastAPI endpoints.
    Provides a session from the application's Database that auto-closes.
    """
    db = request.app.state.db.session_factory()
    try:
        yield db
    finally:
        db.close()
