"""
Database connection and session management.
Pooled engine with health-checked connections and automatic recycling.
Supports PostgreSQL and SQLite backends.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool, StaticPool
from typing import Generator, Optional
import logging
import os
import time

from app.core.config import settings
from app.db.models import Base

logger = logging.getLogger(__name__)

# Track database availability to avoid repeated slow connection attempts
_db_available = True
_db_last_check = 0.0
_DB_RETRY_INTERVAL = 30  # Re-check every 30 seconds when DB is down

_is_sqlite = settings.database_url.startswith("sqlite")

if _is_sqlite:
    # SQLite: StaticPool so every session shares one connection (required for :memory:)
    db_path = settings.database_url.replace("sqlite:///", "")
    if db_path.startswith("./"):
        # Resolve relative path to the backend directory
        db_path = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), db_path[2:])
        db_url = f"sqlite:///{db_path}"
    else:
        db_url = settings.database_url

    engine = create_engine(
        db_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
else:
    engine = create_engine(
        settings.database_url,
        poolclass=QueuePool,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_recycle=settings.database_pool_recycle,
        pool_pre_ping=settings.database_pool_pre_ping,
        pool_timeout=30,
        echo=False,
        connect_args={"connect_timeout": 10},
    )

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def get_db() -> Generator[Optional[Session], None, None]:
    """
    Dependency injection for database session.
    Yields None if the database is unavailable; routes turn that into a 503.
    Unavailability is cached so a dead database does not slow every request.
    """
    global _db_available, _db_last_check

    if not _db_available:
        now = time.time()
        if now - _db_last_check < _DB_RETRY_INTERVAL:
            yield None
            return
        _db_last_check = now

    try:
        db = SessionLocal()
    except Exception as e:
        logger.warning(f"Database unavailable: {e}")
        _db_available = False
        _db_last_check = time.time()
        yield None
        return

    try:
        yield db
        _db_available = True
    finally:
        db.close()


def mark_unavailable() -> None:
    """Flag the database as down so get_db() short-circuits until the retry interval passes."""
    global _db_available, _db_last_check
    _db_available = False
    _db_last_check = time.time()


def init_db() -> None:
    """Initialize database tables at startup."""
    logger.info("Initializing database schema...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema initialized")
