"""
Database connection and session management for the listing store.
The store is read once at startup to build the catalog (see
app.services.catalog); afterwards sessions only serve the readiness probe.
Supports PostgreSQL and SQLite backends.
"""

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool, StaticPool
from typing import Generator, Optional
import logging
import os
import time

from app.core.config import settings
from app.db.models import Base

logger = logging.getLogger(__name__)

BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))

# Availability cache: once the store is down, probes answer without reconnecting
_db_available = True
_db_last_check = 0.0
_DB_RETRY_INTERVAL = 30


def resolve_database_url(url: str) -> str:
    """Anchor relative SQLite paths ("sqlite:///./listings.db") on the backend directory."""
    if url.startswith("sqlite:///./"):
        return f"sqlite:///{os.path.join(BACKEND_DIR, url[len('sqlite:///./'):])}"
    return url


def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        sqlite_engine = create_engine(
            resolve_database_url(url),
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )

        @event.listens_for(sqlite_engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.close()

        return sqlite_engine

    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_recycle=settings.database_pool_recycle,
        pool_pre_ping=settings.database_pool_pre_ping,
        pool_timeout=30,
        echo=False,
        connect_args={
            "connect_timeout": 10,
            "application_name": "listing-search",
        },
    )


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def mark_unavailable() -> None:
    """Remember that the store is down so probes answer instantly."""
    global _db_available, _db_last_check
    _db_available = False
    _db_last_check = time.time()


def get_db() -> Generator[Optional[Session], None, None]:
    """
    Session dependency for the readiness probe.
    Yields None while the store is known to be down (re-checked every 30s).
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
        logger.warning(f"Listing store unavailable: {e}")
        mark_unavailable()
        yield None
        return

    _db_available = True
    try:
        yield db
    finally:
        db.close()


def ping(db: Optional[Session]) -> bool:
    """True when the session can run a trivial query."""
    if db is None:
        return False
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Listing store ping failed: {e}")
        mark_unavailable()
        return False


def init_db() -> None:
    """Create the listings/quartiers tables if they do not exist."""
    logger.info("Initializing listing store schema...")
    Base.metadata.create_all(bind=engine)
    logger.info("Listing store schema initialized")
