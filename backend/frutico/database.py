from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
import os
import logging
from contextlib import contextmanager

logger = logging.getLogger(__name__)

Base = declarative_base()


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:")


def build_engine(url: str) -> Engine:
    """Create the process-wide engine for ``url``.

    Called once at startup; the engine is disposed on shutdown.
    """
    is_sqlite = url.startswith("sqlite")
    # Avoid stale idle connections causing first-hit failures after inactivity
    pool_kwargs: dict = {"pool_pre_ping": True}
    if _is_memory_sqlite(url):
        # A single shared connection, otherwise every checkout sees an empty DB
        connect_args = {"check_same_thread": False}
        pool_kwargs = {"poolclass": StaticPool}
    elif is_sqlite:
        connect_args = {"check_same_thread": False, "timeout": 15}
    else:
        connect_args = {}
        pool_kwargs.update({
            "pool_size": int(os.getenv("DB_POOL_SIZE") or 6),
            "max_overflow": int(os.getenv("DB_MAX_OVERFLOW") or 6),
            "pool_recycle": int(os.getenv("DB_POOL_RECYCLE") or 300),
            "pool_timeout": float(os.getenv("DB_POOL_TIMEOUT") or 5.0),
        })

    engine = create_engine(url, connect_args=connect_args, **pool_kwargs)

    if is_sqlite and not _is_memory_sqlite(url):
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            # WAL improves read concurrency; NORMAL reduces fsync pressure.
            cursor.execute("PRAGMA journal_mode=WAL;")
            cursor.execute("PRAGMA synchronous=NORMAL;")
            # Back off rather than instantly failing on transient locks (ms)
            cursor.execute("PRAGMA busy_timeout=60000;")
            cursor.close()

    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def session_scope(session_factory: sessionmaker):
    """Provide a short-lived session with guaranteed close.

    Use in places where FastAPI Depends is unavailable (worker threads,
    background tasks).
    """
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
