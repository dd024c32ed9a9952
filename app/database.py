"""
Database engine and session management

The engine is created lazily on first use and shared by the whole process.
"""

import logging
import threading

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app import config

logger = logging.getLogger(__name__)

Base = declarative_base()

_engine = None
_SessionLocal = None
_engine_lock = threading.Lock()


def get_engine():
    """Return the process-wide engine, connecting on first call.

    Concurrent first callers wait on the lock; only the one that wins creates
    the engine and every caller gets that same instance back.
    """
    global _engine, _SessionLocal

    if _engine is not None:
        return _engine

    with _engine_lock:
        if _engine is None:
            connect_args = {}
            if config.DATABASE_URL.startswith("sqlite"):
                connect_args["check_same_thread"] = False

            engine = create_engine(
                config.DATABASE_URL,
                connect_args=connect_args,
                pool_pre_ping=True,
            )
            _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
            _engine = engine
            logger.info("Connected to database")

    return _engine


def get_db():
    """FastAPI dependency yielding a session bound to the shared engine"""
    get_engine()
    db = _SessionLocal()
    try:
        yield db
    finally:
        db.close()
