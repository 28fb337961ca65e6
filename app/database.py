"""Database configuration for the sorteio admin application."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

DEFAULT_SQLITE_PATH = Path("data/sorteio.db")
DEFAULT_SQLITE_PATH.parent.mkdir(parents=True, exist_ok=True)

# In production this points at the hosted Postgres instance of the backend.
DATABASE_URL = os.getenv("SORTEIO_DATABASE_URL", f"sqlite:///{DEFAULT_SQLITE_PATH}")


def _create_engine(url: str):
    """Create a SQLAlchemy engine for the given URL, handling sqlite connect args."""
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args, future=True)


# Local development falls back to the SQLite file when the configured
# database is unreachable. Any other environment re-raises.
try:
    engine = _create_engine(DATABASE_URL)
    with engine.connect() as _conn:  # type: ignore[var-annotated]
        pass
except Exception as e:  # pragma: no cover - environment dependent
    env = os.getenv("ENVIRONMENT", "development").lower()
    logger.warning("Could not connect to database at %r: %s", DATABASE_URL, e)
    if env == "development":
        fallback = f"sqlite:///{DEFAULT_SQLITE_PATH}"
        logger.warning("Falling back to SQLite for local development at %s", fallback)
        DATABASE_URL = fallback
        engine = _create_engine(DATABASE_URL)
    else:
        raise

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

Base = declarative_base()


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency that yields a database session."""

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def init_db() -> None:
    """Ensure database tables exist and create the default admin user if needed."""

    from app import models  # noqa: F401  (import ensures model metadata is registered)
    from app.auth import User

    Base.metadata.create_all(bind=engine, checkfirst=True)

    session = SessionLocal()
    try:
        admin_count = session.query(User).filter(User.username == "admin").count()
        if admin_count == 0:
            session.add(User.create_user("admin", "admin", role="admin"))
            session.commit()
            logger.info("Created default admin user (username: admin, role: admin)")
    except Exception:
        session.rollback()
        logger.exception("Could not seed the default admin user")
        raise
    finally:
        session.close()
