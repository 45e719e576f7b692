# app/database.py
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlmodel import SQLModel, create_engine, Session

from app.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

# ---------------------------------------------------------
# Relational store connection
#
# - Postgres: pooled connections, sslmode appended when configured,
#   pool_pre_ping to drop stale connections.
# - SQLite (tests / local runs): single file or in-memory database,
#   shared across FastAPI's worker threads.
# ---------------------------------------------------------

db_url = settings.DATABASE_URL
engine_kwargs: dict = {"echo": settings.DB_ECHO}

if db_url.startswith("sqlite"):
    engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    # Append sslmode if configured and not already present
    if settings.DB_SSLMODE and "sslmode=" not in db_url:
        separator = "&" if "?" in db_url else "?"
        db_url = f"{db_url}{separator}sslmode={settings.DB_SSLMODE}"
    engine_kwargs.update(
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
    )

engine = create_engine(db_url, **engine_kwargs)


def create_db_and_tables() -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(engine)


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session.

    One session per request; it is closed when the request finishes.
    """
    with Session(engine) as session:
        yield session


@contextmanager
def transaction(session: Session) -> Iterator[Session]:
    """
    Scope a unit of work on `session`.

    Commits when the block exits normally and rolls back on any exception
    before re-raising it, so no transaction is ever left open.

        with transaction(session):
            repo.insert_a(session, ...)
            repo.insert_b(session, ...)
    """
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.debug("Transaction rolled back", exc_info=True)
        raise
