"""Engine, session factory and declarative base for the board store."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from position_keeper.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base for boards, cards and any other sortable model."""


def _connect_args(url: str) -> dict[str, Any]:
    # FastAPI runs sync dependencies in a worker thread pool.
    if make_url(url).get_backend_name() == "sqlite":
        return {"check_same_thread": False}
    return {}


# Sortable models must be mapped before metadata or the first flush is used.
import position_keeper.models  # noqa: E402,F401

engine = create_engine(
    settings.effective_database_url,
    connect_args=_connect_args(settings.effective_database_url),
    pool_pre_ping=True,
    echo=settings.sql_debug,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a session for one request; endpoints commit their own changes."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    """Create the board and card tables that do not exist yet."""
    Base.metadata.create_all(bind=engine)


def drop_tables() -> None:
    """Drop the board and card tables."""
    Base.metadata.drop_all(bind=engine)
