# tests/conftest.py
from __future__ import annotations

from collections.abc import Callable, Generator, Iterator
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from position_keeper.db.session import Base
from position_keeper.db.session import get_db as app_get_session
from position_keeper.main import app as fastapi_app
from position_keeper.models import DEFAULT_LANE, Board, Card

TEST_DB_URL = "sqlite://"

_BOARD_NAME_COUNTER = count(1)


def sqlite_engine(url: str = TEST_DB_URL) -> Engine:
    """Create an in-memory SQLite engine on which SAVEPOINT works."""
    engine = create_engine(
        url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite opens transactions lazily on its own; let SQLAlchemy emit BEGIN
    # instead so nested transactions behave.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record) -> None:  # pragma: no cover
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn) -> None:  # pragma: no cover
        conn.exec_driver_sql("BEGIN")

    return engine


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = sqlite_engine()
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        if transaction.is_active:
            transaction.rollback()
        connection.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_board(db_session: Session) -> Callable[..., Board]:
    """Return a factory that persists a board."""

    def _make(name: str | None = None, rank: int | None = None) -> Board:
        board = Board(name=name or f"Board {next(_BOARD_NAME_COUNTER)}", rank=rank)
        db_session.add(board)
        db_session.flush()
        return board

    return _make


@pytest.fixture()
def board(make_board: Callable[..., Board]) -> Board:
    """Create a default test board."""
    return make_board("Test Board")


@pytest.fixture()
def make_cards(db_session: Session) -> Callable[..., list[Card]]:
    """Return a factory that appends titled cards to a lane in one flush."""

    def _make(board: Board, titles: str, lane: str = DEFAULT_LANE) -> list[Card]:
        cards = [Card(board_id=board.id, lane=lane, title=title) for title in titles]
        db_session.add_all(cards)
        db_session.flush()
        return cards

    return _make


@pytest.fixture()
def lane_positions(db_session: Session) -> Callable[..., dict[str, Any]]:
    """Return a helper reading ``{title: position}`` for one lane from the database."""

    def _read(board: Board, lane: str = DEFAULT_LANE) -> dict[str, Any]:
        rows = db_session.execute(
            select(Card.title, Card.position).where(
                Card.board_id == board.id,
                Card.lane == lane,
            )
        )
        return {title: position for title, position in rows}

    return _read
