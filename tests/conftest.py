from __future__ import annotations

import os

# Keep the module-level engine off disk; tests bind their own engine below.
os.environ["DATABASE_URL"] = "sqlite://"

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from movewiki.database import Base, get_db
from movewiki.main import app
from movewiki.models.move import MoveForm
from movewiki.services import moves as move_service

VALID_DEFINITION = """\
When you **turn someone on**, roll +hot.
On a 10+, take a String on them.
On a 7-9, they choose: give themselves to you, or give you a String.
"""


@pytest.fixture
def session_factory() -> Iterator[sessionmaker]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory: sessionmaker) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory: sessionmaker) -> Iterator[TestClient]:
    def _get_db() -> Iterator[Session]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_move(db: Session):
    def _make(condition: str = "Turn Someone On", definition: str = VALID_DEFINITION, tags: str = ""):
        return move_service.create_move(
            db, MoveForm(condition=condition, definition=definition, tags=tags)
        )

    return _make
