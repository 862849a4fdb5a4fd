"""Shared fixtures: in-memory database, fixed clock, scripted random source, API client."""

from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from habit_tracker.clock import get_now, get_rng
from habit_tracker.database import get_db
from habit_tracker.main import app
from habit_tracker.models import User
from habit_tracker.routers.auth import create_access_token, get_password_hash

from .fakes import NOW, ScriptedRandom


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture()
def user(session: Session) -> User:
    user = User(email="ada@example.com", hashed_password=get_password_hash("secret"))
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture()
def rng() -> ScriptedRandom:
    return ScriptedRandom(0.0)


@pytest.fixture()
def client(session: Session, rng: ScriptedRandom) -> Generator[TestClient, None, None]:
    def _get_db():
        yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_now] = lambda: NOW
    app.dependency_overrides[get_rng] = lambda: rng
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token({"sub": user.email})
    return {"Authorization": f"Bearer {token}"}
