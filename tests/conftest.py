import os
import sys
from datetime import datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "backend"))
os.environ.setdefault("DATABASE_URL", "sqlite://")

import models  # noqa: E402,F401
from db import get_session  # noqa: E402
from main import app  # noqa: E402
from time_utils import to_utc  # noqa: E402

USER = "user-a"
OTHER_USER = "user-b"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def _session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def headers():
    return {"X-User-Id": USER}


@pytest.fixture
def other_headers():
    return {"X-User-Id": OTHER_USER}


def parse_ts(value):
    """Parse an API timestamp into aware UTC; older Pythons reject a trailing Z."""
    return to_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
