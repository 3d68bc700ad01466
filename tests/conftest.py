"""Shared test fixtures for the document history test suite.

Tests run against a throwaway SQLite database created in a temp directory.
Each test starts from empty tables; service-level tests use an injectable
clock so coalescing windows can be crossed without sleeping.
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone

# Point the app at the test database before any app imports.
_TEST_DB_DIR = tempfile.mkdtemp(prefix="dochistory-test-")
os.environ["DATABASE_URL"] = os.environ.get(
    "TEST_DATABASE_URL",
    f"sqlite:///{os.path.join(_TEST_DB_DIR, 'test.db')}",
)
os.environ["LOG_FORMAT"] = "text"
os.environ["HISTORY_MIN_INTERVAL_MS"] = "10000"

import pytest
from fastapi.testclient import TestClient

from dochistory.database import Base, SessionLocal, engine, get_db
from dochistory.main import app
from dochistory import models  # noqa: F401

Base.metadata.create_all(bind=engine)

# Child tables first (foreign keys).
_TABLES = ["document_history", "documents"]


@pytest.fixture(autouse=True)
def _clean_tables():
    """Empty all data tables before each test for isolation."""
    with engine.begin() as conn:
        for table in _TABLES:
            conn.execute(Base.metadata.tables[table].delete())
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def client(db):
    """FastAPI TestClient with the DB dependency overridden to use the test session."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


def paragraph(text: str) -> dict:
    return {"type": "paragraph", "content": [{"type": "text", "text": text}]} if text else {"type": "paragraph"}


def make_doc(*texts: str) -> dict:
    """Tiptap document with one paragraph per text."""
    return {"type": "doc", "content": [paragraph(t) for t in texts]}


ESSAY = [
    "The water cycle describes how water moves between the oceans, the air and the land.",
    "Evaporation lifts water vapour from warm seas into the atmosphere every single day.",
    "As the vapour rises it cools and condenses into the droplets that form clouds.",
    "When droplets merge and grow heavy enough they fall back to earth as precipitation.",
    "Rivers and groundwater carry that water back toward the oceans to start again.",
    "Plants also return moisture to the air through a process called transpiration.",
]
"""Long enough that editing one paragraph is stored as a patch, not a snapshot."""


def essay(**edits: str) -> dict:
    """The ESSAY document with paragraphs replaced by index, e.g. ``essay(p2="...")``."""
    texts = list(ESSAY)
    for key, text in edits.items():
        texts[int(key[1:])] = text
    return make_doc(*texts)
