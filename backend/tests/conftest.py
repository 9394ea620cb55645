"""
Pytest configuration and fixtures
"""
import os

# Settings are read at import time; keep tests off the real generator and database
os.environ.setdefault("GEMINI_API_KEY", "test-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from academy import models  # noqa: F401  (registers tables on Base.metadata)
from academy.db import Base, get_db
from academy.main import app
from academy.rate_limit import survey_limiter
from academy.routers.analyses import get_generator
from academy.routers.auth import User, get_current_user


class FakeGenerator:
    """Stands in for GeminiClient; returns canned text or raises a canned error."""

    def __init__(self, text: str = "", error: Exception = None):
        self.text = text
        self.error = error
        self.prompts = []
        self.closed = False

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.text

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture(scope="function")
def db() -> Session:
    """Create a fresh in-memory database session for each test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(autouse=True)
def reset_survey_limiter():
    survey_limiter.reset()
    yield
    survey_limiter.reset()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def anonymous_client(db):
    """API client with the test database but no staff login"""
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def client(db, generator):
    """API client logged in as staff user "tester", using the fake generator"""
    def _get_db():
        yield db

    async def _get_generator():
        yield generator

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_current_user] = lambda: User(username="tester")
    app.dependency_overrides[get_generator] = _get_generator
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
