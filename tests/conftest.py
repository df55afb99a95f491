from typing import Generator

import pytest
from fastapi.testclient import TestClient

from quizprep.core.config import get_settings
from quizprep.db.session import InMemoryDatabase, get_db
from quizprep.main import create_app


@pytest.fixture
def db() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def client(db: InMemoryDatabase, monkeypatch) -> Generator[TestClient, None, None]:
    """API client bound to the in-memory store (lifespan not started)."""

    monkeypatch.setenv("QUIZPREP_STORE_BACKEND", "memory")
    get_settings.cache_clear()  # type: ignore[attr-defined]
    app = create_app()
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    get_settings.cache_clear()  # type: ignore[attr-defined]
