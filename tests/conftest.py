"""
pytest configuration and fixtures.

Every test gets its own SQLite file under ``tmp_path``.
"""

import itertools
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient

from user_api.app.core.config import Settings
from user_api.app.core.db import init_db
from user_api.app.main import create_app
from user_api.app.services.user_store import UserStore


API = "/api/users"


@pytest.fixture
def database_path(tmp_path) -> str:
    """Path of a fresh database file."""
    return str(tmp_path / "users.db")


@pytest.fixture
def settings(database_path: str) -> Settings:
    """Settings pointing at the test database."""
    return Settings(
        database_url=database_path,
        api_prefix="/api",
        log_level="WARNING",
        validation_message="Validation failed",
    )


@pytest.fixture
def client(settings: Settings) -> Generator[TestClient, None, None]:
    """Test client; entering it runs the start-up migrations."""
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def store(database_path: str) -> UserStore:
    """Store on a migrated database, for tests that bypass HTTP."""
    init_db(database_path)
    return UserStore(database_path)


@pytest.fixture
def make_user(client: TestClient) -> Callable[..., dict]:
    """Create a user through the API and return the response body."""
    counter = itertools.count(1)

    def _make(**overrides) -> dict:
        n = next(counter)
        payload = {"name": f"Test User {n}", "email": f"test-{n}@example.com", "age": 25}
        payload.update(overrides)
        response = client.post(API, json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _make
