import pytest
from fastapi.testclient import TestClient

from lius_fintech_api.app.core import db
from lius_fintech_api.app.main import app


@pytest.fixture(autouse=True)
def store(tmp_path):
    """Every test gets its own empty data directory."""
    store = db.init_db(tmp_path / "data")
    yield store
    db._store = None


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def register(client):
    """Register a user through the API and return its id."""

    def _register(username: str, password: str = "secret123") -> str:
        resp = client.post("/api/register", json={"username": username, "password": password})
        assert resp.status_code == 201, resp.text
        return resp.json()["userId"]

    return _register
