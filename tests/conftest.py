"""Pytest configuration and shared fixtures."""

import base64

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from api.app import app
from api.config import Settings, get_settings
from api.database import Database

TEST_PASSWORD = "test-password"


@pytest.fixture
def test_settings():
    """Settings for tests; the database is never contacted."""
    return Settings(
        mongodb_db_name="foldernotes_test",
        init_db=False,
        app_password=TEST_PASSWORD,
        jwt_secret_key="test-secret-key",
    )


@pytest.fixture
def mock_db():
    """In-memory MongoDB installed as the application database."""
    client = AsyncMongoMockClient(tz_aware=True)
    Database.client = client
    Database.db = client["foldernotes_test"]
    yield Database.db
    Database.client = None
    Database.db = None


@pytest.fixture
def api_client(mock_db, test_settings):
    """FastAPI test client; the lifespan is skipped so no real MongoDB is needed."""
    app.dependency_overrides[get_settings] = lambda: test_settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(api_client):
    response = api_client.post("/auth/login", json={"password": TEST_PASSWORD})
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def folder(api_client, auth_headers):
    """A freshly created folder."""
    response = api_client.post(
        "/folders",
        json={"name": "Work", "description": "Work notes", "color": "#ff8800"},
        headers=auth_headers,
    )
    return response.json()


@pytest.fixture
def make_note(api_client, auth_headers, folder):
    """Factory creating notes in ``folder``."""

    def _make(title="Test Note", content="Some content", **fields):
        payload = {"folder_id": folder["id"], "title": title, "content": content, **fields}
        response = api_client.post("/notes", json=payload, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture
def image_payload():
    """Factory for the request body of an image of ``size`` bytes."""

    def _payload(name="photo.png", size=1024, mimetype="image/png"):
        data = base64.b64encode(b"\x89" * size).decode("ascii")
        return {"original_name": name, "mimetype": mimetype, "data": f"data:{mimetype};base64,{data}"}

    return _payload
