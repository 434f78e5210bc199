import io

import pytest
from fastapi.testclient import TestClient

from instalike.core.config import Settings
from instalike.main import create_app

# Smallest valid PNG header is enough; uploads are checked by extension only
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.sqlite3'}",
        UPLOAD_DIRECTORY=str(tmp_path / "uploads"),
        SECRET_KEY="test-secret-key",
        PASSWORD_HASH_ROUNDS=4,
        BACKEND_CORS_ORIGINS=["http://testserver"],
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session(app):
    session = app.state.SessionLocal()
    try:
        yield session
    finally:
        session.close()


def register(client, username, email=None, password="secret123"):
    response = client.post(
        "/api/register",
        json={"username": username, "email": email or f"{username}@example.com", "password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()


def auth_headers(user):
    return {"Authorization": f"Bearer {user['token']}"}


def upload_post(client, user, filename="cat.png", content=PNG_BYTES, caption=None):
    data = {"caption": caption} if caption is not None else {}
    return client.post(
        "/api/posts",
        headers=auth_headers(user),
        files={"image": (filename, io.BytesIO(content), "image/png")},
        data=data,
    )


@pytest.fixture
def alice(client):
    return register(client, "alice")


@pytest.fixture
def bob(client):
    return register(client, "bob")
