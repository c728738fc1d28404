from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from backend.app.main import create_app
from catalog.repositories import UserRepository
from catalog.security import hash_password

ADMIN_EMAIL = "admin@pipecatalog.com"
ADMIN_PASSWORD = "correct horse battery staple"


@pytest.fixture
def client(test_db, cache) -> Iterator[TestClient]:
    """Application wired to the in-memory database and the fake Redis cache."""
    app = create_app(cache=cache)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_credentials() -> dict:
    return {"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}


@pytest.fixture
def admin_user(test_session):
    user = UserRepository(test_session).create_user(ADMIN_EMAIL, hash_password(ADMIN_PASSWORD), "Admin")
    test_session.commit()
    return user


@pytest.fixture
def admin_client(client, admin_user, admin_credentials) -> TestClient:
    """Client holding a session cookie for the admin user."""
    resp = client.post("/api/v1/auth/login", json=admin_credentials)
    assert resp.status_code == 200
    return client
