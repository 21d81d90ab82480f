# tests/conftest.py
"""Shared fixtures: in-memory SQLite database, app client, auth headers."""

import os
import tempfile

# Config is read at import time; it must see a secret before the package loads.
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-visitor-register")
os.environ.setdefault("ADMIN_PASSWORD", "Fr0ntDesk-admin")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_DIR"] = ""
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="visitor-register-uploads-")

import pytest
from fastapi.testclient import TestClient

from visitor_register.config import Settings
from visitor_register.database import Database
from visitor_register.main import create_app

TEST_SECRET = "test-secret-key-for-visitor-register"
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "Fr0ntDesk-admin"
STAFF_USERNAME = "desk"
STAFF_PASSWORD = "desk-pass-1"


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        JWT_SECRET=TEST_SECRET,
        ADMIN_USERNAME=ADMIN_USERNAME,
        ADMIN_PASSWORD=ADMIN_PASSWORD,
        UPLOAD_DIR=str(tmp_path / "uploads"),
        LOG_DIR="",
    )


@pytest.fixture
def database():
    database = Database("sqlite://")
    database.create_tables()
    yield database
    database.dispose()


@pytest.fixture
def db(database):
    with database.session() as session:
        yield session


@pytest.fixture
def client(test_settings):
    with TestClient(create_app(test_settings)) as c:
        yield c


def login_headers(client, username, password):
    resp = client.post("/api/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['accessToken']}"}


@pytest.fixture
def admin_headers(client):
    return login_headers(client, ADMIN_USERNAME, ADMIN_PASSWORD)


@pytest.fixture
def staff_headers(client, admin_headers):
    resp = client.post(
        "/api/users",
        json={"username": STAFF_USERNAME, "password": STAFF_PASSWORD, "role": "staff"},
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.text
    return login_headers(client, STAFF_USERNAME, STAFF_PASSWORD)
