"""Shared test fixtures for authtrail."""

import os
import tempfile

# Point the import-time application at a throwaway database, give it a signing
# key and keep bcrypt fast; must happen before authtrail.config is imported.
_STARTUP_DIR = tempfile.mkdtemp(prefix="authtrail-tests-")
os.environ.setdefault("DATABASE_PATH", os.path.join(_STARTUP_DIR, "startup.db"))
os.environ.setdefault("BCRYPT_WORK_FACTOR", "4")
os.environ.setdefault("JWT_SECRET_KEY", "test-signing-key-with-at-least-32-characters")

import sqlite3

import pytest

from authtrail.config import settings
from authtrail.correlation import CorrelationContext
from authtrail.db.audit import AuditOperations
from authtrail.db.users import UserOperations
from authtrail.events.bus import build_event_bus
from authtrail.main import app
from authtrail.schema import SCHEMA_PATH

VALID_EMAIL = "joaosilva1@x.com"
VALID_NAME = "Joao Silva"
VALID_PASSWORD = "Abcdef@1"


@pytest.fixture
def test_db():
    """In-memory database with schema and the default roles."""
    db = sqlite3.connect(":memory:")
    db.row_factory = sqlite3.Row
    db.execute("PRAGMA foreign_keys = ON")
    db.executescript(SCHEMA_PATH.read_text())
    db.executemany(
        "INSERT INTO roles (name) VALUES (?)",
        [(settings.admin_role,), (settings.default_role,)]
    )
    db.commit()

    yield db

    db.close()


@pytest.fixture
def users(test_db):
    """Credential store over the in-memory database."""
    return UserOperations(test_db)


@pytest.fixture
def audit(test_db):
    """Audit store over the in-memory database."""
    return AuditOperations(test_db)


@pytest.fixture
def context():
    return CorrelationContext("test-correlation-id")


@pytest.fixture
def bus(audit):
    """Event bus with the audit handler wired to the in-memory audit store."""
    return build_event_bus(audit)


@pytest.fixture
def client():
    """Create test client for API testing.

    Each test gets a fresh file database with schema and seeded roles.
    """
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    os.unlink(db_path)

    original_db_path = settings.database_path
    settings.database_path = db_path
    try:
        from authtrail.db import init_db
        from authtrail.db.seed import seed
        init_db()
        seed()

        app.config['TESTING'] = True
        with app.test_client() as client:
            yield client

    finally:
        settings.database_path = original_db_path
        if os.path.exists(db_path):
            os.unlink(db_path)


@pytest.fixture
def registered_user(client):
    """Register the default valid user through the API.

    Returns (email, password).
    """
    response = client.post(
        "/auth/register",
        json={"email": VALID_EMAIL, "nome": VALID_NAME, "password": VALID_PASSWORD}
    )
    assert response.status_code == 200
    return VALID_EMAIL, VALID_PASSWORD


@pytest.fixture
def auth_headers(client, registered_user):
    """Authorization header for the registered user."""
    email, password = registered_user
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.get_json()['token']}"}
