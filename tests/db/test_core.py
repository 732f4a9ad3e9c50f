"""Tests for Core database interface.

Behavior-focused tests using real SQLite files.
No mocks - testing observable behavior.
"""

import sqlite3

import pytest

from authtrail.auth.models import User
from authtrail.config import settings
from authtrail.db import Core, _create_connection, get_core, get_schema_version, init_db
from authtrail.db.audit import AuditOperations
from authtrail.db.seed import seed, seed_admin_user
from authtrail.db.users import UserOperations
from authtrail.events.audit import AuditRecord
from authtrail.exceptions import WeakPassword
from authtrail.utils import isodatetime


@pytest.fixture
def db_file(tmp_path, monkeypatch):
    """Point settings at a fresh database file with schema applied."""
    path = tmp_path / "core.db"
    monkeypatch.setattr(settings, "database_path", str(path))
    init_db()
    return path


# ============================================================================
# _create_connection / get_core
# ============================================================================


def test_create_connection_returns_connection(db_file):
    """_create_connection() should return a valid SQLite connection."""
    conn = _create_connection()
    assert isinstance(conn, sqlite3.Connection)
    assert conn.row_factory == sqlite3.Row
    conn.close()


def test_create_connection_enables_foreign_keys(db_file):
    conn = _create_connection()
    result = conn.execute("PRAGMA foreign_keys").fetchone()
    assert result[0] == 1  # 1 = enabled
    conn.close()


def test_get_core_modes(db_file):
    core = get_core()
    assert core._atomic is False
    core.close()

    core = get_core(atomic=True)
    assert core._atomic is True
    core.close()


# ============================================================================
# Core properties
# ============================================================================


def test_core_properties_are_cached(test_db):
    core = Core(test_db, atomic=False)

    assert isinstance(core.users, UserOperations)
    assert isinstance(core.audit, AuditOperations)
    assert core.users is core.users
    assert core.audit is core.audit


def test_non_atomic_core_refuses_context_manager(test_db):
    core = Core(test_db, atomic=False)
    with pytest.raises(RuntimeError, match="atomic=True"):
        with core:
            pass


# ============================================================================
# Transactions
# ============================================================================


def _audit_record():
    return AuditRecord(
        name="LoginEvent",
        timestamp=isodatetime.utcnow(),
        description="Tentativa",
        correlation_id="core-test",
    )


def test_atomic_core_commits_on_success(db_file):
    with get_core(atomic=True) as core:
        core.audit.append(_audit_record())

    core = get_core()
    try:
        assert len(core.audit.list_all()) == 1
    finally:
        core.close()


def test_atomic_core_rolls_back_on_error(db_file):
    with pytest.raises(WeakPassword):
        with get_core(atomic=True) as core:
            core.audit.append(_audit_record())
            core.users.create(User("joaosilva1@x.com", "Joao Silva"), "fraca")

    core = get_core()
    try:
        assert core.audit.list_all() == []
    finally:
        core.close()


# ============================================================================
# Schema and seed
# ============================================================================


def test_init_db_is_idempotent(db_file):
    init_db()

    core = get_core()
    try:
        assert get_schema_version(core._conn) == "20250601"
    finally:
        core.close()


def test_seed_creates_roles_once(db_file):
    seed()
    seed()

    core = get_core()
    try:
        roles = [row["name"] for row in core._conn.execute("SELECT name FROM roles ORDER BY name")]
    finally:
        core.close()
    assert roles == sorted([settings.admin_role, settings.default_role])


def test_seed_admin_user(db_file, monkeypatch):
    monkeypatch.setattr(settings, "admin_email", "administrador@x.com")
    monkeypatch.setattr(settings, "admin_password", "Admin@123")
    seed()
    seed()

    core = get_core()
    try:
        admin = core.users.find_by_email("administrador@x.com")
        assert admin is not None
        assert admin.email_confirmed is True
        assert core.users.is_in_role(admin, settings.admin_role)
        assert core.users.verify_password(admin, "Admin@123")
    finally:
        core.close()


def test_seed_admin_role_added_to_existing_user(db_file, monkeypatch):
    seed()
    core = get_core()
    try:
        existing = User("administrador@x.com", "Admin")
        core.users.create(existing, "Admin@123")
    finally:
        core.close()

    monkeypatch.setattr(settings, "admin_email", "administrador@x.com")
    monkeypatch.setattr(settings, "admin_password", "Admin@123")
    seed_admin_user()

    core = get_core()
    try:
        assert core.users.is_in_role(existing, settings.admin_role)
    finally:
        core.close()


def test_seed_admin_skipped_without_credentials(db_file, monkeypatch):
    monkeypatch.setattr(settings, "admin_email", None)
    seed()

    core = get_core()
    try:
        count = core._conn.execute("SELECT COUNT(*) FROM users").fetchone()[0]
    finally:
        core.close()
    assert count == 0
