"""Database module for authtrail.

Core owns one sqlite connection and exposes the store implementations:

    core = get_core()
    user = core.users.find_by_email("someone@example.com")
    records = core.audit.list_all()

CONNECTION LIFECYCLE:
- atomic=False (default): every store write commits on its own.
- atomic=True: Core MUST be used as a context manager; all writes commit
  together on exit or roll back on error.
"""

import logging
import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING

from ..config import settings
from ..schema import SCHEMA_PATH

if TYPE_CHECKING:
    from .audit import AuditOperations
    from .users import UserOperations

logger = logging.getLogger(__name__)


class Core:
    """
    Database Core with user and audit operations.

    Maintains its own connection and transaction state.
    """

    def __init__(self, connection: sqlite3.Connection, atomic: bool = False):
        """Initialize Core with a database connection.

        Args:
            connection: SQLite connection with row_factory set to sqlite3.Row
            atomic: If True, Core MUST be used as context manager.
                    If False, Core has autocommit semantics.
        """
        self._conn = connection
        self._atomic = atomic
        self._user_ops = None
        self._audit_ops = None

    @property
    def users(self) -> "UserOperations":
        """Credential store operations (lazy-loaded, cached)."""
        if self._user_ops is None:
            from .users import UserOperations
            self._user_ops = UserOperations(self._conn, autocommit=not self._atomic)
        return self._user_ops

    @property
    def audit(self) -> "AuditOperations":
        """Audit store operations (lazy-loaded, cached)."""
        if self._audit_ops is None:
            from .audit import AuditOperations
            self._audit_ops = AuditOperations(self._conn, autocommit=not self._atomic)
        return self._audit_ops

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "Core":
        """Enter context manager for atomic transaction.

        Raises:
            RuntimeError: If Core was not created with atomic=True
        """
        if not self._atomic:
            raise RuntimeError(
                "Core must be created with atomic=True for context manager use. "
                "Use: with db.get_core(atomic=True) as core:"
            )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Commit on success, roll back on error, always close."""
        try:
            if exc_type is None:
                self._conn.commit()
            else:
                self._conn.rollback()
        finally:
            self._conn.close()


def _create_connection() -> sqlite3.Connection:
    """Create a fresh database connection.

    Returns:
        SQLite connection with row_factory set to sqlite3.Row
        and foreign keys enabled.
    """
    db_path = Path(settings.database_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    # Flask may serve a request on a different thread than the one that
    # opened the connection; each Core is still used by one request only.
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def get_core(atomic: bool = False) -> Core:
    """
    Get a database Core instance.

    Args:
        atomic: If True, returns a Core that MUST be used as context manager.
                If False (default), each write commits independently.

    Examples:
        >>> core = get_core()
        >>> core.audit.list_all()

        >>> with get_core(atomic=True) as core:
        ...     core.users.create(user, password)
        ...     core.users.assign_role(user, "Usuario")
    """
    return Core(_create_connection(), atomic=atomic)


def init_db() -> None:
    """Apply schema.sql to a fresh database; existing databases are left alone."""
    db_path = Path(settings.database_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    db = sqlite3.connect(str(db_path))
    try:
        cursor = db.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='_schema_metadata'"
        )
        if cursor.fetchone():
            return

        db.executescript(SCHEMA_PATH.read_text())
        db.commit()
        logger.info("Database schema applied at %s", db_path)
    finally:
        db.close()


def get_schema_version(conn: sqlite3.Connection) -> str:
    """Schema version recorded in _schema_metadata, or 'unknown'."""
    row = conn.execute(
        "SELECT value FROM _schema_metadata WHERE key = 'version'"
    ).fetchone()
    return row[0] if row else "unknown"
