"""User (credential store) operations.

IMPORT CONVENTION:
- Core accesses these through core.users property
- Implements the CredentialStore protocol from authtrail.interfaces

Email uniqueness is enforced by the UNIQUE constraint on users.email, not by
a lookup: a concurrent duplicate insert surfaces as ConflictError.
"""

import logging
import sqlite3
from contextlib import contextmanager
from typing import Iterator

from ..auth import service
from ..auth.models import User
from ..auth.validators import validate_password
from ..exceptions import AuthenticationError, ConflictError, ResourceNotFound, StoreError
from ..utils import isodatetime

logger = logging.getLogger(__name__)

EMAIL_IN_USE = "E-mail já está em uso."
WRONG_CURRENT_PASSWORD = "Senha atual incorreta."


class UserOperations:
    """sqlite-backed credential store."""

    def __init__(self, conn: sqlite3.Connection, autocommit: bool = True):
        """Initialize user operations.

        Args:
            conn: SQLite connection with row_factory set to sqlite3.Row
            autocommit: Commit after each write. False when an outer
                        transaction (atomic Core) owns the commit.
        """
        self._conn = conn
        self._autocommit = autocommit

    # ------------------------------------------------------------------
    # Transaction handling
    # ------------------------------------------------------------------

    def _commit(self) -> None:
        if self._autocommit:
            self._conn.commit()

    @contextmanager
    def atomic(self) -> Iterator["UserOperations"]:
        """
        Run several writes as one unit.

        Inside the block writes are not committed individually; the whole
        block commits on success and rolls back on any exception. When an
        outer transaction already owns the connection the block simply joins it.
        """
        if not self._autocommit:
            yield self
            return

        self._autocommit = False
        try:
            yield self
        except BaseException:
            self._conn.rollback()
            raise
        else:
            self._conn.commit()
        finally:
            self._autocommit = True

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_by_login(self, login_name: str) -> User | None:
        return self._find_one("user_name", login_name)

    def find_by_email(self, email: str) -> User | None:
        return self._find_one("email", email)

    def get_by_id(self, user_id: str) -> User:
        """
        Raises:
            ResourceNotFound: If user_id doesn't exist
        """
        user = self._find_one("id", user_id)
        if user is None:
            raise ResourceNotFound(f"User '{user_id}' not found", {"user_id": user_id})
        return user

    def _find_one(self, column: str, value: str) -> User | None:
        try:
            row = self._conn.execute(
                f"SELECT * FROM users WHERE {column} = ?", (value,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StoreError("Failed to read user", {"cause": str(e)}) from e
        return _row_to_user(row) if row else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, user: User, password: str) -> None:
        """
        Persist user with a bcrypt hash of password.

        Raises:
            WeakPassword: If password fails the credential policy
            ConflictError: If the e-mail is already registered
            StoreError: On any other database failure
        """
        validate_password(password)
        user.password_hash = service.hash_password(password)

        try:
            self._conn.execute(
                """INSERT INTO users (
                    id, email, user_name, name, password_hash, email_confirmed,
                    access_failed_count, lockout_end, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    user.id,
                    user.email,
                    user.user_name,
                    user.name,
                    user.password_hash,
                    int(user.email_confirmed),
                    user.access_failed_count,
                    _lockout_to_db(user),
                    isodatetime.to_timestamp(user.created_at),
                )
            )
        except sqlite3.IntegrityError as e:
            raise ConflictError(EMAIL_IN_USE, {"email": user.email}) from e
        except sqlite3.Error as e:
            raise StoreError("Failed to create user", {"cause": str(e)}) from e

        self._commit()
        logger.debug("User row inserted: %s", user.id)

    def verify_password(self, user: User, password: str) -> bool:
        return service.verify_password(password, user.password_hash)

    def change_password(self, user: User, current: str, new: str) -> None:
        """
        Replace the password of user after checking the current one.

        Raises:
            AuthenticationError: If current does not match
            WeakPassword: If new fails the credential policy
            StoreError: On database failure
        """
        if not self.verify_password(user, current):
            raise AuthenticationError(WRONG_CURRENT_PASSWORD)
        validate_password(new)

        new_hash = service.hash_password(new)
        try:
            self._conn.execute(
                "UPDATE users SET password_hash = ? WHERE id = ?",
                (new_hash, user.id)
            )
        except sqlite3.Error as e:
            raise StoreError("Failed to change password", {"cause": str(e)}) from e

        self._commit()
        user.password_hash = new_hash

    def assign_role(self, user: User, role_name: str) -> None:
        """
        Raises:
            ResourceNotFound: If the role does not exist
            ConflictError: If user already has the role
            StoreError: On database failure
        """
        try:
            role = self._conn.execute(
                "SELECT name FROM roles WHERE name = ?", (role_name,)
            ).fetchone()
            if role is None:
                raise ResourceNotFound(f"Role '{role_name}' not found", {"role": role_name})

            self._conn.execute(
                "INSERT INTO user_roles (user_id, role_name) VALUES (?, ?)",
                (user.id, role_name)
            )
        except sqlite3.IntegrityError as e:
            raise ConflictError(
                f"User already in role '{role_name}'",
                {"user_id": user.id, "role": role_name}
            ) from e
        except sqlite3.Error as e:
            raise StoreError("Failed to assign role", {"cause": str(e)}) from e

        self._commit()

    def is_in_role(self, user: User, role_name: str) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM user_roles WHERE user_id = ? AND role_name = ?",
            (user.id, role_name)
        ).fetchone()
        return row is not None

    def save_lockout(self, user: User) -> None:
        try:
            self._conn.execute(
                "UPDATE users SET access_failed_count = ?, lockout_end = ? WHERE id = ?",
                (user.access_failed_count, _lockout_to_db(user), user.id)
            )
        except sqlite3.Error as e:
            raise StoreError("Failed to update lockout state", {"cause": str(e)}) from e
        self._commit()

    # ------------------------------------------------------------------
    # Roles
    # ------------------------------------------------------------------

    def ensure_role(self, role_name: str) -> bool:
        """Create role if missing. Returns True if it was created."""
        cursor = self._conn.execute(
            "INSERT OR IGNORE INTO roles (name) VALUES (?)", (role_name,)
        )
        self._commit()
        return cursor.rowcount == 1


def _lockout_to_db(user: User) -> str | None:
    if user.lockout_end is None:
        return None
    return isodatetime.to_timestamp(user.lockout_end)


def _row_to_user(row: sqlite3.Row) -> User:
    """Rebuild a User through its validating constructor."""
    user = User(
        row["email"],
        row["name"],
        email_confirmed=bool(row["email_confirmed"]),
        user_id=row["id"],
    )
    user.password_hash = row["password_hash"]
    user.access_failed_count = row["access_failed_count"]
    if row["lockout_end"]:
        user.lockout_end = isodatetime.to_datetime(row["lockout_end"])
    user.created_at = isodatetime.to_datetime(row["created_at"])
    return user
