"""Store capabilities consumed by the authentication flows and audit handler.

The flows only depend on these Protocols. ``authtrail.db.users`` and
``authtrail.db.audit`` provide the sqlite implementations.
"""

from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Protocol, Sequence

if TYPE_CHECKING:
    from .auth.models import User
    from .events.audit import AuditRecord


class CredentialStore(Protocol):
    """User persistence and password verification."""

    def find_by_login(self, login_name: str) -> "User | None": ...

    def find_by_email(self, email: str) -> "User | None": ...

    def create(self, user: "User", password: str) -> None:
        """Persist user with a hash of password.

        Raises ConflictError on duplicate email, WeakPassword on policy failure.
        """

    def verify_password(self, user: "User", password: str) -> bool: ...

    def change_password(self, user: "User", current: str, new: str) -> None:
        """Raises AuthenticationError on wrong current, WeakPassword on policy failure."""

    def assign_role(self, user: "User", role_name: str) -> None: ...

    def is_in_role(self, user: "User", role_name: str) -> bool: ...

    def save_lockout(self, user: "User") -> None:
        """Persist the failure counter and lockout end of user."""

    def atomic(self) -> AbstractContextManager["CredentialStore"]:
        """Group several writes into one unit: all persist or none do."""


class AuditStore(Protocol):
    """Append-only audit record storage."""

    def append(self, record: "AuditRecord") -> "AuditRecord":
        """Persist record and return it with its storage-assigned id."""

    def list_all(self) -> Sequence["AuditRecord"]:
        """All records in insertion order."""

    def list_by_correlation_id(self, correlation_id: str) -> Sequence["AuditRecord"]:
        """Records produced while serving one request, in insertion order."""
