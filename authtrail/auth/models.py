"""User domain entity.

A User can only be built through its validating constructor. Email and login
name are always identical: both are assigned together by ``set_email``.
Lockout state (failure counter and lockout end) lives on the entity; the
credential store persists it.
"""

from datetime import datetime, timedelta

from ..utils import isodatetime, uid
from .validators import validate_email, validate_name


class User:
    """An account: identity, display name, credential hash and lockout state."""

    def __init__(
        self,
        email: str,
        name: str,
        email_confirmed: bool = False,
        user_id: str | None = None,
    ):
        self.id = user_id or uid.generate_uuid()
        self.email_confirmed = email_confirmed
        self.password_hash: str | None = None
        self.access_failed_count = 0
        self.lockout_end: datetime | None = None
        self.created_at = isodatetime.utcnow()
        self.set_email(email)
        self.set_name(name)

    @property
    def email(self) -> str:
        return self._email

    @property
    def user_name(self) -> str:
        return self._user_name

    @property
    def name(self) -> str:
        return self._name

    def set_email(self, email: str) -> None:
        """Validate and assign email; the login name follows it."""
        validate_email(email)
        self._email = email
        self._user_name = email

    def set_name(self, name: str) -> None:
        """Validate and assign the display name."""
        validate_name(name)
        self._name = name

    # ------------------------------------------------------------------
    # Lockout
    # ------------------------------------------------------------------

    def is_locked_out(self, now: datetime | None = None) -> bool:
        """True while lockout_end lies in the future."""
        if self.lockout_end is None:
            return False
        now = now or isodatetime.utcnow()
        return self.lockout_end > now

    def register_failed_attempt(
        self,
        max_attempts: int,
        lockout_duration: timedelta,
        now: datetime | None = None,
    ) -> bool:
        """
        Count a failed password check.

        Reaching max_attempts locks the account for lockout_duration and
        resets the counter.

        Returns:
            True if this attempt triggered a lockout
        """
        now = now or isodatetime.utcnow()
        self.access_failed_count += 1
        if self.access_failed_count >= max_attempts:
            self.lockout_end = now + lockout_duration
            self.access_failed_count = 0
            return True
        return False

    def reset_failed_attempts(self) -> None:
        self.access_failed_count = 0
        self.lockout_end = None

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, email={self.email!r})"
