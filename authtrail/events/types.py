"""Domain events.

A domain event is an immutable fact about an authentication attempt. The set
of kinds is closed: EventKind enumerates it and every event class declares
its kind, which is what the bus dispatches on.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from ..utils import isodatetime


class EventKind(Enum):
    REGISTRATION = "RegistrationEvent"
    LOGIN = "LoginEvent"
    PASSWORD_CHANGE = "PasswordChangeEvent"


@dataclass(frozen=True, kw_only=True)
class RegistrationEvent:
    """Attempt to register an account."""

    kind = EventKind.REGISTRATION

    email: str | None
    name: str | None
    description: str
    success: bool
    timestamp: datetime = field(default_factory=isodatetime.utcnow)


@dataclass(frozen=True, kw_only=True)
class LoginEvent:
    """Attempt to log in."""

    kind = EventKind.LOGIN

    email: str | None
    description: str
    success: bool
    timestamp: datetime = field(default_factory=isodatetime.utcnow)


@dataclass(frozen=True, kw_only=True)
class PasswordChangeEvent:
    """Attempt to change a password. email is None when the caller was anonymous."""

    kind = EventKind.PASSWORD_CHANGE

    email: str | None
    description: str
    success: bool
    timestamp: datetime = field(default_factory=isodatetime.utcnow)


DomainEvent = RegistrationEvent | LoginEvent | PasswordChangeEvent
