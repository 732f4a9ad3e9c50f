"""Domain events, the in-process event bus and the audit handler."""

from .audit import AuditHandler, AuditRecord
from .bus import EventBus, build_event_bus
from .types import DomainEvent, EventKind, LoginEvent, PasswordChangeEvent, RegistrationEvent

__all__ = [
    "AuditHandler",
    "AuditRecord",
    "DomainEvent",
    "EventBus",
    "EventKind",
    "LoginEvent",
    "PasswordChangeEvent",
    "RegistrationEvent",
    "build_event_bus",
]
