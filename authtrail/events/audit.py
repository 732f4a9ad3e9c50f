"""Audit handler: turns every published domain event into an audit record."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from .types import DomainEvent, LoginEvent, PasswordChangeEvent, RegistrationEvent

if TYPE_CHECKING:
    from ..correlation import CorrelationContext
    from ..interfaces import AuditStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditRecord:
    """Durable projection of a domain event. id is None until stored."""

    name: str
    timestamp: datetime
    description: str
    correlation_id: str | None = None
    id: int | None = None


def _outcome(success: bool) -> str:
    return "Sucesso" if success else "Falha"


def describe(event: DomainEvent) -> str:
    """Human readable description embedding the subject and the outcome."""
    match event:
        case RegistrationEvent():
            return (
                f"Tentativa de Registar Usuário com Nome: {event.name} e Email: {event.email} "
                f"realizado com {_outcome(event.success)}. Descricao: {event.description}"
            )
        case LoginEvent():
            return (
                f"Tentativa de Login do Usuário com Email: {event.email} "
                f"realizado com {_outcome(event.success)}. Descricao: {event.description}"
            )
        case PasswordChangeEvent():
            return (
                f"Tentativa de Alterar senha do Usuário com Email: {event.email} "
                f"realizado com {_outcome(event.success)}. Descricao: {event.description}"
            )
    raise TypeError(f"Unsupported event type: {type(event).__name__}")


class AuditHandler:
    """Subscriber that appends one AuditRecord per event.

    Store failures are not caught here: they surface from EventBus.publish.
    """

    def __init__(self, store: AuditStore):
        self._store = store

    def __call__(self, event: DomainEvent, context: CorrelationContext) -> AuditRecord:
        record = AuditRecord(
            name=event.kind.value,
            timestamp=event.timestamp,
            description=describe(event),
            correlation_id=context.correlation_id,
        )
        stored = self._store.append(record)
        logger.info("Audit record %s stored: %s", stored.id, stored.name)
        return stored
