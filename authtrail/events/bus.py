"""In-process event bus (mediator).

Producers publish domain events; the bus fans each event out to the handlers
subscribed to its kind, in subscription order, and returns once every
handler has run. Nothing is queued or retried and delivery never leaves the
process. Handlers are not isolated from each other: an exception raised by a
handler propagates to the publisher and the remaining handlers are skipped.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from .types import DomainEvent, EventKind

if TYPE_CHECKING:
    from ..correlation import CorrelationContext
    from ..interfaces import AuditStore

logger = logging.getLogger(__name__)

Handler = Callable[[DomainEvent, "CorrelationContext"], None]


class EventBus:
    """Synchronous fan-out over the closed set of EventKind values."""

    def __init__(self) -> None:
        self._handlers: dict[EventKind, list[Handler]] = {kind: [] for kind in EventKind}

    def subscribe(self, kind: EventKind, handler: Handler) -> None:
        """Register handler for kind. Handlers run in registration order."""
        self._handlers[kind].append(handler)

    def handlers_for(self, kind: EventKind) -> list[Handler]:
        return list(self._handlers[kind])

    def publish(self, event: DomainEvent, context: CorrelationContext) -> None:
        """
        Dispatch event to every handler registered for its kind.

        Args:
            event: Domain event to deliver
            context: Correlation context of the current request

        Raises:
            Whatever a handler raises; later handlers do not run.
        """
        handlers = self._handlers[event.kind]
        logger.debug(
            "Publishing %s to %d handler(s) (success=%s)",
            event.kind.value, len(handlers), event.success,
        )
        for handler in handlers:
            handler(event, context)


def build_event_bus(audit_store: AuditStore) -> EventBus:
    """Bus for one request, with the audit handler subscribed to every kind."""
    from .audit import AuditHandler

    bus = EventBus()
    audit_handler = AuditHandler(audit_store)
    for kind in EventKind:
        bus.subscribe(kind, audit_handler)
    return bus
