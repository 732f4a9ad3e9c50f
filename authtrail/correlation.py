"""Correlation id propagation.

Every request carries a correlation id: the inbound ``x-correlation-id``
header when present, a freshly generated UUID otherwise. The id is held in a
CorrelationContext created in ``before_request``, stored on the
request-scoped ``flask.g``, passed explicitly to flows, the event bus and
its handlers, and copied onto the response in ``after_request``.

Log records get a ``correlation_id`` attribute through CorrelationIdFilter
("-" outside of a request).
"""

import logging
from dataclasses import dataclass

from flask import Flask, Response, g, has_request_context, request

from .utils import uid

CORRELATION_ID_HEADER = "x-correlation-id"
NO_CORRELATION_ID = "-"


@dataclass(frozen=True)
class CorrelationContext:
    """Per-request correlation identifier."""

    correlation_id: str

    @classmethod
    def from_header(cls, value: str | None) -> "CorrelationContext":
        """Reuse the inbound header value, or generate one if blank/missing."""
        if value is None or not value.strip():
            return cls(uid.generate_correlation_id())
        return cls(value.strip())


def current_context() -> CorrelationContext:
    """
    Correlation context of the active request.

    Created on first access when the before_request hook did not run
    (e.g. an app without init_app).
    """
    if "correlation" not in g:
        g.correlation = CorrelationContext.from_header(
            request.headers.get(CORRELATION_ID_HEADER)
        )
    return g.correlation


def _start_request() -> None:
    g.correlation = CorrelationContext.from_header(
        request.headers.get(CORRELATION_ID_HEADER)
    )


def _tag_response(response: Response) -> Response:
    response.headers[CORRELATION_ID_HEADER] = current_context().correlation_id
    return response


def init_app(app: Flask) -> None:
    """Register the correlation hooks on app."""
    app.before_request(_start_request)
    app.after_request(_tag_response)


class CorrelationIdFilter(logging.Filter):
    """Adds ``record.correlation_id`` for use in log formats."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context() and "correlation" in g:
            record.correlation_id = g.correlation.correlation_id
        else:
            record.correlation_id = NO_CORRELATION_ID
        return True
