"""Authentication API endpoints for authtrail.

- POST /auth/register - Create an account with the default role
- POST /auth/login - Authenticate and return a JWT token
- POST /auth/change-password - Change the caller's password (Bearer token)
- POST /auth/list-events - List audit records in insertion order
- GET  /auth/me - Current user info (Bearer token)

Endpoints are thin: they open a Core for the request, build the request's
event bus, run the flow and translate the FlowResult into a response. Failed
outcomes are raised as authtrail exceptions and rendered by the error
handlers registered in main.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from flask import Blueprint, g, jsonify, request

from ..api.validation import validate_request
from ..correlation import current_context
from ..db import Core, get_core
from ..events.bus import build_event_bus
from ..exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainRuleViolation,
    StoreError,
    ValidationError,
)
from . import flows
from .decorators import auth_required, resolve_caller
from .flows import FlowResult, Outcome
from .schemas import MessageResponse, RegisterRequest, UserInfo

logger = logging.getLogger(__name__)


auth_bp = Blueprint("auth", __name__)


_OUTCOME_ERRORS = {
    Outcome.VALIDATION_ERROR: ValidationError,
    Outcome.DOMAIN_RULE_VIOLATION: DomainRuleViolation,
    Outcome.AUTHENTICATION_FAILURE: AuthenticationError,
    Outcome.AUTHORIZATION_FAILURE: AuthorizationError,
    Outcome.CONFLICT: ConflictError,
    Outcome.STORE_FAILURE: StoreError,
}


def _raise_for_outcome(result: FlowResult) -> None:
    """Raise the exception matching a failed result; no-op on success."""
    if result.ok:
        return
    raise _OUTCOME_ERRORS[result.outcome](result.message, result.details)


@contextmanager
def _request_core() -> Iterator[Core]:
    core = get_core()
    try:
        yield core
    finally:
        core.close()


@auth_bp.route("/auth/register", methods=["POST"])
@validate_request
def register(data: RegisterRequest):
    """
    Register a new account.

    Example request:
    ```json
    {"email": "joaosilva1@x.com", "nome": "Joao Silva", "password": "Abcdef@1"}
    ```

    Example response:
    ```json
    {"message": "Usuário criado com sucesso e associado à role Usuario!"}
    ```
    """
    with _request_core() as core:
        result = flows.register(
            data,
            users=core.users,
            bus=build_event_bus(core.audit),
            context=current_context(),
        )
    _raise_for_outcome(result)
    return jsonify(MessageResponse(message=result.message).model_dump()), 200


@auth_bp.route("/auth/login", methods=["POST"])
def login():
    """
    Authenticate and return a JWT token.

    The body is validated by the flow so that a malformed attempt naming an
    e-mail is still audited.

    Example request:
    ```json
    {"email": "joaosilva1@x.com", "password": "Abcdef@1"}
    ```

    Example response:
    ```json
    {
        "token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
        "user": {
            "id": "123e4567-e89b-12d3-a456-426614174000",
            "userName": "joaosilva1@x.com",
            "email": "joaosilva1@x.com",
            "nome": "Joao Silva"
        },
        "expiration": "2025-06-01T18:30:00Z"
    }
    ```
    """
    with _request_core() as core:
        result = flows.login(
            request.get_json(silent=True),
            users=core.users,
            bus=build_event_bus(core.audit),
            context=current_context(),
        )
    _raise_for_outcome(result)
    return jsonify(result.payload.model_dump(mode="json", by_alias=True)), 200


@auth_bp.route("/auth/change-password", methods=["POST"])
@resolve_caller
def change_password():
    """
    Change the password of the authenticated caller.

    Requires: Authorization: Bearer <token>

    Example request:
    ```json
    {"senhaAtual": "Abcdef@1", "novaSenha": "Novasenha@2", "confirmaNovaSenha": "Novasenha@2"}
    ```
    """
    with _request_core() as core:
        result = flows.change_password(
            g.login_name,
            request.get_json(silent=True),
            users=core.users,
            bus=build_event_bus(core.audit),
            context=current_context(),
        )
    _raise_for_outcome(result)
    return jsonify(MessageResponse(message=result.message).model_dump()), 200


@auth_bp.route("/auth/list-events", methods=["POST"])
def list_events():
    """
    List audit records in insertion order.

    Optional query parameter ``correlation_id`` restricts the listing to the
    records produced by one request.
    """
    with _request_core() as core:
        result = flows.list_events(core.audit, request.args.get("correlation_id"))
    return jsonify([record.model_dump(mode="json") for record in result.payload]), 200


@auth_bp.route("/auth/me", methods=["GET"])
@auth_required
def get_current_user():
    """Info of the user identified by the Bearer token."""
    with _request_core() as core:
        user = core.users.find_by_login(g.login_name)
    if user is None:
        raise AuthorizationError("User not found", {"user_id": g.user_id})
    info = UserInfo(id=user.id, user_name=user.user_name, email=user.email, name=user.name)
    return jsonify(info.model_dump(by_alias=True)), 200
