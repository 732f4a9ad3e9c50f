"""Authentication flows: register, login, change password.

Each flow is a single pass with no retries. It validates input, performs the
store side effect, publishes exactly one domain event describing the outcome
(success or failure) and then returns a FlowResult. Expected failures are
never raised: the caller inspects ``FlowResult.outcome``.

The event is published after the side effect was attempted and before the
flow returns, so a returned outcome has always been audited. If the audit
write itself fails the flow reports STORE_FAILURE.

Collaborators are passed in explicitly:
- users: CredentialStore
- bus: EventBus (audit handler subscribed)
- context: CorrelationContext of the current request
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from functools import wraps
from typing import Any, Callable

from pydantic import ValidationError as PydanticValidationError

from ..config import settings
from ..correlation import CorrelationContext
from ..events.bus import EventBus
from ..events.types import LoginEvent, PasswordChangeEvent, RegistrationEvent
from ..exceptions import (
    AuthenticationError,
    AuthTrailError,
    ConflictError,
    DomainRuleViolation,
    StoreError,
)
from ..interfaces import AuditStore, CredentialStore
from . import token
from .models import User
from .schemas import (
    AuditRecordResponse,
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    UserInfo,
)
from .validators import validate_password

logger = logging.getLogger(__name__)

# Messages returned to callers
EMAIL_IN_USE = "E-mail já está em uso."
INVALID_CREDENTIALS = "Usuário ou senha inválidos."
NOT_AUTHENTICATED = "Usuário não autenticado."
USER_NOT_FOUND = "Usuário não encontrado."
WRONG_CURRENT_PASSWORD = "Senha atual incorreta."
PASSWORD_CHANGED = "Senha alterada com sucesso!"
INVALID_REQUEST = "Invalid request data"
INTERNAL_ERROR = "An internal error occurred"

# Audit descriptions
EVENT_EMAIL_IN_USE = "E-mail já está em uso"
EVENT_REGISTERED = "Usuário Criado com sucesso"
EVENT_ROLE_FAILED = "Falha"
EVENT_EXCEPTION = "Falha com exceção"
EVENT_LOGGED_IN = "Usuário logado com sucesso"
EVENT_LOCKED_OUT = "Conta bloqueada temporariamente."
EVENT_INVALID_PARAMETERS = "Parâmetros inválidos"


class Outcome(Enum):
    OK = "ok"
    VALIDATION_ERROR = "validation_error"
    DOMAIN_RULE_VIOLATION = "domain_rule_violation"
    AUTHENTICATION_FAILURE = "authentication_failure"
    AUTHORIZATION_FAILURE = "authorization_failure"
    CONFLICT = "conflict"
    STORE_FAILURE = "store_failure"


@dataclass(frozen=True)
class FlowResult:
    """Outcome of a flow: payload on success, message/details on failure."""

    outcome: Outcome
    message: str
    payload: Any = None
    details: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK

    @classmethod
    def success(cls, message: str = "", payload: Any = None) -> "FlowResult":
        return cls(Outcome.OK, message, payload)

    @classmethod
    def failure(cls, outcome: Outcome, message: str, details: dict | None = None) -> "FlowResult":
        return cls(outcome, message, details=details or {})


class _RoleAssignmentFailed(Exception):
    def __init__(self, cause: AuthTrailError):
        super().__init__(cause.message)
        self.cause = cause


def _store_failure_boundary(flow: Callable[..., FlowResult]) -> Callable[..., FlowResult]:
    """Turn a StoreError escaping the flow (e.g. from the audit write) into STORE_FAILURE."""
    @wraps(flow)
    def wrapper(*args, **kwargs) -> FlowResult:
        try:
            return flow(*args, **kwargs)
        except StoreError as e:
            logger.error("%s aborted by store failure: %s", flow.__name__, e.message)
            return FlowResult.failure(Outcome.STORE_FAILURE, INTERNAL_ERROR)

    return wrapper


def _internal_failure(publish: Callable[[str, bool], None], error: Exception) -> FlowResult:
    logger.error("Store failure: %s", error)
    publish(EVENT_EXCEPTION, False)
    return FlowResult.failure(Outcome.STORE_FAILURE, INTERNAL_ERROR)


# ============================================================================
# Register
# ============================================================================


@_store_failure_boundary
def register(
    data: RegisterRequest,
    *,
    users: CredentialStore,
    bus: EventBus,
    context: CorrelationContext,
) -> FlowResult:
    """
    Create an account and give it the default role.

    Credential creation and role assignment run inside users.atomic(): if the
    role cannot be assigned the account is rolled back with it.
    """
    def publish(description: str, success: bool) -> None:
        bus.publish(
            RegistrationEvent(email=data.email, name=data.name, description=description, success=success),
            context,
        )

    try:
        user = User(data.email, data.name)
        validate_password(data.password)
    except DomainRuleViolation as e:
        logger.warning("Registration rejected for %s: %s", data.email, e.message)
        publish(e.message, False)
        return FlowResult.failure(Outcome.DOMAIN_RULE_VIOLATION, e.message, e.details)

    role = settings.default_role
    email_taken = False
    try:
        email_taken = users.find_by_email(user.email) is not None
        if not email_taken:
            with users.atomic():
                users.create(user, data.password)
                try:
                    users.assign_role(user, role)
                except AuthTrailError as e:
                    raise _RoleAssignmentFailed(e) from e
    except ConflictError:
        # Lost a race against a concurrent registration of the same e-mail
        email_taken = True
    except DomainRuleViolation as e:
        publish(e.message, False)
        return FlowResult.failure(Outcome.DOMAIN_RULE_VIOLATION, e.message, e.details)
    except _RoleAssignmentFailed as e:
        logger.error("Role '%s' could not be assigned to %s: %s", role, user.email, e.cause.message)
        publish(EVENT_ROLE_FAILED, False)
        return FlowResult.failure(Outcome.STORE_FAILURE, INTERNAL_ERROR)
    except StoreError as e:
        return _internal_failure(publish, e)

    if email_taken:
        logger.warning("Registration rejected, e-mail already in use: %s", user.email)
        publish(EVENT_EMAIL_IN_USE, False)
        return FlowResult.failure(Outcome.CONFLICT, EMAIL_IN_USE, {"email": user.email})

    logger.info("User registered: %s", user.email)
    publish(EVENT_REGISTERED, True)
    return FlowResult.success(
        f"Usuário criado com sucesso e associado à role {role}!",
        UserInfo(id=user.id, user_name=user.user_name, email=user.email, name=user.name),
    )


# ============================================================================
# Login
# ============================================================================


def _invalid_credentials() -> FlowResult:
    return FlowResult.failure(Outcome.AUTHENTICATION_FAILURE, INVALID_CREDENTIALS)


def _attempted_email(payload: Any) -> str | None:
    """The e-mail named by a malformed login body, if it names one."""
    if not isinstance(payload, dict):
        return None
    email = payload.get("email")
    if isinstance(email, str) and email.strip():
        return email
    return None


@_store_failure_boundary
def login(
    payload: Any,
    *,
    users: CredentialStore,
    bus: EventBus,
    context: CorrelationContext,
) -> FlowResult:
    """
    Authenticate by login name and password and issue a token.

    Unknown login, locked account and wrong password all return the same
    INVALID_CREDENTIALS message; only the audit description differs.

    Args:
        payload: Raw request body or a LoginRequest. A malformed body is
                 audited when it still names an e-mail.
    """
    email = None

    def publish(description: str, success: bool) -> None:
        bus.publish(
            LoginEvent(email=email, description=description, success=success),
            context,
        )

    try:
        data = LoginRequest.model_validate(payload if payload is not None else {})
    except PydanticValidationError as e:
        email = _attempted_email(payload)
        if email is not None:
            logger.warning("Malformed login attempt for: %s", email)
            publish(EVENT_INVALID_PARAMETERS, False)
        return FlowResult.failure(
            Outcome.VALIDATION_ERROR,
            INVALID_REQUEST,
            {"errors": json.loads(e.json(include_url=False))},
        )

    email = data.email
    try:
        user = users.find_by_login(data.email)
    except StoreError as e:
        return _internal_failure(publish, e)

    if user is None:
        logger.warning("Failed login attempt for unknown login: %s", data.email)
        publish(INVALID_CREDENTIALS, False)
        return _invalid_credentials()

    if user.is_locked_out():
        logger.warning("Login attempt on locked account: %s", user.email)
        publish(EVENT_LOCKED_OUT, False)
        return _invalid_credentials()

    locked_now = False
    try:
        verified = users.verify_password(user, data.password)
        if not verified:
            locked_now = user.register_failed_attempt(
                settings.lockout_max_failed_attempts,
                timedelta(minutes=settings.lockout_duration_minutes),
            )
            users.save_lockout(user)
        elif user.access_failed_count or user.lockout_end is not None:
            user.reset_failed_attempts()
            users.save_lockout(user)
    except StoreError as e:
        return _internal_failure(publish, e)

    if not verified:
        logger.warning("Failed login attempt for: %s", user.email)
        description = INVALID_CREDENTIALS
        if locked_now:
            description = f"{INVALID_CREDENTIALS} {EVENT_LOCKED_OUT}"
        publish(description, False)
        return _invalid_credentials()

    issued = token.generate_access_token(user)
    logger.info("Successful login: %s", user.email)
    publish(EVENT_LOGGED_IN, True)
    return FlowResult.success(
        EVENT_LOGGED_IN,
        LoginResponse(
            token=issued.token,
            user=UserInfo(id=user.id, user_name=user.user_name, email=user.email, name=user.name),
            expiration=issued.expires_at,
        ),
    )


# ============================================================================
# Change password
# ============================================================================


@_store_failure_boundary
def change_password(
    login_name: str | None,
    payload: Any,
    *,
    users: CredentialStore,
    bus: EventBus,
    context: CorrelationContext,
) -> FlowResult:
    """
    Change the password of the authenticated caller.

    Args:
        login_name: Login name from the verified token, None if anonymous
        payload: Raw request body, validated here so that malformed input
                 is audited like every other exit
    """
    def publish(description: str, success: bool) -> None:
        bus.publish(
            PasswordChangeEvent(email=login_name, description=description, success=success),
            context,
        )

    if not login_name:
        logger.warning("Password change attempted without authentication")
        publish(NOT_AUTHENTICATED, False)
        return FlowResult.failure(Outcome.AUTHORIZATION_FAILURE, NOT_AUTHENTICATED)

    try:
        user = users.find_by_login(login_name)
    except StoreError as e:
        return _internal_failure(publish, e)

    if user is None:
        logger.warning("Password change for unknown user: %s", login_name)
        publish(USER_NOT_FOUND, False)
        return FlowResult.failure(Outcome.AUTHORIZATION_FAILURE, USER_NOT_FOUND)

    try:
        data = ChangePasswordRequest.model_validate(payload if payload is not None else {})
    except PydanticValidationError as e:
        publish(EVENT_INVALID_PARAMETERS, False)
        return FlowResult.failure(
            Outcome.VALIDATION_ERROR,
            INVALID_REQUEST,
            {"errors": json.loads(e.json(include_url=False))},
        )

    try:
        users.change_password(user, data.current_password, data.new_password)
    except AuthenticationError:
        logger.warning("Wrong current password for: %s", user.email)
        publish(WRONG_CURRENT_PASSWORD, False)
        return FlowResult.failure(Outcome.DOMAIN_RULE_VIOLATION, WRONG_CURRENT_PASSWORD)
    except DomainRuleViolation as e:
        publish(e.message, False)
        return FlowResult.failure(Outcome.DOMAIN_RULE_VIOLATION, e.message, e.details)
    except StoreError as e:
        return _internal_failure(publish, e)

    logger.info("Password changed for: %s", user.email)
    publish(PASSWORD_CHANGED, True)
    return FlowResult.success(PASSWORD_CHANGED)


# ============================================================================
# Audit listing
# ============================================================================


def list_events(audit: AuditStore, correlation_id: str | None = None) -> FlowResult:
    """All audit records in insertion order, optionally for one correlation id."""
    if correlation_id:
        records = audit.list_by_correlation_id(correlation_id)
    else:
        records = audit.list_all()
    return FlowResult.success(
        payload=[
            AuditRecordResponse(
                id=r.id,
                name=r.name,
                timestamp=r.timestamp,
                description=r.description,
                correlation_id=r.correlation_id,
            )
            for r in records
        ],
    )
