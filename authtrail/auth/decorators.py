"""Authentication decorators for protected endpoints.

- @auth_required - rejects the request unless a valid Bearer token is sent
- @resolve_caller - resolves the caller when possible, leaving the decision
  (and its audit) to the endpoint

Both store the caller in flask.g:
- g.user_id: User ID (UUID) or None
- g.login_name: Login name from the token or None
"""

import logging
from functools import wraps

import jwt
from flask import g, request
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import AuthorizationError
from . import token
from .schemas import TokenPayload

logger = logging.getLogger(__name__)


def _authenticate_request() -> TokenPayload:
    """
    Verify the Bearer token of the current request.

    Raises:
        AuthorizationError: If the header is missing, malformed, or the token
                            fails verification
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header:
        raise AuthorizationError("Authentication required", {"code": "missing_auth"})

    parts = auth_header.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthorizationError(
            "Invalid authorization header format",
            {"expected": "Authorization: Bearer <token>"}
        )

    try:
        return token.validate_access_token(parts[1])
    except jwt.ExpiredSignatureError:
        logger.warning("JWT token expired")
        raise AuthorizationError("Token has expired", {"code": "token_expired"})
    except (jwt.InvalidTokenError, PydanticValidationError) as e:
        logger.warning(f"Invalid JWT token: {e}")
        raise AuthorizationError("Invalid token", {"code": "invalid_token"})


def _store_caller(payload: TokenPayload | None) -> None:
    g.user_id = payload.sub if payload else None
    g.login_name = payload.username if payload else None


def auth_required(f):
    """
    Decorator to require a valid JWT for endpoint access.

    Raises:
        AuthorizationError: If no valid token was provided
    """
    @wraps(f)
    def wrapper(*args, **kwargs):
        _store_caller(_authenticate_request())
        return f(*args, **kwargs)

    return wrapper


def resolve_caller(f):
    """
    Decorator that identifies the caller without rejecting anonymous requests.

    Used where the endpoint itself must record the unauthenticated attempt.
    """
    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            payload = _authenticate_request()
        except AuthorizationError as e:
            logger.debug(f"Caller not authenticated: {e.message}")
            payload = None
        _store_caller(payload)
        return f(*args, **kwargs)

    return wrapper
