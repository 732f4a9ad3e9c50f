"""Exception hierarchy for authtrail.

Every error carries a human-readable ``message`` and an optional ``details``
dict. Flask error handlers in ``main`` map each class to an HTTP status.
"""


class AuthTrailError(Exception):
    """Base exception for all authtrail errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(AuthTrailError):
    """Malformed input (missing fields, wrong types, mismatched confirmation)."""


class DomainRuleViolation(AuthTrailError):
    """An email, name or password policy rule was broken."""


class InvalidEmail(DomainRuleViolation):
    """Email is empty or does not match the local@domain.tld shape."""


class InvalidName(DomainRuleViolation):
    """Display name is empty or too long."""


class WeakPassword(DomainRuleViolation):
    """Password does not satisfy the credential policy."""


class AuthenticationError(AuthTrailError):
    """Unknown user or wrong password."""


class AuthorizationError(AuthTrailError):
    """Missing or invalid token on a protected operation."""


class ConflictError(AuthTrailError):
    """A uniqueness constraint was violated (e.g. duplicate email)."""


class ResourceNotFound(AuthTrailError):
    """Requested resource does not exist."""


class StoreError(AuthTrailError):
    """Unexpected failure from the credential or audit store."""


class ConfigurationError(AuthTrailError):
    """Invalid configuration detected at startup."""
