"""JWT token service.

Tokens are HS256-signed and stateless: there is no session table and no
revocation list, so expiry is the only way a token stops being valid.

Claims:
- sub: user id
- username: login name (always equal to the e-mail)
- email, name: user e-mail and display name
- iss, aud: configured issuer and audience
- iat, exp: issue and expiry time (unix seconds)
- jti: random token id
"""

import logging
from datetime import datetime, timedelta
from typing import NamedTuple

import jwt

from ..config import MIN_SIGNING_KEY_LENGTH, settings
from ..exceptions import ConfigurationError
from ..utils import isodatetime, uid
from .models import User
from .schemas import TokenPayload

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
REQUIRED_CLAIMS = ["sub", "iss", "aud", "iat", "exp"]


class IssuedToken(NamedTuple):
    token: str
    issued_at: datetime
    expires_at: datetime


def require_signing_key() -> str:
    """
    Return the configured signing key, refusing keys that are too short.

    Called once at application startup; a bad key stops the process from
    serving traffic.

    Raises:
        ConfigurationError: If the key is missing or shorter than 32 characters
    """
    key = settings.jwt_secret_key
    if key is None or len(key) < MIN_SIGNING_KEY_LENGTH:
        message = (
            "JWT key missing or invalid. The key must have at least "
            f"{MIN_SIGNING_KEY_LENGTH} characters."
        )
        logger.error(message)
        raise ConfigurationError(message)
    return key


def generate_access_token(user: User) -> IssuedToken:
    """
    Issue a signed access token for user.

    Args:
        user: Authenticated user

    Returns:
        IssuedToken with the encoded token and its issue/expiry instants.
        expires_at - issued_at equals the configured token duration.
    """
    issued_at = isodatetime.utcnow().replace(microsecond=0)
    expires_at = issued_at + timedelta(minutes=settings.jwt_duration_minutes)

    payload = {
        "sub": user.id,
        "username": user.user_name,
        "email": user.email,
        "name": user.name,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": isodatetime.to_unix(issued_at),
        "exp": isodatetime.to_unix(expires_at),
        "jti": uid.generate_uuid(),
    }

    token = jwt.encode(payload, require_signing_key(), algorithm=ALGORITHM)
    return IssuedToken(token, issued_at, expires_at)


def validate_access_token(token: str) -> TokenPayload:
    """
    Verify signature, issuer, audience and expiry of a token.

    A leeway of jwt_clock_skew_seconds absorbs clock drift between issuer
    and verifier.

    Raises:
        jwt.ExpiredSignatureError: If the token has expired
        jwt.InvalidTokenError: For any other verification failure
    """
    payload = jwt.decode(
        token,
        require_signing_key(),
        algorithms=[ALGORITHM],
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
        leeway=timedelta(seconds=settings.jwt_clock_skew_seconds),
        options={"require": REQUIRED_CLAIMS},
    )
    return TokenPayload(**payload)
