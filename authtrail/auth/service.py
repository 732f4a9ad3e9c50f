"""Password hashing helpers (bcrypt).

The work factor comes from settings.bcrypt_work_factor. bcrypt only looks at
the first 72 bytes of a password, so longer inputs are cut to that size
before hashing and before verification.
"""

import bcrypt

from ..config import settings

BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a password with a fresh salt. Returns the 60 character bcrypt hash."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_work_factor)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password(password: str, hashed: str | None) -> bool:
    """Check password against a bcrypt hash. A missing hash never matches."""
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_encode(password), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash in storage
        return False
