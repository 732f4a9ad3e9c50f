"""Identifier generation.

This is the ONLY module that should import uuid4. User ids, token ids and
generated correlation ids all come from here.
"""

from uuid import uuid4


def generate_uuid() -> str:
    """Generate a random UUID v4 as a string."""
    return str(uuid4())


def generate_correlation_id() -> str:
    """Generate an identifier for a request that arrived without one."""
    return generate_uuid()
