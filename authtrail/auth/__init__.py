"""Authentication module for authtrail.

- validators: e-mail, name and password rules
- models: the User entity
- schemas: request/response/token schemas
- token: JWT issuance and verification
- flows: register, login and change-password orchestration
- decorators: resolves the caller from the Authorization header

Endpoints (see api):
- POST /auth/register - Create an account
- POST /auth/login - Authenticate and return JWT token
- POST /auth/change-password - Change the caller's password
- POST /auth/list-events - List audit records
"""

from . import schemas, token, validators

__all__ = ["schemas", "token", "validators"]
