"""Pydantic schemas for authentication requests, responses and token claims.

Request field names follow the public JSON contract (``nome``, ``senhaAtual``,
...); Python attribute names are English and mapped through aliases.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ============================================================================
# Requests
# ============================================================================


class RegisterRequest(BaseModel):
    """Body of POST /auth/register."""

    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., description="E-mail, also used as login name")
    name: str = Field(..., alias="nome", description="Display name")
    password: str = Field(..., description="Plain text password, checked against the credential policy")


class LoginRequest(BaseModel):
    """Body of POST /auth/login."""

    email: str = Field(..., description="Login name (e-mail)")
    password: str = Field(..., description="Plain text password")


class ChangePasswordRequest(BaseModel):
    """Body of POST /auth/change-password."""

    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., alias="senhaAtual")
    new_password: str = Field(..., alias="novaSenha", min_length=6, max_length=100)
    confirm_new_password: str = Field(..., alias="confirmaNovaSenha")

    @model_validator(mode="after")
    def confirmation_matches(self) -> "ChangePasswordRequest":
        if self.new_password != self.confirm_new_password:
            raise ValueError("A nova senha e a confirmação não coincidem.")
        return self


# ============================================================================
# Responses
# ============================================================================


class UserInfo(BaseModel):
    """Public view of a user returned after login."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_name: str = Field(..., serialization_alias="userName")
    email: str
    name: str = Field(..., serialization_alias="nome")


class LoginResponse(BaseModel):
    """Successful login payload."""

    token: str
    user: UserInfo
    expiration: datetime


class MessageResponse(BaseModel):
    message: str


class AuditRecordResponse(BaseModel):
    """One persisted audit record."""

    id: int
    name: str
    timestamp: datetime
    description: str
    correlation_id: str | None = None


# ============================================================================
# Token
# ============================================================================


class TokenPayload(BaseModel):
    """Decoded and verified JWT claims."""

    sub: str
    username: str
    email: str
    name: str
    iss: str
    aud: str
    iat: int
    exp: int
    jti: str
