"""Authentication Pydantic schemas for API validation."""

from .auth import (
    AuditRecordResponse,
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    TokenPayload,
    UserInfo,
)

__all__ = [
    "AuditRecordResponse",
    "ChangePasswordRequest",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "RegisterRequest",
    "TokenPayload",
    "UserInfo",
]
