"""Configuration management using pydantic-settings."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Minimum length of the symmetric JWT signing key
MIN_SIGNING_KEY_LENGTH = 32


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    database_path: str = "./data/authtrail.db"
    cors_origins: list[str] = ["http://localhost:3000"]
    log_level: str = "INFO"

    # JWT Configuration
    # Required; startup fails without it
    jwt_secret_key: str | None = None
    jwt_issuer: str = "authtrail"
    jwt_audience: str = "authtrail-clients"
    jwt_duration_minutes: int = 60
    # Tolerated clock drift between issuer and verifier
    jwt_clock_skew_seconds: int = 300

    # Account lockout policy
    lockout_max_failed_attempts: int = 5
    lockout_duration_minutes: int = 5

    # Roles
    default_role: str = "Usuario"
    admin_role: str = "Administrador"

    # Optional administrator seeded on startup
    admin_email: str | None = None
    admin_name: str = "Administrador"
    admin_password: str | None = None

    # Bcrypt work factor (higher = more secure but slower)
    # For tests, use 4 for faster execution while maintaining functionality
    bcrypt_work_factor: int = 12

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False
    )

    @field_validator("jwt_secret_key")
    @classmethod
    def signing_key_long_enough(cls, value: str | None) -> str | None:
        """Reject signing keys shorter than MIN_SIGNING_KEY_LENGTH.

        A missing key is accepted here and refused by
        authtrail.auth.token.require_signing_key when the app starts.
        """
        if value is not None and len(value) < MIN_SIGNING_KEY_LENGTH:
            raise ValueError(
                f"JWT signing key must have at least {MIN_SIGNING_KEY_LENGTH} characters"
            )
        return value


settings = Settings()
