"""Identity validation rules.

Pure functions over candidate strings: no I/O, no state. Each returns None
when the value is acceptable and raises a distinct DomainRuleViolation
subclass otherwise. They run before any store is touched.

Rules:
- Email: non-empty, ``local@domain.tld`` shape, local part of at least 8
  characters, no whitespace.
- Name: non-empty, at most 50 characters.
- Password (credential policy): non-empty, at least 8 characters, one digit,
  one letter, one uppercase letter and one non-alphanumeric character.
"""

import re

from ..exceptions import InvalidEmail, InvalidName, WeakPassword

NAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 8

EMAIL_PATTERN = re.compile(r"^[^@\s]{8,}@[^@\s]+\.[^@\s]+$", re.IGNORECASE)

EMAIL_REQUIRED = "E-mail é obrigatório."
EMAIL_INVALID = (
    "E-mail inválido. Deve ter pelo menos 8 caracteres antes do @ e um domínio válido."
)
NAME_REQUIRED = "Nome é obrigatório."
NAME_TOO_LONG = f"Nome não pode ter mais que {NAME_MAX_LENGTH} caracteres."
PASSWORD_REQUIRED = "Senha é obrigatória."
PASSWORD_TOO_SHORT = f"Senha deve ter no mínimo {PASSWORD_MIN_LENGTH} caracteres."
PASSWORD_NEEDS_DIGIT = "Senha deve conter pelo menos um número."
PASSWORD_NEEDS_LETTER = "Senha deve conter pelo menos uma letra."
PASSWORD_NEEDS_UPPERCASE = "Senha deve conter pelo menos uma letra maiúscula."
PASSWORD_NEEDS_SPECIAL = "Senha deve conter pelo menos um caractere especial."

# Checked in order; the first missing category is reported
_PASSWORD_CATEGORIES = (
    (re.compile(r"[0-9]"), PASSWORD_NEEDS_DIGIT),
    (re.compile(r"[a-zA-Z]"), PASSWORD_NEEDS_LETTER),
    (re.compile(r"[A-Z]"), PASSWORD_NEEDS_UPPERCASE),
    (re.compile(r"[^a-zA-Z0-9]"), PASSWORD_NEEDS_SPECIAL),
)


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def validate_email(email: str | None) -> None:
    """
    Validate email shape.

    Raises:
        InvalidEmail: If email is blank or malformed
    """
    if _is_blank(email):
        raise InvalidEmail(EMAIL_REQUIRED, {"field": "email"})

    if not EMAIL_PATTERN.match(email):
        raise InvalidEmail(EMAIL_INVALID, {"field": "email"})


def validate_name(name: str | None) -> None:
    """
    Validate display name.

    Raises:
        InvalidName: If name is blank or longer than NAME_MAX_LENGTH
    """
    if _is_blank(name):
        raise InvalidName(NAME_REQUIRED, {"field": "nome"})

    if len(name) > NAME_MAX_LENGTH:
        raise InvalidName(NAME_TOO_LONG, {"field": "nome"})


def validate_password(password: str | None) -> None:
    """
    Apply the credential policy to a candidate password.

    Raises:
        WeakPassword: With the message of the first rule that failed
    """
    if _is_blank(password):
        raise WeakPassword(PASSWORD_REQUIRED, {"field": "password"})

    if len(password) < PASSWORD_MIN_LENGTH:
        raise WeakPassword(PASSWORD_TOO_SHORT, {"field": "password"})

    for pattern, message in _PASSWORD_CATEGORIES:
        if not pattern.search(password):
            raise WeakPassword(message, {"field": "password"})
