"""
Tests for identity validation rules.

Tests verify that:
- E-mails need a local part of at least 8 characters and a dotted domain
- Names are required and limited to 50 characters
- Passwords follow the credential policy and report the first missing rule
- Each rule raises its own exception type
"""

import pytest

from authtrail.auth import validators
from authtrail.auth.validators import validate_email, validate_name, validate_password
from authtrail.exceptions import DomainRuleViolation, InvalidEmail, InvalidName, WeakPassword


# ============================================================================
# E-mail
# ============================================================================


class TestValidateEmail:
    """Tests for validate_email."""

    @pytest.mark.parametrize("email", [
        "usuario123@exemplo.com",
        "joaosilva1@x.com",
        "USUARIO123@EXEMPLO.COM",
        "first.last@sub.domain.org",
    ])
    def test_valid_emails_pass(self, email):
        assert validate_email(email) is None

    @pytest.mark.parametrize("email", [None, "", "   "])
    def test_blank_email_is_required(self, email):
        with pytest.raises(InvalidEmail) as exc_info:
            validate_email(email)
        assert exc_info.value.message == "E-mail é obrigatório."

    @pytest.mark.parametrize("email", [
        "user123@exemplo.com",   # 7 characters before @
        "a@exemplo.com",
        "usuarioemail.com",      # no @
        "usuario123@",           # no domain
        "usuario123@exemplo",    # no extension
        "usuario 123@exemplo.com",
        "usuario123@exe mplo.com",
        "usuario123@@exemplo.com",
    ])
    def test_malformed_email_rejected(self, email):
        with pytest.raises(InvalidEmail) as exc_info:
            validate_email(email)
        assert exc_info.value.message == validators.EMAIL_INVALID

    def test_short_local_part_fails_regardless_of_domain(self):
        for domain in ("x.com", "exemplo.com.br", "very-long-domain-name.example.org"):
            with pytest.raises(InvalidEmail):
                validate_email(f"abcdefg@{domain}")

    def test_exactly_eight_characters_before_at(self):
        assert validate_email("abcdefgh@x.com") is None


# ============================================================================
# Name
# ============================================================================


class TestValidateName:
    """Tests for validate_name."""

    def test_valid_name(self):
        assert validate_name("João Silva") is None

    @pytest.mark.parametrize("name", [None, "", "    "])
    def test_blank_name_is_required(self, name):
        with pytest.raises(InvalidName) as exc_info:
            validate_name(name)
        assert exc_info.value.message == "Nome é obrigatório."

    def test_fifty_characters_accepted(self):
        assert validate_name("a" * 50) is None

    @pytest.mark.parametrize("length", [51, 52, 100])
    def test_longer_than_fifty_rejected(self, length):
        with pytest.raises(InvalidName) as exc_info:
            validate_name("a" * length)
        assert exc_info.value.message == "Nome não pode ter mais que 50 caracteres."


# ============================================================================
# Password
# ============================================================================


class TestValidatePassword:
    """Tests for validate_password (credential policy)."""

    @pytest.mark.parametrize("password", [
        "Abcdef@1",
        "MinhaSenh@123",
        "X1!aaaaaaaaaaaa",
        "Senha Forte 9",  # space counts as a special character
    ])
    def test_compliant_password_passes(self, password):
        assert validate_password(password) is None

    @pytest.mark.parametrize("password", [None, "", "        "])
    def test_blank_password_is_required(self, password):
        with pytest.raises(WeakPassword) as exc_info:
            validate_password(password)
        assert exc_info.value.message == "Senha é obrigatória."

    @pytest.mark.parametrize("password, message", [
        ("Ab@1", validators.PASSWORD_TOO_SHORT),
        ("Abcdefg@", validators.PASSWORD_NEEDS_DIGIT),
        ("1234567@", validators.PASSWORD_NEEDS_LETTER),
        ("abcdef@1", validators.PASSWORD_NEEDS_UPPERCASE),
        ("Abcdefg1", validators.PASSWORD_NEEDS_SPECIAL),
    ])
    def test_missing_category_reported(self, password, message):
        with pytest.raises(WeakPassword) as exc_info:
            validate_password(password)
        assert exc_info.value.message == message

    def test_first_failing_rule_wins(self):
        """A short password without digits reports the length rule."""
        with pytest.raises(WeakPassword) as exc_info:
            validate_password("abc")
        assert exc_info.value.message == validators.PASSWORD_TOO_SHORT

    def test_password_errors_are_domain_rule_violations(self):
        with pytest.raises(DomainRuleViolation):
            validate_password("weak")
