"""Tests for credential validation rules."""

from __future__ import annotations

import pytest

from writeoutloud.auth.validation import (
    CredentialValidator,
    ValidationResult,
    is_valid_email,
    validate_login,
    validate_registration,
)
from writeoutloud.core.types import AuthErrorCode

MALFORMED_EMAILS = [
    "",
    "plainaddress",
    "@example.com",
    "user@",
    "user@example",
    "user@example.c",
    "user name@example.com",
    "user@exa mple.com",
    " user@example.com",
]


class TestEmailPattern:
    @pytest.mark.parametrize("email", ["a@b.co", "first.last+tag@sub.example.org", "X_1%@EXAMPLE.COM"])
    def test_accepts_well_formed(self, email: str) -> None:
        assert is_valid_email(email)

    @pytest.mark.parametrize("email", MALFORMED_EMAILS)
    def test_rejects_malformed(self, email: str) -> None:
        assert not is_valid_email(email)


class TestValidateLogin:
    def test_valid(self) -> None:
        assert validate_login("test@example.com", "password123") == ValidationResult.ok()

    @pytest.mark.parametrize("email", MALFORMED_EMAILS)
    def test_malformed_email(self, email: str) -> None:
        result = validate_login(email, "password123")
        assert not result.valid
        assert result.reason == AuthErrorCode.MALFORMED_EMAIL

    def test_empty_password(self) -> None:
        result = validate_login("test@example.com", "")
        assert result.reason == AuthErrorCode.WEAK_PASSWORD
        assert result.message == "Email and password are required"

    def test_short_password_allowed_at_login(self) -> None:
        assert validate_login("test@example.com", "abc").valid


class TestValidateRegistration:
    def test_valid(self) -> None:
        assert validate_registration("writer", "w@example.com", "secret1", "secret1").valid

    def test_missing_username(self) -> None:
        result = validate_registration("  ", "w@example.com", "secret1", "secret1")
        assert result.reason == AuthErrorCode.MISSING_USERNAME

    def test_malformed_email(self) -> None:
        result = validate_registration("writer", "not-an-email", "secret1", "secret1")
        assert result.reason == AuthErrorCode.MALFORMED_EMAIL

    def test_mismatch_reported_before_length(self) -> None:
        result = validate_registration("u", "e@x.com", "p1", "p2")
        assert result.reason == AuthErrorCode.PASSWORD_MISMATCH
        assert result.message == "Passwords do not match"

    @pytest.mark.parametrize("password", ["", "a", "abcde"])
    def test_short_password(self, password: str) -> None:
        result = validate_registration("writer", "w@example.com", password, password)
        assert result.reason == AuthErrorCode.WEAK_PASSWORD
        assert result.message == "Password must be at least 6 characters"

    def test_custom_minimum(self) -> None:
        validator = CredentialValidator(min_password_length=10)
        assert not validator.validate_registration("w", "w@example.com", "123456789", "123456789").valid
        assert validator.validate_registration("w", "w@example.com", "1234567890", "1234567890").valid

    def test_minimum_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            CredentialValidator(min_password_length=0)
