"""Credential format rules for login and registration forms.

Validation is pure: it never touches a backend or the session store, so a
failing form short-circuits before any network call is made.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict

from writeoutloud.core.types import DEFAULT_MESSAGES, AuthErrorCode

EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,64}")

DEFAULT_MIN_PASSWORD_LENGTH = 6


class ValidationResult(BaseModel):
    """Either valid, or invalid with exactly one reason."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    reason: AuthErrorCode | None = None
    message: str | None = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(valid=True)

    @classmethod
    def invalid(cls, reason: AuthErrorCode, message: str | None = None) -> ValidationResult:
        return cls(valid=False, reason=reason, message=message or DEFAULT_MESSAGES[reason])


def is_valid_email(email: str) -> bool:
    return EMAIL_PATTERN.fullmatch(email) is not None


class CredentialValidator:
    """Applies the credential policy.

    Args:
        min_password_length: Shortest password accepted at registration.
    """

    def __init__(self, min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH) -> None:
        if min_password_length < 1:
            raise ValueError("min_password_length must be at least 1")
        self.min_password_length = min_password_length

    def validate_login(self, email: str, password: str) -> ValidationResult:
        # Existing accounts may predate the current length policy, so login
        # only requires a non-empty password.
        if not is_valid_email(email):
            return ValidationResult.invalid(AuthErrorCode.MALFORMED_EMAIL)
        if not password:
            return ValidationResult.invalid(
                AuthErrorCode.WEAK_PASSWORD, "Email and password are required"
            )
        return ValidationResult.ok()

    def validate_registration(
        self,
        username: str,
        email: str,
        password: str,
        confirm_password: str,
    ) -> ValidationResult:
        if not username or not username.strip():
            return ValidationResult.invalid(AuthErrorCode.MISSING_USERNAME)
        if not is_valid_email(email):
            return ValidationResult.invalid(AuthErrorCode.MALFORMED_EMAIL)
        if password != confirm_password:
            return ValidationResult.invalid(AuthErrorCode.PASSWORD_MISMATCH)
        if len(password) < self.min_password_length:
            return ValidationResult.invalid(
                AuthErrorCode.WEAK_PASSWORD,
                DEFAULT_MESSAGES[AuthErrorCode.WEAK_PASSWORD].format(
                    min_length=self.min_password_length
                ),
            )
        return ValidationResult.ok()


_default_validator = CredentialValidator()


def validate_login(email: str, password: str) -> ValidationResult:
    """Validate login form input with the default policy."""
    return _default_validator.validate_login(email, password)


def validate_registration(
    username: str, email: str, password: str, confirm_password: str
) -> ValidationResult:
    """Validate registration form input with the default policy."""
    return _default_validator.validate_registration(
        username, email, password, confirm_password
    )
