"""Core type definitions shared across all Write Out Loud modules."""

from __future__ import annotations

from enum import StrEnum


class AuthErrorCode(StrEnum):
    """Closed set of causes an authentication attempt can fail with.

    The first four are produced by local credential validation and never
    reach a backend; the rest are reported by the authentication backend.
    """

    MALFORMED_EMAIL = "malformed_email"
    WEAK_PASSWORD = "weak_password"
    PASSWORD_MISMATCH = "password_mismatch"
    MISSING_USERNAME = "missing_username"
    INVALID_CREDENTIALS = "invalid_credentials"
    ACCOUNT_EXISTS = "account_exists"
    NETWORK_UNAVAILABLE = "network_unavailable"
    BACKEND_UNKNOWN = "backend_unknown"


DEFAULT_MESSAGES: dict[AuthErrorCode, str] = {
    AuthErrorCode.MALFORMED_EMAIL: "Please enter a valid email address",
    AuthErrorCode.WEAK_PASSWORD: "Password must be at least {min_length} characters",
    AuthErrorCode.PASSWORD_MISMATCH: "Passwords do not match",
    AuthErrorCode.MISSING_USERNAME: "Username is required",
    AuthErrorCode.INVALID_CREDENTIALS: "Invalid email or password",
    AuthErrorCode.ACCOUNT_EXISTS: "An account with this email or username already exists",
    AuthErrorCode.NETWORK_UNAVAILABLE: "Unable to reach the authentication service",
    AuthErrorCode.BACKEND_UNKNOWN: "Something went wrong. Please try again",
}
