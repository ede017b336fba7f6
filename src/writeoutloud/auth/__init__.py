"""Authentication for Write Out Loud.

Credential validation, the backend Protocol, and the models exchanged
between the session manager and a backend.
"""

from writeoutloud.auth.backend import AuthBackend, AuthBackendUnavailable
from writeoutloud.auth.models import AuthError, AuthResult, Identity, Session
from writeoutloud.auth.validation import (
    CredentialValidator,
    ValidationResult,
    validate_login,
    validate_registration,
)

__all__ = [
    "AuthBackend",
    "AuthBackendUnavailable",
    "AuthError",
    "AuthResult",
    "CredentialValidator",
    "Identity",
    "Session",
    "ValidationResult",
    "validate_login",
    "validate_registration",
]
