"""Authentication data models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from writeoutloud.core.types import DEFAULT_MESSAGES, AuthErrorCode


class Identity(BaseModel):
    """An authenticated user's stable attributes."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    username: str
    email: str


class Session(BaseModel):
    """The process-wide authentication record.

    ``skipped`` means the user chose to continue without an account. It is
    persisted alongside the identity so gating decisions survive restarts.
    """

    model_config = ConfigDict(frozen=True)

    identity: Identity | None = None
    skipped: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None


class LoginCredentials(BaseModel):
    """Login form input. The password never appears in reprs or logs."""

    email: str
    password: str = Field(repr=False)


class AuthError(BaseModel):
    """A user-displayable authentication failure."""

    model_config = ConfigDict(frozen=True)

    code: AuthErrorCode
    message: str

    @classmethod
    def from_code(cls, code: AuthErrorCode, message: str | None = None) -> AuthError:
        return cls(code=code, message=message or DEFAULT_MESSAGES[code])


class AuthResult(BaseModel):
    """Outcome of a backend ``authenticate`` or ``create_account`` call."""

    success: bool
    identity: Identity | None = None
    error_code: AuthErrorCode | None = None
    error: str | None = None

    @classmethod
    def ok(cls, identity: Identity) -> AuthResult:
        return cls(success=True, identity=identity)

    @classmethod
    def failed(cls, code: AuthErrorCode, error: str | None = None) -> AuthResult:
        return cls(success=False, error_code=code, error=error)
