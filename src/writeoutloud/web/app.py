"""FastAPI reference authentication service.

Wraps any AuthBackend behind the HTTP contract HttpAuthBackend speaks, so
the app can run against a shared account service instead of on-device
accounts::

    uvicorn writeoutloud.web.app:create_app --factory --port 8080
"""

from __future__ import annotations

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel

from writeoutloud.auth.backend import AuthBackend, AuthBackendUnavailable, create_auth_backend
from writeoutloud.auth.models import AuthResult, Identity, LoginCredentials
from writeoutloud.auth.validation import CredentialValidator
from writeoutloud.bootstrap import configure_logging
from writeoutloud.core.config import Settings
from writeoutloud.core.types import DEFAULT_MESSAGES, AuthErrorCode

# --- Request/Response models ---


class RegisterRequest(BaseModel):
    username: str
    email: str
    password: str


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str = "0.1.0"


_ERROR_STATUS: dict[AuthErrorCode, int] = {
    AuthErrorCode.INVALID_CREDENTIALS: 401,
    AuthErrorCode.ACCOUNT_EXISTS: 409,
    AuthErrorCode.NETWORK_UNAVAILABLE: 503,
}


def _identity_or_raise(result: AuthResult) -> Identity:
    if result.success and result.identity is not None:
        return result.identity
    code = result.error_code or AuthErrorCode.BACKEND_UNKNOWN
    raise HTTPException(
        status_code=_ERROR_STATUS.get(code, 502),
        detail=result.error or DEFAULT_MESSAGES[code],
    )


def create_app(
    settings: Settings | None = None,
    backend: AuthBackend | None = None,
) -> FastAPI:
    """Build the auth service.

    Args:
        settings: Application settings. Defaults to Settings() from the
            environment.
        backend: Backend to serve. Defaults to the one named by
            ``settings.auth.provider``.
    """
    settings = settings or Settings()
    configure_logging(settings)
    app = FastAPI(title="Write Out Loud Auth", version="0.1.0")
    app.state.auth_backend = backend or create_auth_backend(settings.auth)
    app.state.validator = CredentialValidator(settings.validation.min_password_length)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service="writeoutloud-auth")

    @app.post("/api/auth/login", response_model=Identity)
    async def login(body: LoginCredentials, request: Request) -> Identity:
        """Check credentials and return the account's identity."""
        provider: AuthBackend = request.app.state.auth_backend
        try:
            result = await provider.authenticate(body.email, body.password)
        except AuthBackendUnavailable as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        return _identity_or_raise(result)

    @app.post("/api/auth/register", response_model=Identity, status_code=201)
    async def register(body: RegisterRequest, request: Request) -> Identity:
        """Create an account after re-checking the credential policy."""
        validation = request.app.state.validator.validate_registration(
            body.username, body.email, body.password, body.password
        )
        if not validation.valid:
            raise HTTPException(status_code=422, detail=validation.message)

        provider: AuthBackend = request.app.state.auth_backend
        try:
            result = await provider.create_account(body.username, body.email, body.password)
        except AuthBackendUnavailable as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        return _identity_or_raise(result)

    return app
