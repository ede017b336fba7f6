"""Authentication backend Protocol, HTTP client, and factory function."""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from writeoutloud.auth.models import AuthResult, Identity, LoginCredentials
from writeoutloud.core.config import AuthConfig
from writeoutloud.core.types import AuthErrorCode

logger = logging.getLogger(__name__)


class AuthBackendUnavailable(Exception):
    """The authentication service could not be reached."""


@runtime_checkable
class AuthBackend(Protocol):
    """Protocol for credential-checking backends.

    Implementations report rejected credentials through ``AuthResult``
    and raise only for transport-level failures.
    """

    async def authenticate(self, email: str, password: str) -> AuthResult: ...

    async def create_account(self, username: str, email: str, password: str) -> AuthResult: ...


_STATUS_CODES: dict[int, AuthErrorCode] = {
    401: AuthErrorCode.INVALID_CREDENTIALS,
    403: AuthErrorCode.INVALID_CREDENTIALS,
    409: AuthErrorCode.ACCOUNT_EXISTS,
}


class HttpAuthBackend:
    """Talks to a remote authentication service over HTTP."""

    def __init__(self, config: AuthConfig, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.config = config
        self._http = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout_seconds),
            transport=transport,
        )

    # -- public API ----------------------------------------------------------

    async def authenticate(self, email: str, password: str) -> AuthResult:
        credentials = LoginCredentials(email=email, password=password)
        return await self._post("/api/auth/login", credentials.model_dump())

    async def create_account(self, username: str, email: str, password: str) -> AuthResult:
        return await self._post(
            "/api/auth/register",
            {"username": username, "email": email, "password": password},
        )

    async def is_available(self) -> bool:
        try:
            r = await self._http.get("/health")
            return r.status_code == 200
        except httpx.HTTPError:
            return False

    async def close(self) -> None:
        await self._http.aclose()

    # -- internal ------------------------------------------------------------

    async def _post(self, path: str, payload: dict[str, Any]) -> AuthResult:
        try:
            resp = await self._http.post(path, json=payload)
        except httpx.TransportError as exc:
            logger.warning("Auth service unreachable at %s%s: %s", self.config.base_url, path, exc)
            raise AuthBackendUnavailable(str(exc)) from exc

        if resp.is_success:
            return AuthResult.ok(Identity(**resp.json()))

        code = _STATUS_CODES.get(resp.status_code, AuthErrorCode.BACKEND_UNKNOWN)
        if code is AuthErrorCode.BACKEND_UNKNOWN:
            logger.warning("Auth service returned %s for %s", resp.status_code, path)
        return AuthResult.failed(code, _detail(resp))


def _detail(resp: httpx.Response) -> str | None:
    try:
        detail = resp.json().get("detail")
    except (ValueError, AttributeError):
        return None
    return detail if isinstance(detail, str) else None


def create_auth_backend(config: AuthConfig) -> AuthBackend:
    """Factory: select and instantiate a backend based on config.provider."""

    from writeoutloud.auth.accounts import LocalAuthBackend

    provider = config.provider.lower()
    if provider == "local":
        return LocalAuthBackend(
            fixtures_path=config.fixtures_path,
            accounts_path=config.accounts_path,
        )
    if provider == "http":
        return HttpAuthBackend(config)
    raise ValueError(
        f"Unknown auth provider {config.provider!r}. Available: http, local"
    )
