"""Session manager: the single owner of authentication state.

Presentation code reads the observable fields (``is_authenticated``,
``is_loading``, ``auth_error``, ``is_login_overlay_visible``) or
subscribes to change notifications, and forwards user actions to the
operations below. All mutation runs on one asyncio event loop; the only
suspension points are the backend awaits inside ``login`` and
``register``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from pydantic import BaseModel, ConfigDict

from writeoutloud.auth.backend import AuthBackend, AuthBackendUnavailable
from writeoutloud.auth.models import AuthError, AuthResult, Identity, Session
from writeoutloud.auth.validation import CredentialValidator, ValidationResult
from writeoutloud.core.types import AuthErrorCode
from writeoutloud.session.store import SessionStore

logger = logging.getLogger(__name__)


class SessionState(BaseModel):
    """Immutable snapshot of the manager's observable state."""

    model_config = ConfigDict(frozen=True)

    is_authenticated: bool
    is_loading: bool
    auth_error: AuthError | None
    is_login_overlay_visible: bool
    skipped: bool
    identity: Identity | None


Subscriber = Callable[[SessionState], None]


class SessionManager:
    """Coordinates validation, the auth backend, and session persistence.

    Args:
        backend: The AuthBackend that checks credentials and creates accounts.
        store: The SessionStore the session is restored from and saved to.
        validator: Credential policy. Defaults to CredentialValidator().
        backend_timeout_seconds: Upper bound on a single backend call.
            ``None`` leaves the bound to the backend itself.
    """

    def __init__(
        self,
        backend: AuthBackend,
        store: SessionStore,
        validator: CredentialValidator | None = None,
        backend_timeout_seconds: float | None = None,
    ) -> None:
        self._backend = backend
        self._store = store
        self._validator = validator or CredentialValidator()
        self._timeout = backend_timeout_seconds

        self._session: Session = store.load()
        self._is_loading = False
        self._auth_error: AuthError | None = None
        self._overlay_visible = not (self._session.is_authenticated or self._session.skipped)
        # Bumped by logout; completions from an older generation are dropped.
        self._generation = 0
        self._subscribers: list[Subscriber] = []

    # -- observable state ----------------------------------------------------

    @property
    def session(self) -> Session:
        return self._session

    @property
    def identity(self) -> Identity | None:
        return self._session.identity

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def auth_error(self) -> AuthError | None:
        return self._auth_error

    @property
    def is_login_overlay_visible(self) -> bool:
        return self._overlay_visible

    @property
    def state(self) -> SessionState:
        return SessionState(
            is_authenticated=self.is_authenticated,
            is_loading=self._is_loading,
            auth_error=self._auth_error,
            is_login_overlay_visible=self._overlay_visible,
            skipped=self._session.skipped,
            identity=self._session.identity,
        )

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback for state changes.

        Returns:
            A function that removes the subscription when called.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # -- operations ----------------------------------------------------------

    async def login(self, email: str, password: str) -> bool:
        """Sign in with email and password.

        Returns:
            True if the session is now authenticated by this call.
        """
        if self._is_loading:
            logger.info("Rejected login: another attempt is in flight")
            return False

        validation = self._validator.validate_login(email, password)
        if not validation.valid:
            self._reject(validation)
            return False

        return await self._attempt(
            "login",
            lambda: self._backend.authenticate(email, password),
            default_error=AuthErrorCode.INVALID_CREDENTIALS,
        )

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        confirm_password: str,
    ) -> bool:
        """Create an account and sign straight into it.

        Returns:
            True if the account was created and the session authenticated.
        """
        if self._is_loading:
            logger.info("Rejected registration: another attempt is in flight")
            return False

        validation = self._validator.validate_registration(
            username, email, password, confirm_password
        )
        if not validation.valid:
            self._reject(validation)
            return False

        return await self._attempt(
            "register",
            lambda: self._backend.create_account(username, email, password),
            default_error=AuthErrorCode.BACKEND_UNKNOWN,
        )

    def logout(self) -> None:
        """Forget the identity. Overlay visibility is left as it is."""
        self._generation += 1
        self._store.clear()
        self._session = Session()
        logger.info("Logged out")
        self._notify()

    def hide_login_overlay(self) -> None:
        """Continue without an account; remembered across restarts."""
        self._overlay_visible = False
        if not self._session.skipped:
            self._session = self._session.model_copy(update={"skipped": True})
        self._store.save(self._session)
        self._notify()

    def show_login_overlay(self) -> None:
        """Prompt for login. Ignored while a user is signed in."""
        if self._session.is_authenticated:
            return
        self._overlay_visible = True
        self._notify()

    def toggle_login_overlay(self) -> None:
        if self._overlay_visible:
            self.hide_login_overlay()
        else:
            self.show_login_overlay()

    def dismiss_error(self) -> None:
        if self._auth_error is not None:
            self._auth_error = None
            self._notify()

    # -- internal ------------------------------------------------------------

    def _reject(self, validation: ValidationResult) -> None:
        self._auth_error = AuthError.from_code(validation.reason, validation.message)
        self._notify()

    async def _attempt(
        self,
        action: str,
        call: Callable[[], Awaitable[AuthResult]],
        default_error: AuthErrorCode,
    ) -> bool:
        generation = self._generation
        self._is_loading = True
        self._auth_error = None
        self._notify()

        try:
            result = await self._call_backend(action, call)

            if generation != self._generation:
                logger.warning("Discarding %s response that arrived after logout", action)
                return False

            if result.success and result.identity is not None:
                self._session = Session(identity=result.identity, skipped=False)
                self._store.save(self._session)
                self._overlay_visible = False
                logger.info("%s succeeded for user %s", action, result.identity.user_id)
                return True

            code = result.error_code or default_error
            self._auth_error = AuthError.from_code(code, result.error)
            logger.info("%s failed: %s", action, code)
            return False
        finally:
            self._is_loading = False
            self._notify()

    async def _call_backend(
        self, action: str, call: Callable[[], Awaitable[AuthResult]]
    ) -> AuthResult:
        try:
            if self._timeout is None:
                return await call()
            return await asyncio.wait_for(call(), self._timeout)
        except (asyncio.TimeoutError, ConnectionError, AuthBackendUnavailable) as exc:
            logger.warning("Auth backend unavailable during %s: %s", action, exc)
            return AuthResult.failed(AuthErrorCode.NETWORK_UNAVAILABLE)
        except Exception:
            logger.exception("Auth backend failed during %s", action)
            return AuthResult.failed(AuthErrorCode.BACKEND_UNKNOWN)

    def _notify(self) -> None:
        if not self._subscribers:
            return
        snapshot = self.state
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Session subscriber %r raised", callback)
