"""Composition root: builds the object graph once at process start.

Consumers receive the SessionManager (and the services built on it) by
reference from here; nothing in the package keeps module-level state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from writeoutloud.auth.backend import AuthBackend, create_auth_backend
from writeoutloud.auth.validation import CredentialValidator
from writeoutloud.core.config import Settings
from writeoutloud.practice.progress import ProgressService, ProgressStore, load_progress_fixtures
from writeoutloud.session.gating import GatingPolicy
from writeoutloud.session.manager import SessionManager
from writeoutloud.session.store import SessionStore, create_session_store

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class Application:
    settings: Settings
    backend: AuthBackend
    store: SessionStore
    session_manager: SessionManager
    gating: GatingPolicy
    progress: ProgressService


def configure_logging(settings: Settings) -> None:
    level = logging.DEBUG if settings.debug else settings.log_level.upper()
    logging.basicConfig(level=level, format=_LOG_FORMAT)


def build_application(
    settings: Settings | None = None,
    backend: AuthBackend | None = None,
    store: SessionStore | None = None,
) -> Application:
    """Wire settings, backend, store and services together.

    Args:
        settings: Application settings. Defaults to Settings() from the
            environment.
        backend: Override the configured auth backend.
        store: Override the configured session store.
    """
    settings = settings or Settings()
    backend = backend or create_auth_backend(settings.auth)
    store = store or create_session_store(settings.session)

    session_manager = SessionManager(
        backend=backend,
        store=store,
        validator=CredentialValidator(settings.validation.min_password_length),
        backend_timeout_seconds=settings.auth.timeout_seconds,
    )
    progress_store = ProgressStore(settings.progress.path)
    if settings.auth.provider == "local":
        for user_id, progress in load_progress_fixtures(settings.auth.fixtures_path).items():
            progress_store.seed(user_id, progress)

    return Application(
        settings=settings,
        backend=backend,
        store=store,
        session_manager=session_manager,
        gating=GatingPolicy(session_manager),
        progress=ProgressService(session_manager, progress_store),
    )
