"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from writeoutloud.auth.accounts import LocalAuthBackend
from writeoutloud.auth.models import AuthResult, Identity
from writeoutloud.session.manager import SessionManager
from writeoutloud.session.store import InMemorySessionStore


class FakeAuthBackend:
    """Scriptable AuthBackend.

    ``result`` is returned from every call unless ``error`` is set, in which
    case it is raised. When ``gate`` is set, calls block until it is.
    """

    def __init__(self, result: AuthResult) -> None:
        self.result = result
        self.error: BaseException | None = None
        self.gate: asyncio.Event | None = None
        self.calls: list[tuple[str, ...]] = []

    async def authenticate(self, email: str, password: str) -> AuthResult:
        self.calls.append(("authenticate", email))
        return await self._respond()

    async def create_account(self, username: str, email: str, password: str) -> AuthResult:
        self.calls.append(("create_account", username, email))
        return await self._respond()

    async def _respond(self) -> AuthResult:
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def identity() -> Identity:
    return Identity(user_id="user-1", username="TestUser", email="test@example.com")


@pytest.fixture
def hash_iterations() -> int:
    """PBKDF2 work factor low enough to keep tests fast."""
    return 1_000


@pytest.fixture
def fake_backend(identity) -> FakeAuthBackend:
    return FakeAuthBackend(AuthResult.ok(identity))


@pytest.fixture
def memory_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def manager(fake_backend, memory_store) -> SessionManager:
    return SessionManager(backend=fake_backend, store=memory_store)


@pytest.fixture
def fixtures_file(tmp_path: Path) -> Path:
    path = tmp_path / "auth_fixtures.yml"
    path.write_text(
        "accounts:\n"
        "  - user_id: test-user-id\n"
        "    username: TestUser\n"
        "    email: test@example.com\n"
        "    password: password123\n"
        "progress:\n"
        "  test-user-id:\n"
        "    streak_days: 7\n"
        "    completed_lessons: [lesson1, lesson2, lesson3]\n"
        "    characters:\n"
        "      - {character_id: ren, attempts: 10, best_accuracy: 0.92, days_ago: 0}\n"
        "      - {character_id: kou, attempts: 5, best_accuracy: 0.78, days_ago: 2}\n"
    )
    return path


@pytest.fixture
def local_backend(fixtures_file: Path, hash_iterations: int) -> LocalAuthBackend:
    return LocalAuthBackend(fixtures_path=fixtures_file, hash_iterations=hash_iterations)
