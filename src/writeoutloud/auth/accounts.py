"""Local account directory backing the on-device authentication backend.

Accounts live in memory and are optionally mirrored to a JSON file so
registrations survive restarts. Passwords are stored as salted
PBKDF2-HMAC-SHA256 digests, never in clear text.
"""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import json
import logging
import os
import secrets
import uuid
from pathlib import Path

import yaml
from pydantic import BaseModel

from writeoutloud.auth.models import AuthResult, Identity
from writeoutloud.core.types import AuthErrorCode

logger = logging.getLogger(__name__)

_DEFAULT_FIXTURES_PATH = Path(__file__).resolve().parents[3] / "config" / "auth_fixtures.yml"

DEFAULT_HASH_ITERATIONS = 200_000


class AccountRecord(BaseModel):
    """A stored account: identity fields plus the password digest."""

    user_id: str
    username: str
    email: str
    salt: str
    password_hash: str

    def to_identity(self) -> Identity:
        return Identity(user_id=self.user_id, username=self.username, email=self.email)


def hash_password(password: str, salt: str, iterations: int = DEFAULT_HASH_ITERATIONS) -> str:
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), bytes.fromhex(salt), iterations
    )
    return digest.hex()


class LocalAuthBackend:
    """Authentication backend over a local account directory.

    Args:
        fixtures_path: YAML file of accounts to seed. Defaults to
            ``config/auth_fixtures.yml``; a missing file seeds nothing.
        accounts_path: JSON file the directory is persisted to. ``None``
            keeps accounts in memory only.
        hash_iterations: PBKDF2 work factor.
    """

    def __init__(
        self,
        fixtures_path: str | Path | None = None,
        accounts_path: str | Path | None = None,
        hash_iterations: int = DEFAULT_HASH_ITERATIONS,
    ) -> None:
        self._accounts: dict[str, AccountRecord] = {}
        self._accounts_path = Path(accounts_path) if accounts_path else None
        self._iterations = hash_iterations
        if self._accounts_path is not None:
            self._load_accounts(self._accounts_path)
        self._load_fixtures(Path(fixtures_path) if fixtures_path else _DEFAULT_FIXTURES_PATH)

    # -- persistence ---------------------------------------------------------

    def _load_accounts(self, path: Path) -> None:
        if not path.exists():
            return
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            records = [AccountRecord(**item) for item in data.get("accounts", [])]
        except (OSError, ValueError, TypeError) as exc:
            logger.warning("Ignoring unreadable account directory %s: %s", path, exc)
            return
        for record in records:
            self._accounts[_key(record.email)] = record

    def _load_fixtures(self, path: Path) -> None:
        if not path.exists():
            return
        with open(path) as fh:
            data = yaml.safe_load(fh) or {}
        seeded = False
        for entry in data.get("accounts", []):
            if _key(entry["email"]) in self._accounts:
                continue
            salt = secrets.token_hex(16)
            record = self._new_record(
                username=entry["username"],
                email=entry["email"],
                salt=salt,
                password_hash=hash_password(str(entry["password"]), salt, self._iterations),
                user_id=entry.get("user_id"),
            )
            self._accounts[_key(record.email)] = record
            seeded = True
            logger.info("Seeded fixture account %s", entry["email"])
        if seeded:
            try:
                self._persist(self._accounts)
            except OSError as exc:
                logger.warning("Could not persist seeded accounts to %s: %s", self._accounts_path, exc)

    def _persist(self, accounts: dict[str, AccountRecord]) -> None:
        if self._accounts_path is None:
            return
        payload = {"accounts": [r.model_dump() for r in accounts.values()]}
        self._accounts_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._accounts_path.with_suffix(self._accounts_path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        os.replace(tmp_path, self._accounts_path)

    @staticmethod
    def _new_record(
        username: str, email: str, salt: str, password_hash: str, user_id: str | None = None
    ) -> AccountRecord:
        return AccountRecord(
            user_id=user_id or str(uuid.uuid4()),
            username=username,
            email=email,
            salt=salt,
            password_hash=password_hash,
        )

    def _conflict(self, username: str, email: str) -> AuthResult | None:
        if _key(email) in self._accounts:
            return AuthResult.failed(AuthErrorCode.ACCOUNT_EXISTS, "Email already exists")
        if any(r.username == username for r in self._accounts.values()):
            return AuthResult.failed(AuthErrorCode.ACCOUNT_EXISTS, "Username already exists")
        return None

    # -- public API ----------------------------------------------------------

    @property
    def accounts(self) -> dict[str, AccountRecord]:
        return dict(self._accounts)

    async def authenticate(self, email: str, password: str) -> AuthResult:
        record = self._accounts.get(_key(email))
        if record is None:
            return AuthResult.failed(AuthErrorCode.INVALID_CREDENTIALS)

        # PBKDF2 runs in a worker thread so the event loop keeps serving.
        candidate = await asyncio.to_thread(
            hash_password, password, record.salt, self._iterations
        )
        if not hmac.compare_digest(candidate, record.password_hash):
            return AuthResult.failed(AuthErrorCode.INVALID_CREDENTIALS)

        return AuthResult.ok(record.to_identity())

    async def create_account(self, username: str, email: str, password: str) -> AuthResult:
        conflict = self._conflict(username, email)
        if conflict is not None:
            return conflict

        salt = secrets.token_hex(16)
        password_hash = await asyncio.to_thread(hash_password, password, salt, self._iterations)

        # Another registration may have committed while hashing.
        conflict = self._conflict(username, email)
        if conflict is not None:
            return conflict

        record = self._new_record(username, email, salt, password_hash)
        updated = {**self._accounts, _key(email): record}
        try:
            self._persist(updated)
        except OSError as exc:
            logger.warning("Could not save account directory to %s: %s", self._accounts_path, exc)
            return AuthResult.failed(
                AuthErrorCode.BACKEND_UNKNOWN, "Could not save the new account. Please try again"
            )

        self._accounts = updated
        logger.info("Created account %s", record.user_id)
        return AuthResult.ok(record.to_identity())


def _key(email: str) -> str:
    return email.strip().lower()
