"""Session persistence.

Persistence is a durability optimisation: a store never raises to its
caller. ``load`` falls back to the empty session and failed writes are
logged, so a broken disk or database degrades the app to "logged out"
instead of crashing it.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from writeoutloud.auth.models import Identity, Session
from writeoutloud.core.config import SessionStoreConfig
from writeoutloud.db.engine import DatabaseManager
from writeoutloud.db.models import AppSessionRow

logger = logging.getLogger(__name__)

_ROW_ID = 1


@runtime_checkable
class SessionStore(Protocol):
    """Protocol for session persistence."""

    def load(self) -> Session: ...

    def save(self, session: Session) -> None: ...

    def clear(self) -> None: ...


class InMemorySessionStore:
    """Keeps the session for the lifetime of the object only."""

    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    def load(self) -> Session:
        return self._session or Session()

    def save(self, session: Session) -> None:
        self._session = session

    def clear(self) -> None:
        self._session = None


class JsonFileSessionStore:
    """Stores the session as a JSON document on disk.

    Writes go to a sibling temp file which is then renamed over the
    target, so a crash mid-write leaves the previous session intact.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Session:
        if not self._path.exists():
            return Session()
        try:
            return Session.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (OSError, ValidationError, ValueError) as exc:
            logger.warning("Could not restore session from %s: %s", self._path, exc)
            return Session()

    def save(self, session: Session) -> None:
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(session.model_dump_json(), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as exc:
            logger.warning("Could not persist session to %s: %s", self._path, exc)

    def clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove session file %s: %s", self._path, exc)


class SqlSessionStore:
    """Stores the session as a single row in a SQL database."""

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db
        try:
            self._db.create_all()
        except SQLAlchemyError as exc:
            logger.warning("Could not prepare session table: %s", exc)

    def load(self) -> Session:
        try:
            with self._db.session() as db:
                row = db.execute(
                    select(AppSessionRow).where(AppSessionRow.id == _ROW_ID)
                ).scalar_one_or_none()
        except SQLAlchemyError as exc:
            logger.warning("Could not restore session from database: %s", exc)
            return Session()

        if row is None:
            return Session()
        identity = None
        if row.user_id is not None:
            try:
                identity = Identity(
                    user_id=row.user_id, username=row.username, email=row.email
                )
            except ValidationError as exc:
                logger.warning("Discarding malformed stored identity: %s", exc)
                return Session()
        return Session(identity=identity, skipped=row.skipped)

    def save(self, session: Session) -> None:
        identity = session.identity
        try:
            with self._db.session() as db:
                row = db.get(AppSessionRow, _ROW_ID) or AppSessionRow(id=_ROW_ID)
                row.user_id = identity.user_id if identity else None
                row.username = identity.username if identity else None
                row.email = identity.email if identity else None
                row.skipped = session.skipped
                row.updated_at = datetime.now(timezone.utc)
                db.add(row)
                db.commit()
        except SQLAlchemyError as exc:
            logger.warning("Could not persist session to database: %s", exc)

    def clear(self) -> None:
        try:
            with self._db.session() as db:
                db.execute(delete(AppSessionRow).where(AppSessionRow.id == _ROW_ID))
                db.commit()
        except SQLAlchemyError as exc:
            logger.warning("Could not clear session in database: %s", exc)


def create_session_store(config: SessionStoreConfig) -> SessionStore:
    """Factory: select a session store based on config.provider."""
    provider = config.provider.lower()
    if provider == "memory":
        return InMemorySessionStore()
    if provider == "json":
        return JsonFileSessionStore(config.path)
    if provider == "sql":
        return SqlSessionStore(DatabaseManager(config.database_url))
    raise ValueError(
        f"Unknown session store provider {config.provider!r}. "
        "Available: json, memory, sql"
    )
