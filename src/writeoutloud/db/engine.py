"""Database engine and session management."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker


class DatabaseManager:
    """Manages the SQLAlchemy engine and session factory.

    Session persistence is a handful of small reads and writes per app
    launch, so a synchronous engine is used.

    Usage::

        db = DatabaseManager("sqlite:///data/session.db")
        with db.session() as session:
            ...
        db.close()
    """

    def __init__(
        self,
        database_url: str,
        echo: bool = False,
        pool_size: int = 5,
    ) -> None:
        url = make_url(database_url)
        kwargs: dict[str, Any] = {"echo": echo}
        if url.get_backend_name() == "sqlite":
            if url.database and url.database != ":memory:":
                Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        else:
            kwargs["pool_size"] = pool_size
            kwargs["pool_pre_ping"] = True
        self._engine: Engine = create_engine(url, **kwargs)
        self._session_factory: sessionmaker[Session] = sessionmaker(
            self._engine,
            expire_on_commit=False,
        )

    @property
    def engine(self) -> Engine:
        return self._engine

    def session(self) -> Session:
        """Create a new ORM session."""
        return self._session_factory()

    def create_all(self) -> None:
        """Create any missing tables."""
        import writeoutloud.db.models  # noqa: F401
        from writeoutloud.db.base import Base

        Base.metadata.create_all(self._engine)

    def close(self) -> None:
        """Dispose of the engine connection pool."""
        self._engine.dispose()
