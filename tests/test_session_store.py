"""Tests for session persistence across the three stores."""

from __future__ import annotations

import logging

import pytest

from writeoutloud.auth.models import Session
from writeoutloud.core.config import SessionStoreConfig
from writeoutloud.db.engine import DatabaseManager
from writeoutloud.session.store import (
    InMemorySessionStore,
    JsonFileSessionStore,
    SessionStore,
    SqlSessionStore,
    create_session_store,
)


@pytest.fixture(params=["memory", "json", "sql"])
def store(request, tmp_path) -> SessionStore:
    if request.param == "memory":
        return InMemorySessionStore()
    if request.param == "json":
        return JsonFileSessionStore(tmp_path / "session.json")
    return SqlSessionStore(DatabaseManager(f"sqlite:///{tmp_path / 'session.db'}"))


class TestSessionStoreContract:
    def test_satisfies_protocol(self, store) -> None:
        assert isinstance(store, SessionStore)

    def test_empty_load(self, store) -> None:
        session = store.load()
        assert session == Session()
        assert not session.is_authenticated
        assert not session.skipped

    def test_save_and_load_identity(self, identity, store) -> None:
        store.save(Session(identity=identity))
        restored = store.load()
        assert restored.identity == identity
        assert restored.is_authenticated

    def test_save_and_load_skipped(self, store) -> None:
        store.save(Session(skipped=True))
        assert store.load() == Session(skipped=True)

    def test_save_overwrites(self, identity, store) -> None:
        store.save(Session(identity=identity))
        store.save(Session(skipped=True))
        assert store.load() == Session(skipped=True)

    def test_clear(self, identity, store) -> None:
        store.save(Session(identity=identity))
        store.clear()
        assert store.load() == Session()

    def test_clear_when_empty(self, store) -> None:
        store.clear()
        assert store.load() == Session()


class TestJsonFileSessionStore:
    def test_survives_new_instance(self, identity, tmp_path) -> None:
        path = tmp_path / "nested" / "session.json"
        JsonFileSessionStore(path).save(Session(identity=identity))
        assert JsonFileSessionStore(path).load().identity == identity

    def test_corrupt_file_loads_empty(self, tmp_path, caplog) -> None:
        path = tmp_path / "session.json"
        path.write_text("{corrupt")
        with caplog.at_level(logging.WARNING):
            assert JsonFileSessionStore(path).load() == Session()
        assert "Could not restore session" in caplog.text

    def test_wrong_schema_loads_empty(self, tmp_path) -> None:
        path = tmp_path / "session.json"
        path.write_text('{"identity": {"user_id": 5}}')
        assert JsonFileSessionStore(path).load() == Session()

    def test_save_failure_is_logged_not_raised(self, tmp_path, caplog) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        store = JsonFileSessionStore(blocker / "session.json")
        with caplog.at_level(logging.WARNING):
            store.save(Session(skipped=True))
        assert "Could not persist session" in caplog.text
        assert store.load() == Session()


class TestSqlSessionStore:
    def test_survives_new_instance(self, identity, tmp_path) -> None:
        url = f"sqlite:///{tmp_path / 'db' / 'session.db'}"
        SqlSessionStore(DatabaseManager(url)).save(Session(identity=identity, skipped=True))
        restored = SqlSessionStore(DatabaseManager(url)).load()
        assert restored.identity == identity
        assert restored.skipped

    def test_database_failure_loads_empty(self, identity, tmp_path) -> None:
        db = DatabaseManager(f"sqlite:///{tmp_path / 'session.db'}")
        store = SqlSessionStore(db)
        store.save(Session(identity=identity))
        with db.engine.begin() as conn:
            conn.exec_driver_sql("DROP TABLE app_session")
        assert store.load() == Session()
        store.save(Session(skipped=True))
        store.clear()


class TestFactory:
    def test_memory(self) -> None:
        assert isinstance(create_session_store(SessionStoreConfig(provider="memory")), InMemorySessionStore)

    def test_json(self, tmp_path) -> None:
        store = create_session_store(SessionStoreConfig(provider="json", path=str(tmp_path / "s.json")))
        assert isinstance(store, JsonFileSessionStore)

    def test_sql(self, tmp_path) -> None:
        store = create_session_store(
            SessionStoreConfig(provider="sql", database_url=f"sqlite:///{tmp_path / 's.db'}")
        )
        assert isinstance(store, SqlSessionStore)

    def test_unknown_provider_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown session store provider"):
            create_session_store(SessionStoreConfig(provider="redis"))
