"""Request ids, engine setup and the script session helper."""

import pytest
from sqlalchemy.orm import sessionmaker

from agrox import db as db_module
from agrox.models.models import Client


def test_request_id_echoed(client):
    res = client.get("/login", headers={"X-Request-ID": "req-123"})
    assert res.headers["x-request-id"] == "req-123"


def test_request_id_generated(client):
    first = client.get("/login").headers["x-request-id"]
    second = client.get("/login").headers["x-request-id"]
    assert first and second and first != second


def test_sqlite_engine_enforces_foreign_keys():
    engine = db_module.make_engine("sqlite://")
    with engine.connect() as conn:
        assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1
    engine.dispose()


class TestSessionScope:
    @pytest.fixture
    def scoped(self, db_engine, monkeypatch):
        factory = sessionmaker(bind=db_engine, autoflush=False, autocommit=False)
        monkeypatch.setattr(db_module, "SessionLocal", factory)
        return factory

    def test_commits_on_success(self, scoped):
        with db_module.session_scope() as session:
            session.add(Client(name="Herdade Nova"))
        check = scoped()
        assert check.query(Client).count() == 1
        check.close()

    def test_rolls_back_on_error(self, scoped):
        with pytest.raises(RuntimeError):
            with db_module.session_scope() as session:
                session.add(Client(name="Herdade Nova"))
                session.flush()
                raise RuntimeError("boom")
        check = scoped()
        assert check.query(Client).count() == 0
        check.close()
