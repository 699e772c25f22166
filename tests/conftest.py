import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

import importlib
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from jokes.auth.session import CookieSettings, SessionCodec
from jokes.auth.users import register
from jokes.db import init_db, make_engine, make_session_factory

TEST_SECRET = "test-secret-do-not-use"


@pytest.fixture()
def codec() -> SessionCodec:
    return SessionCodec(TEST_SECRET, CookieSettings())


@pytest.fixture()
def session_factory(tmp_path: Path):
    engine = make_engine(f"sqlite:///{tmp_path / 'jokes.db'}")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    with session_factory() as s:
        yield s


@pytest.fixture()
def alice(db) -> str:
    return register(db, "alice", "alice-password")


@pytest.fixture()
def bob(db) -> str:
    return register(db, "bob", "bob-password")


@pytest.fixture()
def app_module(tmp_path: Path, monkeypatch):
    """Reload the app against a temporary database."""
    monkeypatch.setenv("SESSION_SECRET", TEST_SECRET)
    monkeypatch.setenv("JOKES_DATABASE_URL", f"sqlite:///{tmp_path / 'app.db'}")

    import jokes.app as app_module
    importlib.reload(app_module)
    yield app_module
    app_module.ENGINE.dispose()


@pytest.fixture()
def client(app_module):
    # https so the Secure session cookie is sent back
    with TestClient(app_module.app, base_url="https://testserver") as c:
        yield c
