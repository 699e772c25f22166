import importlib.util
from pathlib import Path

import pytest

from jokes.auth.users import login
from jokes.db import make_engine, make_session_factory

SCRIPTS_DIR = Path(__file__).resolve().parents[1] / "scripts"


def _load_create_user(tmp_path, monkeypatch):
    db_url = f"sqlite:///{tmp_path / 'cli.db'}"
    monkeypatch.setenv("JOKES_DATABASE_URL", db_url)
    spec = importlib.util.spec_from_file_location("create_user", SCRIPTS_DIR / "create_user.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    monkeypatch.setattr("builtins.input", lambda prompt="": "cli-user")
    return module, db_url


def test_create_user_empty_password_exits(tmp_path, monkeypatch):
    module, _ = _load_create_user(tmp_path, monkeypatch)
    monkeypatch.setattr(module, "getpass", lambda prompt="": "")
    with pytest.raises(SystemExit) as exc:
        module.main()
    assert str(exc.value) == "Empty password"


def test_create_user_registers(tmp_path, monkeypatch):
    module, db_url = _load_create_user(tmp_path, monkeypatch)
    monkeypatch.setattr(module, "getpass", lambda prompt="": "pw123456")
    module.main()

    engine = make_engine(db_url)
    with make_session_factory(engine)() as db:
        assert login(db, "cli-user", "pw123456") is not None
    engine.dispose()
