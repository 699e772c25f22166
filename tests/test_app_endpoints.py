import importlib
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient

from jokes.infra import store


def _register(client, username="u1", password="pw123456", redirect_to="/jokes"):
    return client.post(
        "/login",
        data={"loginType": "register", "username": username, "password": password, "redirectTo": redirect_to},
        follow_redirects=False,
    )


def _create_joke(client, name="abc", content="0123456789"):
    r = client.post("/jokes/new", data={"name": name, "content": content}, follow_redirects=False)
    assert r.status_code == 302
    return r.headers["location"].rsplit("/", 1)[-1]


def test_home_renders(client):
    r = client.get("/")
    assert r.status_code == 200
    assert "/jokes" in r.text


def test_empty_corpus_is_404(client):
    r = client.get("/jokes")
    assert r.status_code == 404
    assert "No jokes to display" in r.text


def test_register_sets_session_cookie(client):
    r = _register(client, redirect_to="/jokes/new")
    assert r.status_code == 302
    assert r.headers["location"] == "/jokes/new"
    cookie = r.headers["set-cookie"].lower()
    assert cookie.startswith("__session=")
    for attr in ("httponly", "secure", "samesite=lax", "path=/jokes", "max-age=3600"):
        assert attr in cookie


def test_end_to_end_create_and_delete(client):
    _register(client)
    joke_id = _create_joke(client)

    r = client.get(f"/jokes/{joke_id}")
    assert r.status_code == 200
    assert "0123456789" in r.text
    assert 'value="delete"' in r.text

    r = client.post(f"/jokes/{joke_id}", data={"intent": "delete"}, follow_redirects=False)
    assert r.status_code == 302
    assert r.headers["location"] == "/jokes"

    assert client.get(f"/jokes/{joke_id}").status_code == 404


def test_random_joke_page_shows_only_joke(client):
    _register(client)
    _create_joke(client, content="the only joke here")
    r = client.get("/jokes")
    assert r.status_code == 200
    assert "the only joke here" in r.text
    assert "Hi u1" in r.text


def test_new_joke_requires_login(client):
    r = client.get("/jokes/new", follow_redirects=False)
    assert r.status_code == 302
    loc = urlparse(r.headers["location"])
    assert loc.path == "/login"
    assert parse_qs(loc.query) == {"redirectTo": ["/jokes/new"]}


def test_new_joke_form_when_logged_in(client):
    _register(client)
    r = client.get("/jokes/new")
    assert r.status_code == 200
    assert "Add Joke" in r.text


def test_new_joke_validation_errors(client):
    _register(client)
    r = client.post("/jokes/new", data={"name": "ab", "content": "short"}, follow_redirects=False)
    assert r.status_code == 400
    assert "Name is too short" in r.text
    assert "Joke is too short" in r.text
    # submitted values are echoed back
    assert 'value="ab"' in r.text


def test_other_user_cannot_delete(app_module, client):
    _register(client, "owner1")
    joke_id = _create_joke(client)

    with TestClient(app_module.app, base_url="https://testserver") as other:
        _register(other, "other1")
        r = other.get(f"/jokes/{joke_id}")
        assert r.status_code == 200
        assert 'value="delete"' not in r.text

        r = other.post(f"/jokes/{joke_id}", data={"intent": "delete"}, follow_redirects=False)
        assert r.status_code == 403

    assert client.get(f"/jokes/{joke_id}").status_code == 200


def test_unknown_intent_is_400(client):
    _register(client)
    joke_id = _create_joke(client)
    r = client.post(f"/jokes/{joke_id}", data={"intent": "update"}, follow_redirects=False)
    assert r.status_code == 400


def test_anonymous_delete_redirects_to_login(client):
    r = client.post("/jokes/whatever", data={"intent": "delete"}, follow_redirects=False)
    assert r.status_code == 302
    assert urlparse(r.headers["location"]).path == "/login"


def test_delete_missing_joke_is_404(client):
    _register(client)
    r = client.post("/jokes/missing", data={"intent": "delete"}, follow_redirects=False)
    assert r.status_code == 404


def test_login_after_register(app_module, client):
    _register(client, "u2", "secret-pw")
    with TestClient(app_module.app, base_url="https://testserver") as c:
        bad = c.post(
            "/login",
            data={"loginType": "login", "username": "u2", "password": "wrong-pw"},
            follow_redirects=False,
        )
        assert bad.status_code == 400
        assert "Username/Password combination is incorrect" in bad.text

        unknown = c.post(
            "/login",
            data={"loginType": "login", "username": "nobody", "password": "secret-pw"},
            follow_redirects=False,
        )
        assert unknown.status_code == 400
        assert "Username/Password combination is incorrect" in unknown.text

        ok = c.post(
            "/login",
            data={"loginType": "login", "username": "u2", "password": "secret-pw"},
            follow_redirects=False,
        )
        assert ok.status_code == 302
        assert c.get("/jokes/new").status_code == 200


def test_login_form_validation(client):
    r = client.post(
        "/login",
        data={"loginType": "login", "username": "   ", "password": "123"},
        follow_redirects=False,
    )
    assert r.status_code == 400
    assert "Username is required" in r.text
    assert "Passwords must be at least 6 characters long" in r.text


def test_register_taken_username(client):
    _register(client, "dupe")
    r = _register(client, "dupe")
    assert r.status_code == 400
    assert "User with username dupe already exists" in r.text


def test_login_redirect_is_local_only(client):
    r = _register(client, redirect_to="https://evil.example/")
    assert r.headers["location"] == "/jokes"


def test_logout(client):
    _register(client)
    r = client.post("/jokes/logout", follow_redirects=False)
    assert r.status_code == 302
    assert r.headers["location"] == "/login"
    assert "__session=" in r.headers["set-cookie"]
    assert client.get("/jokes/new", follow_redirects=False).status_code == 302


def test_logout_without_session(client):
    r = client.post("/jokes/logout", follow_redirects=False)
    assert r.status_code == 302
    assert r.headers["location"] == "/"
    assert "set-cookie" not in r.headers


def test_stale_session_logs_out(app_module, client):
    _register(client, "ghost")
    with app_module.SessionLocal() as db:
        store.delete_user(db, store.find_user_by_name(db, "ghost").id)

    r = client.get("/jokes", follow_redirects=False)
    assert r.status_code == 302
    assert r.headers["location"] == "/login"
    assert "__session=" in r.headers["set-cookie"]


def test_unexpected_error_is_generic_500(app_module, monkeypatch):
    def boom(db):
        raise RuntimeError("database exploded")

    monkeypatch.setattr(app_module.joke_service, "random_joke", boom)
    with TestClient(app_module.app, base_url="https://testserver", raise_server_exceptions=False) as c:
        r = c.get("/jokes")
    assert r.status_code == 500
    assert "Something went wrong" in r.text
    assert "database exploded" not in r.text


def test_app_refuses_to_start_without_secret(app_module, monkeypatch):
    monkeypatch.delenv("SESSION_SECRET", raising=False)
    monkeypatch.delenv("JOKES_SESSION_SECRET", raising=False)
    with pytest.raises(RuntimeError):
        importlib.reload(app_module)


def test_short_username_registers(client):
    r = _register(client, "u1", "pw123456")
    assert r.status_code == 302
    assert r.headers["location"] == "/jokes"


def _drop_user(app_module, username):
    with app_module.SessionLocal() as db:
        store.delete_user(db, store.find_user_by_name(db, username).id)


def test_stale_session_on_create_logs_out(app_module, client):
    _register(client, "ghost")
    _drop_user(app_module, "ghost")

    r = client.post("/jokes/new", data={"name": "abc", "content": "0123456789"}, follow_redirects=False)
    assert r.status_code == 302
    assert r.headers["location"] == "/login"
    assert "__session=" in r.headers["set-cookie"]
    with app_module.SessionLocal() as db:
        assert store.count_jokes(db) == 0


def test_stale_session_on_delete_logs_out(app_module, client):
    with TestClient(app_module.app, base_url="https://testserver") as owner:
        _register(owner, "owner2")
        joke_id = _create_joke(owner)

    _register(client, "ghost")
    _drop_user(app_module, "ghost")

    r = client.post(f"/jokes/{joke_id}", data={"intent": "delete"}, follow_redirects=False)
    assert r.status_code == 302
    assert r.headers["location"] == "/login"
    assert "__session=" in r.headers["set-cookie"]
    with app_module.SessionLocal() as db:
        assert store.find_joke(db, joke_id) is not None
