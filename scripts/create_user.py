#!/usr/bin/env python3
from __future__ import annotations

import os
from getpass import getpass

from jokes.auth.users import DuplicateUser, register
from jokes.db import DEFAULT_DATABASE_URL, init_db, make_engine, make_session_factory

DATABASE_URL = os.getenv("JOKES_DATABASE_URL", DEFAULT_DATABASE_URL)


def main() -> None:
    engine = make_engine(DATABASE_URL)
    init_db(engine)
    SessionLocal = make_session_factory(engine)

    username = input("Username: ").strip()
    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")

    with SessionLocal() as db:
        try:
            user_id = register(db, username, pw1)
        except DuplicateUser as e:
            raise SystemExit(str(e))
        except ValueError:
            raise SystemExit("Empty password")
    print(f"OK -> {username} ({user_id})")


if __name__ == "__main__":
    main()
