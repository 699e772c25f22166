#!/usr/bin/env python3
"""Load users and jokes from a YAML file.

  python scripts/seed.py [data/seed.yml]

Users that already exist are reused; their password is left untouched.
"""
from __future__ import annotations

import os
import sys
from pathlib import Path

from jokes.db import DEFAULT_DATABASE_URL, init_db, make_engine, make_session_factory
from jokes.infra.seed import load_seed_file, seed

BASE_DIR = Path(__file__).resolve().parents[1]
DEFAULT_SEED_PATH = BASE_DIR / "data" / "seed.yml"
DATABASE_URL = os.getenv("JOKES_DATABASE_URL", DEFAULT_DATABASE_URL)


def main() -> None:
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_SEED_PATH
    engine = make_engine(DATABASE_URL)
    init_db(engine)
    SessionLocal = make_session_factory(engine)

    with SessionLocal() as db:
        users, jokes = seed(db, load_seed_file(path))
    print(f"OK -> {users} users, {jokes} jokes from {path}")


if __name__ == "__main__":
    main()
