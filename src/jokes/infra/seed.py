# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Seed data loading (users + jokes) from a YAML file.

Expected layout::

    users:
      <username>:
        password: <plain password>
    jokes:
      - owner: <username>
        name: <title>
        content: <text>
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml
from sqlalchemy.orm import Session

from jokes.auth.users import register
from jokes.infra import store

logger = logging.getLogger(__name__)


def load_seed_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Seed file not found: {path}")
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Seed file must contain a mapping: {path}")
    return raw


def seed(db: Session, raw: Dict[str, Any]) -> Tuple[int, int]:
    """Create missing users, then their jokes. Returns (users created, jokes created)."""
    ids: Dict[str, str] = {}
    created_users = 0
    for uname, udata in (raw.get("users") or {}).items():
        username = str(uname).strip()
        if not username:
            continue
        existing = store.find_user_by_name(db, username)
        if existing:
            ids[username] = existing.id
            continue
        password = str((udata or {}).get("password") or "") if isinstance(udata, dict) else ""
        if not password:
            logger.warning("Skipping user %s without password", username)
            continue
        ids[username] = register(db, username, password)
        created_users += 1

    created_jokes = 0
    for entry in raw.get("jokes") or []:
        if not isinstance(entry, dict):
            continue
        owner = str(entry.get("owner") or "").strip()
        if owner not in ids:
            logger.warning("Skipping joke with unknown owner %r", owner)
            continue
        name = str(entry.get("name") or "").strip()
        content = str(entry.get("content") or "").strip()
        if not name or not content:
            continue
        store.create_joke(db, name=name, content=content, user_id=ids[owner])
        created_jokes += 1

    return created_users, created_jokes
