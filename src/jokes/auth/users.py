# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jokes.auth.passwords import hash_password, verify_password
from jokes.infra import store

logger = logging.getLogger(__name__)


class DuplicateUser(Exception):
    def __init__(self, username: str):
        super().__init__(f"User with username {username} already exists")
        self.username = username


def register(db: Session, username: str, password: str) -> str:
    """Create a user with a freshly salted password hash and return its id."""
    password_hash = hash_password(password)
    try:
        user = store.create_user(db, name=username, password_hash=password_hash)
    except IntegrityError as e:
        db.rollback()
        raise DuplicateUser(username) from e
    logger.info("Registered user %s", user.id)
    return user.id


def login(db: Session, username: str, password: str) -> Optional[str]:
    """Return the user id for valid credentials, ``None`` otherwise.

    An unknown username and a wrong password give the same answer.
    """
    u = store.find_user_by_name(db, username)
    if not u:
        return None
    if not verify_password(u.password_hash, password):
        return None
    return u.id
