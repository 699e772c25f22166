# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Record access for users and jokes.

Every mutation commits on its own; there are no multi-statement transactions,
so check-then-act flows in the handlers are not isolated from other writers.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from jokes.models import Joke, User


# --- Users ---


def find_user_by_name(db: Session, name: str) -> Optional[User]:
    return db.scalars(select(User).where(User.name == name)).first()


def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.get(User, user_id)


def create_user(db: Session, *, name: str, password_hash: str) -> User:
    """Insert a user. A taken ``name`` surfaces as ``IntegrityError``."""
    user = User(name=name, password_hash=password_hash)
    db.add(user)
    db.commit()
    return user


def delete_user(db: Session, user_id: str) -> bool:
    user = db.get(User, user_id)
    if user is None:
        return False
    db.delete(user)
    db.commit()
    return True


# --- Jokes ---


def find_joke(db: Session, joke_id: str) -> Optional[Joke]:
    return db.get(Joke, joke_id)


def create_joke(db: Session, *, name: str, content: str, user_id: str) -> Joke:
    joke = Joke(name=name, content=content, user_id=user_id)
    db.add(joke)
    db.commit()
    return joke


def delete_joke(db: Session, joke_id: str) -> bool:
    joke = db.get(Joke, joke_id)
    if joke is None:
        return False
    db.delete(joke)
    db.commit()
    return True


def count_jokes(db: Session) -> int:
    return int(db.scalar(select(func.count()).select_from(Joke)) or 0)


def joke_at(db: Session, offset: int) -> Optional[Joke]:
    """Return the joke at ``offset`` in a stable (creation) order."""
    stmt = select(Joke).order_by(Joke.created_at, Joke.id).offset(offset).limit(1)
    return db.scalars(stmt).first()


def latest_jokes(db: Session, limit: int = 5) -> List[Joke]:
    stmt = select(Joke).order_by(Joke.created_at.desc(), Joke.id).limit(limit)
    return list(db.scalars(stmt))
