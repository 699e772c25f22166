# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import random
from typing import Any, Dict, Optional, Union

from sqlalchemy.orm import Session

from jokes.auth.session import SessionCodec
from jokes.core.results import (
    Inbound,
    Outcome,
    Page,
    Redirect,
    bad_request,
    forbidden,
    not_found,
)
from jokes.infra import store
from jokes.permissions import get_user, get_user_id, require_user_session

logger = logging.getLogger(__name__)

SIDEBAR_SIZE = 5


def validate_joke_name(name: str) -> Optional[str]:
    if len(name) < 3:
        return "Name is too short"
    return None


def validate_joke_content(content: str) -> Optional[str]:
    if len(content) < 10:
        return "Joke is too short"
    return None


def jokes_layout(db: Session, codec: SessionCodec, inbound: Inbound) -> Union[Dict[str, Any], Redirect]:
    """Shared context for pages under /jokes: who is logged in + latest jokes."""
    user = get_user(codec, inbound, db)
    if isinstance(user, Redirect):
        return user
    jokes = [{"id": j.id, "name": j.name} for j in store.latest_jokes(db, SIDEBAR_SIZE)]
    return {"user": user, "joke_list_items": jokes}


def random_joke(db: Session, rng: Optional[random.Random] = None) -> Outcome:
    """Pick one joke uniformly at random."""
    count = store.count_jokes(db)
    if count == 0:
        return not_found("No random joke found")
    offset = (rng or random).randrange(count)
    joke = store.joke_at(db, offset)
    if joke is None:
        # Corpus shrank between count and fetch.
        return not_found("No random joke found")
    return Page("jokes/index.html", {"random_joke": joke})


def joke_detail(db: Session, codec: SessionCodec, inbound: Inbound, joke_id: str) -> Outcome:
    joke = store.find_joke(db, joke_id)
    if joke is None:
        return not_found(f"{joke_id} not found")
    user_id = get_user_id(codec, inbound)
    is_owner = joke.user_id == user_id
    return Page("jokes/detail.html", {"joke": joke, "is_owner": is_owner})


def new_joke_form(codec: SessionCodec, inbound: Inbound) -> Outcome:
    user_id = require_user_session(codec, inbound)
    if isinstance(user_id, Redirect):
        return user_id
    return Page("jokes/new.html", {"action_data": None})


def create_joke(
    db: Session,
    codec: SessionCodec,
    inbound: Inbound,
    name: Optional[str],
    content: Optional[str],
) -> Outcome:
    """Validate the submitted fields and store the joke under the session user."""
    user_id = require_user_session(codec, inbound)
    if isinstance(user_id, Redirect):
        return user_id
    # Stale session (user gone) ends in the logout redirect.
    user = get_user(codec, inbound, db)
    if isinstance(user, Redirect):
        return user

    if not isinstance(name, str) or not isinstance(content, str):
        return Page(
            "jokes/new.html",
            {"action_data": {
                "field_errors": None,
                "fields": None,
                "form_error": "Form submitted incorrectly",
            }},
            status=400,
        )

    field_errors = {
        "name": validate_joke_name(name),
        "content": validate_joke_content(content),
    }
    fields = {"name": name, "content": content}

    if any(field_errors.values()):
        return Page(
            "jokes/new.html",
            {"action_data": {
                "field_errors": field_errors,
                "fields": fields,
                "form_error": None,
            }},
            status=400,
        )

    joke = store.create_joke(db, name=name, content=content, user_id=user_id)
    logger.info("User %s created joke %s", user_id, joke.id)
    return Redirect(f"/jokes/{joke.id}")


def delete_joke(
    db: Session,
    codec: SessionCodec,
    inbound: Inbound,
    joke_id: str,
    intent: Optional[str],
) -> Outcome:
    """Delete a joke on behalf of its owner."""
    if intent != "delete":
        return bad_request("Operation not supported")

    user_id = require_user_session(codec, inbound)
    if isinstance(user_id, Redirect):
        return user_id
    user = get_user(codec, inbound, db)
    if isinstance(user, Redirect):
        return user

    joke = store.find_joke(db, joke_id)
    if joke is None:
        return not_found(f"{joke_id} not found")
    if joke.user_id != user_id:
        logger.warning("User %s tried to delete joke %s owned by %s", user_id, joke_id, joke.user_id)
        return forbidden()

    store.delete_joke(db, joke_id)
    logger.info("User %s deleted joke %s", user_id, joke_id)
    return Redirect("/jokes")
