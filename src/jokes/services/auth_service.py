# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from jokes.auth.session import SessionCodec
from jokes.auth.users import DuplicateUser, login, register
from jokes.core.results import Inbound, Outcome, Page, Redirect
from jokes.core.utils import safe_redirect
from jokes.infra import store
from jokes.permissions import create_user_session, logout

logger = logging.getLogger(__name__)


def validate_username(username: str) -> Optional[str]:
    if not username.strip():
        return "Username is required"
    return None


def validate_password(password: str) -> Optional[str]:
    if len(password) < 6:
        return "Passwords must be at least 6 characters long"
    return None


def login_form(redirect_to: Optional[str]) -> Page:
    return Page("login.html", {"redirect_to": safe_redirect(redirect_to), "action_data": None})


def _rejected(redirect_to: str, fields, form_error=None, field_errors=None) -> Page:
    return Page(
        "login.html",
        {
            "redirect_to": redirect_to,
            "action_data": {
                "field_errors": field_errors,
                "fields": fields,
                "form_error": form_error,
            },
        },
        status=400,
    )


def login_action(
    db: Session,
    codec: SessionCodec,
    login_type: Optional[str],
    username: Optional[str],
    password: Optional[str],
    redirect_to: Optional[str],
) -> Outcome:
    """Handle the combined login/register form."""
    target = safe_redirect(redirect_to)
    if not all(isinstance(v, str) for v in (login_type, username, password)):
        return _rejected(target, None, form_error="Form submitted incorrectly")

    fields = {"login_type": login_type, "username": username}
    field_errors = {
        "username": validate_username(username),
        "password": validate_password(password),
    }
    if any(field_errors.values()):
        return _rejected(target, fields, field_errors=field_errors)

    if login_type == "login":
        user_id = login(db, username, password)
        if not user_id:
            return _rejected(target, fields, form_error="Username/Password combination is incorrect")
        logger.info("User %s logged in", user_id)
        return create_user_session(codec, user_id, target)

    if login_type == "register":
        if store.find_user_by_name(db, username):
            return _rejected(target, fields, form_error=f"User with username {username} already exists")
        try:
            user_id = register(db, username, password)
        except DuplicateUser as e:
            return _rejected(target, fields, form_error=str(e))
        logger.info("User %s registered via login form", user_id)
        return create_user_session(codec, user_id, target)

    return _rejected(target, fields, form_error="Login type invalid")


def logout_action(codec: SessionCodec, inbound: Inbound) -> Outcome:
    out = logout(codec, inbound)
    if out is None:
        return Redirect("/")
    logger.info("Session closed")
    return out
