# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DbSession

from jokes.auth.session import Session, SessionCodec
from jokes.core.results import Inbound, Redirect
from jokes.core.utils import login_url
from jokes.infra import store

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"


@dataclass(frozen=True)
class CurrentUser:
    id: str
    name: str


def get_user_session(codec: SessionCodec, inbound: Inbound) -> Session:
    return codec.decode(inbound.cookie)


def get_user_id(codec: SessionCodec, inbound: Inbound) -> Optional[str]:
    user_id = get_user_session(codec, inbound).get("userId")
    if not user_id or not isinstance(user_id, str):
        return None
    return user_id


def require_user_session(
    codec: SessionCodec,
    inbound: Inbound,
    redirect_to: Optional[str] = None,
) -> Union[str, Redirect]:
    """Return the session user id, or the login redirect the caller must return."""
    user_id = get_user_id(codec, inbound)
    if user_id:
        return user_id
    return Redirect(login_url(redirect_to or inbound.path))


def create_user_session(codec: SessionCodec, user_id: str, redirect_to: str) -> Redirect:
    session = Session()
    session.set("userId", user_id)
    return Redirect(redirect_to, set_session=codec.encode(session))


def logout(codec: SessionCodec, inbound: Inbound) -> Optional[Redirect]:
    """Redirect to login clearing the cookie, or ``None`` when there is no session."""
    if not get_user_session(codec, inbound):
        return None
    return Redirect(LOGIN_PATH, clear_session=True)


def get_user(
    codec: SessionCodec,
    inbound: Inbound,
    db: DbSession,
) -> Union[CurrentUser, Redirect, None]:
    """Load the session user.

    A session pointing at a user that can no longer be loaded is treated as a
    logout: the logout redirect is returned instead of the user.
    """
    user_id = get_user_id(codec, inbound)
    if user_id is None:
        return None
    try:
        u = store.get_user(db, user_id)
    except SQLAlchemyError:
        logger.exception("Failed to load session user %s", user_id)
        u = None
    if u is None:
        logger.info("Session references unknown user %s, logging out", user_id)
        return logout(codec, inbound)
    return CurrentUser(id=u.id, name=u.name)
