# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from itsdangerous import BadData, URLSafeTimedSerializer

logger = logging.getLogger(__name__)

COOKIE_NAME = os.getenv("JOKES_COOKIE_NAME", "__session")
SESSION_SALT = os.getenv("JOKES_SESSION_SALT", "jokes.session.v1")

_FLASH_PREFIX = "__flash_"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "y"}


def load_secret() -> str:
    """Return the session signing secret or refuse to continue without one."""
    secret = os.getenv("SESSION_SECRET") or os.getenv("JOKES_SESSION_SECRET")
    if not secret:
        raise RuntimeError("SESSION_SECRET not set")
    return secret


@dataclass(frozen=True)
class CookieSettings:
    name: str = "__session"
    path: str = "/jokes"
    max_age: int = 3600
    httponly: bool = True
    secure: bool = True
    samesite: str = "lax"

    @classmethod
    def from_env(cls) -> "CookieSettings":
        return cls(
            name=COOKIE_NAME,
            path=os.getenv("JOKES_COOKIE_PATH", "/jokes"),
            max_age=int(os.getenv("JOKES_SESSION_MAX_AGE", "3600")),
            secure=_env_bool("JOKES_COOKIE_SECURE", "true"),
        )

    def attributes(self) -> dict:
        """Keyword arguments shared by ``set_cookie`` and ``delete_cookie``."""
        return {
            "path": self.path,
            "httponly": self.httponly,
            "secure": self.secure,
            "samesite": self.samesite,
        }


class Session:
    """Small key/value payload carried in the session cookie.

    Flash values survive exactly one read: ``get`` returns them and drops
    them from the payload, so the next ``encode`` no longer carries them.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(data or {})

    @property
    def data(self) -> Dict[str, Any]:
        return dict(self._data)

    def has(self, key: str) -> bool:
        return key in self._data or (_FLASH_PREFIX + key) in self._data

    def get(self, key: str, default: Any = None) -> Any:
        flash_key = _FLASH_PREFIX + key
        if flash_key in self._data:
            return self._data.pop(flash_key)
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def flash(self, key: str, value: Any) -> None:
        self._data[_FLASH_PREFIX + key] = value

    def unset(self, key: str) -> None:
        self._data.pop(key, None)
        self._data.pop(_FLASH_PREFIX + key, None)

    def __bool__(self) -> bool:
        return bool(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Session):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        return f"Session({self._data!r})"


class SessionCodec:
    """Signs sessions into cookie values and reads them back."""

    def __init__(self, secret: str, settings: Optional[CookieSettings] = None):
        if not secret:
            raise RuntimeError("SESSION_SECRET not set")
        self.settings = settings or CookieSettings()
        self._serializer = URLSafeTimedSerializer(secret_key=secret, salt=SESSION_SALT)

    @classmethod
    def from_env(cls) -> "SessionCodec":
        return cls(load_secret(), CookieSettings.from_env())

    def encode(self, session: Session) -> str:
        return self._serializer.dumps(session.data)

    def decode(self, value: Optional[str]) -> Session:
        if not value:
            return Session()
        try:
            data = self._serializer.loads(value, max_age=self.settings.max_age)
        except BadData:
            logger.debug("Discarding invalid session cookie")
            return Session()
        if not isinstance(data, dict):
            return Session()
        return Session(data)
