# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional
from urllib.parse import urlencode

DEFAULT_REDIRECT = "/jokes"


def safe_redirect(to: Optional[str], default: str = DEFAULT_REDIRECT) -> str:
    """Only allow local absolute paths as post-login targets."""
    target = (to or "").strip()
    if not target or not target.startswith("/") or target.startswith("//"):
        return default
    return target


def login_url(redirect_to: str) -> str:
    return "/login?" + urlencode({"redirectTo": redirect_to})
