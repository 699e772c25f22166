# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Handler inputs and outcomes.

Handlers never touch the framework request or raise to redirect. They
receive an ``Inbound`` (request path + raw session cookie) and return one of:

- ``Page``: render a template with a context and a status code
- ``Redirect``: go elsewhere, optionally setting or clearing the session cookie
- ``Failure``: an HTTP error status with a short message (400/403/404)

``jokes.app`` turns the outcome into a response.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class Inbound:
    path: str
    cookie: Optional[str] = None


@dataclass(frozen=True)
class Page:
    template: str
    context: Dict[str, Any] = field(default_factory=dict)
    status: int = 200


@dataclass(frozen=True)
class Redirect:
    location: str
    status: int = 302
    set_session: Optional[str] = None
    clear_session: bool = False


@dataclass(frozen=True)
class Failure:
    status: int
    message: str


Outcome = Union[Page, Redirect, Failure]


def bad_request(message: str = "Bad request") -> Failure:
    return Failure(status=400, message=message)


def forbidden(message: str = "Forbidden") -> Failure:
    return Failure(status=403, message=message)


def not_found(message: str = "Not found") -> Failure:
    return Failure(status=404, message=message)
