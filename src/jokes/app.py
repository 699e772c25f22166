# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, Optional

from fastapi import Depends, FastAPI, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from jokes.auth.session import SessionCodec
from jokes.core.results import Failure, Inbound, Outcome, Page, Redirect
from jokes.db import DEFAULT_DATABASE_URL, init_db, make_engine, make_session_factory
from jokes.services import auth_service, joke_service

logger = logging.getLogger(__name__)

# Refuses to import (and so to start) without SESSION_SECRET.
CODEC = SessionCodec.from_env()

DATABASE_URL = os.getenv("JOKES_DATABASE_URL", DEFAULT_DATABASE_URL)
ENGINE = make_engine(DATABASE_URL)
SessionLocal = make_session_factory(ENGINE)
init_db(ENGINE)

app = FastAPI(title="Jokes")

BASE_DIR = Path(__file__).resolve().parent

app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


def get_db() -> Iterator[Session]:
    """Yield one ORM session per request."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def _inbound(request: Request) -> Inbound:
    return Inbound(path=request.url.path, cookie=request.cookies.get(CODEC.settings.name))


def _respond(request: Request, outcome: Outcome, layout: Optional[dict] = None) -> Response:
    """Turn a handler outcome into an HTTP response."""
    base_ctx = dict(layout or {})
    if isinstance(outcome, Redirect):
        resp = RedirectResponse(url=outcome.location, status_code=outcome.status)
        cookie = CODEC.settings
        if outcome.set_session is not None:
            resp.set_cookie(cookie.name, outcome.set_session, max_age=cookie.max_age, **cookie.attributes())
        elif outcome.clear_session:
            resp.delete_cookie(cookie.name, **cookie.attributes())
        return resp
    if isinstance(outcome, Failure):
        ctx = {**base_ctx, "status": outcome.status, "message": outcome.message}
        return templates.TemplateResponse(request, "error.html", ctx, status_code=outcome.status)
    ctx = {**base_ctx, **outcome.context}
    return templates.TemplateResponse(request, outcome.template, ctx, status_code=outcome.status)


def _respond_in_jokes(request: Request, db: Session, outcome: Outcome) -> Response:
    """Render inside the /jokes layout (current user + latest jokes)."""
    if isinstance(outcome, Redirect):
        return _respond(request, outcome)
    layout = joke_service.jokes_layout(db, CODEC, _inbound(request))
    if isinstance(layout, Redirect):
        return _respond(request, layout)
    return _respond(request, outcome, layout)


@app.exception_handler(Exception)
async def _unhandled(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return templates.TemplateResponse(
        request,
        "error.html",
        {"status": 500, "message": "Something went wrong"},
        status_code=500,
    )


# ------------------ Routes ------------------


@app.get("/", response_class=HTMLResponse)
def home(request: Request):
    return _respond(request, Page("index.html"))


@app.get("/login", response_class=HTMLResponse)
def login_get(request: Request, redirectTo: str = "/jokes"):
    return _respond(request, auth_service.login_form(redirectTo))


@app.post("/login")
def login_post(
    request: Request,
    loginType: Optional[str] = Form(None),
    username: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    redirectTo: str = Form("/jokes"),
    db: Session = Depends(get_db),
):
    outcome = auth_service.login_action(db, CODEC, loginType, username, password, redirectTo)
    return _respond(request, outcome)


@app.post("/jokes/logout")
def logout_post(request: Request):
    return _respond(request, auth_service.logout_action(CODEC, _inbound(request)))


@app.get("/jokes", response_class=HTMLResponse)
def jokes_index(request: Request, db: Session = Depends(get_db)):
    outcome = joke_service.random_joke(db)
    if isinstance(outcome, Failure):
        outcome = Page(
            "jokes/index.html",
            {"random_joke": None, "error": "No jokes to display"},
            status=outcome.status,
        )
    return _respond_in_jokes(request, db, outcome)


@app.get("/jokes/new", response_class=HTMLResponse)
def new_joke_get(request: Request, db: Session = Depends(get_db)):
    return _respond_in_jokes(request, db, joke_service.new_joke_form(CODEC, _inbound(request)))


@app.post("/jokes/new")
def new_joke_post(
    request: Request,
    name: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    outcome = joke_service.create_joke(db, CODEC, _inbound(request), name, content)
    return _respond_in_jokes(request, db, outcome)


@app.get("/jokes/{joke_id}", response_class=HTMLResponse)
def joke_get(request: Request, joke_id: str, db: Session = Depends(get_db)):
    return _respond_in_jokes(request, db, joke_service.joke_detail(db, CODEC, _inbound(request), joke_id))


@app.post("/jokes/{joke_id}")
def joke_post(
    request: Request,
    joke_id: str,
    intent: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    outcome = joke_service.delete_joke(db, CODEC, _inbound(request), joke_id, intent)
    return _respond_in_jokes(request, db, outcome)
