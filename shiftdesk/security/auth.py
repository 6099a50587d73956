from __future__ import annotations

import logging
import secrets

import bcrypt
from fastapi import Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from shiftdesk.models.security import Actor

logger = logging.getLogger(__name__)

SESSION_ACTOR_KEY = "actor_id"
SESSION_CSRF_KEY = "_token"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash.
        return False


def extract_actor_id(request: Request) -> int | None:
    """
    Session auth: the signed session cookie carries the actor id.

    Anything that is not an integer is treated as no session at all.
    """

    raw = request.session.get(SESSION_ACTOR_KEY)
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning("Discarding malformed session actor id path=%s", request.url.path)
        request.session.pop(SESSION_ACTOR_KEY, None)
        return None


def csrf_token(request: Request) -> str:
    token = request.session.get(SESSION_CSRF_KEY)
    if not token:
        token = regenerate_csrf_token(request)
    return token


def regenerate_csrf_token(request: Request) -> str:
    token = secrets.token_urlsafe(32)
    request.session[SESSION_CSRF_KEY] = token
    return token


def sign_in(request: Request, actor: Actor) -> None:
    # Fresh session on sign-in so a pre-login session id is never reused.
    request.session.clear()
    request.session[SESSION_ACTOR_KEY] = actor.id
    regenerate_csrf_token(request)


def sign_out(request: Request) -> None:
    """Invalidate the session and rotate the anti-forgery token."""
    request.session.clear()
    regenerate_csrf_token(request)


def authenticate(db: Session, email: str, password: str) -> Actor | None:
    """
    Return the actor for valid credentials, or None.

    Status is not checked here: callers refuse retired actors with their own
    message, and the pipeline evicts sessions that outlive a retirement.
    """

    actor = db.scalars(select(Actor).where(Actor.email == email)).first()
    if actor is None or not verify_password(password, actor.password_hash):
        return None
    return actor
