from __future__ import annotations

from typing import Any

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from shiftdesk.db.session import get_db
from shiftdesk.models.security import Actor
from shiftdesk.security.abilities import can
from shiftdesk.security.aggregator import project, shared_payload
from shiftdesk.security.auth import SESSION_ACTOR_KEY, extract_actor_id
from shiftdesk.security.config import SecurityConfig
from shiftdesk.security.context import AuthorizationContext, build_context
from shiftdesk.security.decorators import required_abilities
from shiftdesk.security.pipeline import authentication_gate, credential_rotation_gate, retirement_gate
from shiftdesk.security.shared_state import get_shared_state, pop_flash
from shiftdesk.security.store import CapabilityStore
from shiftdesk.settings import get_settings


class AuthorizationDenied(HTTPException):
    def __init__(self, detail: str = "This action is unauthorized.") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def get_security_config(request: Request) -> SecurityConfig:
    config = getattr(request.app.state, "security_config", None)
    if config is None:
        raise RuntimeError("Security config not loaded. Did app startup run?")
    return config


def get_current_actor(request: Request) -> Actor:
    actor = getattr(request.state, "actor", None)
    if actor is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return actor


def get_authz_context(request: Request) -> AuthorizationContext | None:
    return getattr(request.state, "authz", None)


def ensure_allowed(
    ctx: AuthorizationContext | None,
    action: str,
    resource: str,
    subject: Any = None,
) -> None:
    if not can(ctx, action, resource, subject):
        raise AuthorizationDenied()


def enforce_pipeline(
    request: Request,
    config: SecurityConfig = Depends(get_security_config),
    db: Session = Depends(get_db, use_cache=False),
) -> None:
    """
    Global pipeline dependency.

    Runs after routing, so route names (for the credential-rotation allow-list)
    and endpoint decorator metadata are both available. Every store read for the
    request's authorization happens here; nothing is cached across requests.
    """

    store = CapabilityStore(db, config.guard_name)

    actor = None
    actor_id = extract_actor_id(request)
    if actor_id is not None:
        actor = store.load_actor(actor_id)
        if actor is None:
            # Session points at an actor that no longer exists.
            request.session.pop(SESSION_ACTOR_KEY, None)

    retirement_gate(request, actor, config)
    authentication_gate(request, actor, config.match(request.url.path, request.method), config)
    credential_rotation_gate(request, actor, config)

    ctx = build_context(store, actor.id, config.super_admin_role) if actor is not None else None
    snapshot = project(ctx)

    request.state.actor = actor
    request.state.authz = ctx
    request.state.snapshot = snapshot
    if ctx is not None:
        db.info["authz"] = ctx

    settings = get_settings()
    shared = get_shared_state(request)
    for key, value in shared_payload(snapshot, actor).items():
        shared.share(key, value)
    shared.share("name", settings.app_name)
    shared.share("flash", pop_flash(request))
    shared.share("shift", {"application_deadline_days": settings.shift_application_deadline_days})

    for action, resource in required_abilities(request.scope.get("endpoint")):
        if not can(ctx, action, resource):
            raise AuthorizationDenied(config.messages.forbidden)
