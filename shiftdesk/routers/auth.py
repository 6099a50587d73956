from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response
from sqlalchemy.orm import Session

from shiftdesk.db.session import get_db
from shiftdesk.models.security import Actor, ActorStatus
from shiftdesk.schemas.security import LoginIn, PasswordChangeIn
from shiftdesk.security.auth import authenticate, csrf_token, hash_password, sign_in, sign_out
from shiftdesk.security.config import SecurityConfig
from shiftdesk.security.dependencies import get_current_actor, get_security_config
from shiftdesk.security.pipeline import wants_json
from shiftdesk.security.shared_state import flash, render_page

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def _redirect(request: Request, route_name: str) -> RedirectResponse:
    return RedirectResponse(request.app.url_path_for(route_name), status_code=status.HTTP_303_SEE_OTHER)


@router.get("/login", name="login")
def login_page(request: Request) -> Response:
    return render_page(request, "auth/login", {"csrf_token": csrf_token(request)})


@router.post("/login", name="login.store")
def login(
    payload: LoginIn,
    request: Request,
    config: SecurityConfig = Depends(get_security_config),
    db: Session = Depends(get_db),
) -> Response:
    actor = authenticate(db, payload.email, payload.password)

    message = None
    if actor is None:
        message = config.messages.invalid_credentials
    elif actor.status == ActorStatus.RETIRED:
        logger.info("Refused sign-in for retired actor id=%s", actor.id)
        message = config.messages.retired

    if message is not None:
        if wants_json(request):
            return JSONResponse({"error": message}, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)
        flash(request, "error", message)
        return _redirect(request, config.pipeline.login_route)

    sign_in(request, actor)
    logger.info("Actor signed in id=%s", actor.id)
    if actor.must_change_password:
        return _redirect(request, config.pipeline.credential_change_route)
    return _redirect(request, config.pipeline.home_route)


@router.post("/logout", name="logout")
def logout(request: Request, config: SecurityConfig = Depends(get_security_config)) -> Response:
    sign_out(request)
    return _redirect(request, config.pipeline.login_route)


@router.get("/password/change", name="password.change")
def change_password_page(request: Request, actor: Actor = Depends(get_current_actor)) -> Response:
    return render_page(
        request,
        "auth/change-password",
        {"must_change_password": actor.must_change_password, "csrf_token": csrf_token(request)},
    )


@router.post("/password/change", name="password.change.store")
def change_password(
    payload: PasswordChangeIn,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    config: SecurityConfig = Depends(get_security_config),
    db: Session = Depends(get_db),
) -> Response:
    record = db.get(Actor, actor.id)
    if record is None:
        sign_out(request)
        return _redirect(request, config.pipeline.login_route)

    record.password_hash = hash_password(payload.password)
    record.must_change_password = False
    db.commit()
    logger.info("Actor changed password id=%s", record.id)

    flash(request, "success", config.messages.password_changed)
    return _redirect(request, config.pipeline.home_route)
