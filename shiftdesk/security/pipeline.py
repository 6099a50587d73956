"""
Request pipeline gates.

Order for every request (see `dependencies.enforce_pipeline`):

    retirement -> authentication -> credential rotation -> shared state -> endpoint abilities

A gate that stops the request raises a `GateOutcome`. The app-level handler
turns it into a redirect or a `{"error": ...}` body; it never surfaces as a
server error. Response hardening is an HTTP middleware so it also covers
redirects, denials and error bodies.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response

from shiftdesk.models.security import Actor
from shiftdesk.security.auth import sign_out
from shiftdesk.security.config import EffectiveRule, SecurityConfig
from shiftdesk.security.shared_state import flash

logger = logging.getLogger(__name__)

ROBOTS_HEADER = "X-Robots-Tag"
ROBOTS_DIRECTIVE = "noindex, nofollow"


class GateOutcome(Exception):
    """A gate short-circuited the request. Without a more specific outcome it is a plain 403."""

    def to_response(self, request: Request) -> Response:
        return JSONResponse({"error": str(self)}, status_code=status.HTTP_403_FORBIDDEN)


class GateRedirect(GateOutcome):
    def __init__(self, route_name: str) -> None:
        super().__init__(route_name)
        self.route_name = route_name

    def to_response(self, request: Request) -> Response:
        return RedirectResponse(
            request.app.url_path_for(self.route_name),
            status_code=status.HTTP_303_SEE_OTHER,
        )


class GateDenied(GateOutcome):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def to_response(self, request: Request) -> Response:
        return JSONResponse({"error": self.message}, status_code=self.status_code)


class StaleSessionRedirect(GateRedirect):
    """A retired actor still held a valid session; it has been destroyed."""


class UnauthenticatedRedirect(GateRedirect):
    pass


class CredentialRotationRedirect(GateRedirect):
    pass


class CredentialRotationDenied(GateDenied):
    pass


def wants_json(request: Request) -> bool:
    """Data (non-navigational) request: the client asked for JSON."""
    return "json" in request.headers.get("accept", "").lower()


def route_name(request: Request) -> str | None:
    route = request.scope.get("route")
    return getattr(route, "name", None)


def retirement_gate(request: Request, actor: Actor | None, config: SecurityConfig) -> None:
    if actor is None or not actor.is_retired:
        return

    logger.info("Evicting retired actor session actor_id=%s path=%s", actor.id, request.url.path)
    sign_out(request)
    flash(request, "error", config.messages.retired)
    raise StaleSessionRedirect(config.pipeline.login_route)


def authentication_gate(
    request: Request,
    actor: Actor | None,
    rule: EffectiveRule,
    config: SecurityConfig,
) -> None:
    if actor is not None or not rule.auth_required:
        return

    if wants_json(request):
        raise GateDenied(status.HTTP_401_UNAUTHORIZED, config.messages.unauthenticated)
    raise UnauthenticatedRedirect(config.pipeline.login_route)


def credential_rotation_gate(request: Request, actor: Actor | None, config: SecurityConfig) -> None:
    if actor is None or not actor.must_change_password:
        return

    if route_name(request) in config.pipeline.rotation_allowed_routes:
        return

    logger.info("Credential rotation required actor_id=%s path=%s", actor.id, request.url.path)
    if wants_json(request):
        raise CredentialRotationDenied(status.HTTP_403_FORBIDDEN, config.messages.credential_rotation_required)
    raise CredentialRotationRedirect(config.pipeline.credential_change_route)


async def gate_outcome_handler(request: Request, exc: GateOutcome) -> Response:
    return exc.to_response(request)


async def harden_response(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    try:
        response = await call_next(request)
    except Exception:
        # 500s are rendered here so they carry the header too.
        logger.exception("Unhandled error method=%s path=%s", request.method, request.url.path)
        response = JSONResponse({"error": "Server Error"}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    response.headers[ROBOTS_HEADER] = ROBOTS_DIRECTIVE
    return response


def install_pipeline(app: FastAPI) -> None:
    app.add_exception_handler(GateOutcome, gate_outcome_handler)
    app.middleware("http")(harden_response)
