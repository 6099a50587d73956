from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from shiftdesk.security.aggregator import project, shared_payload


class SharedStateError(RuntimeError):
    """Raised when code tries to overwrite a shared prop that was already written."""


class SharedState:
    """
    Props attached to every rendered page for this request.

    Keys are write-once: the authorization payload is written by the pipeline
    and nothing later in the request can replace it.
    """

    def __init__(self) -> None:
        self._props: dict[str, Any] = {}

    def share(self, key: str, value: Any) -> None:
        if key in self._props:
            raise SharedStateError(f"shared prop {key!r} is already set for this request")
        self._props[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._props

    def as_dict(self) -> dict[str, Any]:
        return dict(self._props)


def get_shared_state(request: Request) -> SharedState:
    state = getattr(request.state, "shared", None)
    if state is None:
        state = SharedState()
        request.state.shared = state
    return state


def pop_flash(request: Request) -> dict[str, str]:
    if "session" not in request.scope:
        return {}
    return dict(request.session.pop("_flash", {}) or {})


def flash(request: Request, key: str, message: str) -> None:
    messages = dict(request.session.get("_flash", {}) or {})
    messages[key] = message
    request.session["_flash"] = messages


def render_page(
    request: Request,
    component: str,
    props: Mapping[str, Any] | None = None,
    status_code: int = 200,
) -> JSONResponse:
    """
    Page response: `{"component", "props", "url"}`.

    Shared props win over page props with the same key, so a handler cannot
    erase `auth` or `permissions` by accident.
    """

    shared = get_shared_state(request)
    if "auth" not in shared:
        # Route ran without the pipeline (e.g. in a bare test app): share the inert payload.
        for key, value in shared_payload(project(None), None).items():
            shared.share(key, value)

    merged: dict[str, Any] = dict(props or {})
    merged.update(shared.as_dict())
    return JSONResponse(
        {"component": component, "props": merged, "url": request.url.path},
        status_code=status_code,
    )
