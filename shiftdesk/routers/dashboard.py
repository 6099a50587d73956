from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from shiftdesk.models.security import Actor
from shiftdesk.security.dependencies import get_current_actor
from shiftdesk.security.shared_state import render_page

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard", name="dashboard")
def dashboard(request: Request, actor: Actor = Depends(get_current_actor)) -> Response:
    return render_page(request, "dashboard", {"greeting": f"Welcome back, {actor.name}"})
