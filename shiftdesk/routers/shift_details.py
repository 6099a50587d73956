from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from shiftdesk.db.session import get_db
from shiftdesk.models.workforce import ShiftDetail
from shiftdesk.schemas.workforce import ShiftDetailOut, ShiftDetailUpdate
from shiftdesk.security.context import AuthorizationContext
from shiftdesk.security.dependencies import ensure_allowed, get_authz_context

router = APIRouter(prefix="/shift-details", tags=["shift-details"])


@router.get("/{detail_id}", response_model=ShiftDetailOut)
def show_shift_detail(
    detail_id: int,
    db: Session = Depends(get_db),
    ctx: AuthorizationContext | None = Depends(get_authz_context),
) -> ShiftDetail:
    detail = db.get(ShiftDetail, detail_id)
    if detail is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shift detail not found")
    ensure_allowed(ctx, "view", "shift_detail", detail)
    return detail


@router.patch("/{detail_id}", response_model=ShiftDetailOut)
def update_shift_detail(
    detail_id: int,
    payload: ShiftDetailUpdate,
    db: Session = Depends(get_db),
    ctx: AuthorizationContext | None = Depends(get_authz_context),
) -> ShiftDetail:
    detail = db.get(ShiftDetail, detail_id)
    if detail is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shift detail not found")
    ensure_allowed(ctx, "update", "shift_detail", detail)

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(detail, field, value)
    db.commit()
    db.refresh(detail)
    return detail
