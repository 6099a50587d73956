from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from shiftdesk.db.session import get_db
from shiftdesk.models.security import Actor
from shiftdesk.models.workforce import DailyNote
from shiftdesk.schemas.workforce import DailyNoteIn, DailyNoteOut, DailyNoteUpdate
from shiftdesk.security.context import AuthorizationContext
from shiftdesk.security.decorators import require_ability
from shiftdesk.security.dependencies import ensure_allowed, get_authz_context, get_current_actor

router = APIRouter(prefix="/daily-notes", tags=["daily-notes"])


def _get_note(db: Session, note_id: int) -> DailyNote:
    note = db.get(DailyNote, note_id)
    if note is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Daily note not found")
    return note


@router.get("", response_model=list[DailyNoteOut])
@require_ability("view_any", "daily_note")
def list_daily_notes(db: Session = Depends(get_db)) -> list[DailyNote]:
    stmt = select(DailyNote).order_by(DailyNote.note_date.desc(), DailyNote.id.desc())
    return list(db.scalars(stmt).all())


@router.post("", response_model=DailyNoteOut, status_code=status.HTTP_201_CREATED)
@require_ability("create", "daily_note")
def create_daily_note(
    payload: DailyNoteIn,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> DailyNote:
    note = DailyNote(user_id=actor.id, note_date=payload.note_date, body=payload.body)
    db.add(note)
    db.commit()
    db.refresh(note)
    return note


@router.patch("/{note_id}", response_model=DailyNoteOut)
def update_daily_note(
    note_id: int,
    payload: DailyNoteUpdate,
    db: Session = Depends(get_db),
    ctx: AuthorizationContext | None = Depends(get_authz_context),
) -> DailyNote:
    note = _get_note(db, note_id)
    ensure_allowed(ctx, "update", "daily_note", note)

    note.body = payload.body
    db.commit()
    db.refresh(note)
    return note


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_daily_note(
    note_id: int,
    db: Session = Depends(get_db),
    ctx: AuthorizationContext | None = Depends(get_authz_context),
) -> Response:
    note = _get_note(db, note_id)
    ensure_allowed(ctx, "delete", "daily_note", note)

    db.delete(note)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
