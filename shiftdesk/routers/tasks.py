from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from shiftdesk.db.session import get_db
from shiftdesk.models.workforce import Task
from shiftdesk.schemas.workforce import TaskOut, TaskUpdate
from shiftdesk.security.context import AuthorizationContext
from shiftdesk.security.dependencies import ensure_allowed, get_authz_context

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _get_task(db: Session, task_id: int) -> Task:
    task = db.get(Task, task_id)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


@router.get("/{task_id}", response_model=TaskOut)
def show_task(
    task_id: int,
    db: Session = Depends(get_db),
    ctx: AuthorizationContext | None = Depends(get_authz_context),
) -> Task:
    task = _get_task(db, task_id)
    ensure_allowed(ctx, "view", "task", task)
    return task


@router.patch("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    payload: TaskUpdate,
    db: Session = Depends(get_db),
    ctx: AuthorizationContext | None = Depends(get_authz_context),
) -> Task:
    task = _get_task(db, task_id)
    ensure_allowed(ctx, "update", "task", task)

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(task, field, value)
    db.commit()
    db.refresh(task)
    return task
