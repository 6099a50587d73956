from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from shiftdesk.db.session import get_db
from shiftdesk.models.security import Actor, ActorStatus, Capability, Role
from shiftdesk.schemas.security import (
    ActorOut,
    CapabilityOut,
    RoleDetailOut,
    RoleIn,
    SyncCapabilitiesIn,
    SyncRolesIn,
)
from shiftdesk.security.config import SecurityConfig
from shiftdesk.security.decorators import require_ability
from shiftdesk.security.dependencies import get_security_config

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_role(db: Session, role_id: int) -> Role:
    role = db.scalars(select(Role).where(Role.id == role_id).options(selectinload(Role.capabilities))).first()
    if role is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Role not found")
    return role


def _ensure_name_free(db: Session, name: str, guard_name: str, role_id: int | None = None) -> None:
    stmt = select(Role.id).where(Role.name == name).where(Role.guard_name == guard_name)
    if role_id is not None:
        stmt = stmt.where(Role.id != role_id)
    if db.scalars(stmt).first() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Role name already taken")


def _ensure_not_reserved(role: Role, config: SecurityConfig) -> None:
    if role.name == config.super_admin_role:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="The reserved role cannot be renamed or deleted")


def _get_actor(db: Session, actor_id: int) -> Actor:
    actor = db.scalars(select(Actor).where(Actor.id == actor_id).options(selectinload(Actor.roles))).first()
    if actor is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Actor not found")
    return actor


# ---- Roles ---------------------------------------------------------------------------


@router.get("/roles", response_model=list[RoleDetailOut])
@require_ability("view_any", "role")
def list_roles(db: Session = Depends(get_db)) -> list[Role]:
    stmt = select(Role).options(selectinload(Role.capabilities)).order_by(Role.id)
    return list(db.scalars(stmt).all())


@router.post("/roles", response_model=RoleDetailOut, status_code=status.HTTP_201_CREATED)
@require_ability("create", "role")
def create_role(
    payload: RoleIn,
    db: Session = Depends(get_db),
    config: SecurityConfig = Depends(get_security_config),
) -> Role:
    _ensure_name_free(db, payload.name, config.guard_name)

    role = Role(name=payload.name, guard_name=config.guard_name)
    db.add(role)
    db.commit()
    return _get_role(db, role.id)


@router.patch("/roles/{role_id}", response_model=RoleDetailOut)
@require_ability("update", "role")
def rename_role(
    role_id: int,
    payload: RoleIn,
    db: Session = Depends(get_db),
    config: SecurityConfig = Depends(get_security_config),
) -> Role:
    role = _get_role(db, role_id)
    _ensure_not_reserved(role, config)
    _ensure_name_free(db, payload.name, role.guard_name, role_id)
    role.name = payload.name
    db.commit()
    return _get_role(db, role_id)


@router.delete("/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
@require_ability("delete", "role")
def delete_role(
    role_id: int,
    db: Session = Depends(get_db),
    config: SecurityConfig = Depends(get_security_config),
) -> Response:
    role = _get_role(db, role_id)
    _ensure_not_reserved(role, config)
    # Assignment edges go with the role; capabilities stay.
    db.delete(role)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/roles/{role_id}/capabilities", response_model=RoleDetailOut)
@require_ability("update", "role")
def sync_role_capabilities(role_id: int, payload: SyncCapabilitiesIn, db: Session = Depends(get_db)) -> Role:
    role = _get_role(db, role_id)

    wanted = set(payload.capability_ids)
    capabilities = list(db.scalars(select(Capability).where(Capability.id.in_(wanted))).all()) if wanted else []
    missing = wanted - {c.id for c in capabilities}
    if missing:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown capability ids: {sorted(missing)}",
        )

    role.capabilities = capabilities
    db.commit()
    logger.info("Synced role capabilities role_id=%s count=%d", role_id, len(capabilities))
    return _get_role(db, role_id)


# ---- Capabilities --------------------------------------------------------------------


@router.get("/capabilities", response_model=list[CapabilityOut])
@require_ability("view_any", "permission")
def list_capabilities(db: Session = Depends(get_db)) -> list[Capability]:
    return list(db.scalars(select(Capability).order_by(Capability.name)).all())


# ---- Actors --------------------------------------------------------------------------


@router.get("/actors", response_model=list[ActorOut])
@require_ability("view_any", "user")
def list_actors(db: Session = Depends(get_db)) -> list[Actor]:
    stmt = select(Actor).options(selectinload(Actor.roles)).order_by(Actor.id)
    return list(db.scalars(stmt).all())


@router.put("/actors/{actor_id}/roles", response_model=ActorOut)
@require_ability("update", "user")
def sync_actor_roles(actor_id: int, payload: SyncRolesIn, db: Session = Depends(get_db)) -> Actor:
    actor = _get_actor(db, actor_id)

    wanted = set(payload.role_ids)
    roles = list(db.scalars(select(Role).where(Role.id.in_(wanted))).all()) if wanted else []
    missing = wanted - {r.id for r in roles}
    if missing:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown role ids: {sorted(missing)}",
        )

    actor.roles = roles
    db.commit()
    logger.info("Synced actor roles actor_id=%s count=%d", actor_id, len(roles))
    return _get_actor(db, actor_id)


@router.post("/actors/{actor_id}/retire", response_model=ActorOut)
@require_ability("update", "user")
def retire_actor(actor_id: int, db: Session = Depends(get_db)) -> Actor:
    actor = _get_actor(db, actor_id)
    actor.status = ActorStatus.RETIRED
    db.commit()
    logger.info("Retired actor actor_id=%s", actor_id)
    return _get_actor(db, actor_id)


@router.post("/actors/{actor_id}/require-password-change", response_model=ActorOut)
@require_ability("update", "user")
def require_password_change(actor_id: int, db: Session = Depends(get_db)) -> Actor:
    actor = _get_actor(db, actor_id)
    actor.must_change_password = True
    db.commit()
    return _get_actor(db, actor_id)
