from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from shiftdesk.db.base import Base
from shiftdesk.db.session import SessionLocal, engine
from shiftdesk.models.security import Actor, ActorStatus
from shiftdesk.models.workforce import Post, ShiftDetail, Task
from shiftdesk.security.auth import hash_password
from shiftdesk.security.catalog import projection_capabilities
from shiftdesk.security.config import SecurityConfig
from shiftdesk.security.seeder import ensure_role, grant_capabilities, seed_capabilities

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password"


def init_db(config: SecurityConfig, seed_demo_data: bool = True) -> None:
    """
    Create tables, run the catalog seeder, and optionally seed demo data.

    The catalog seeder runs on every startup; it only ever adds rows.
    """

    Base.metadata.create_all(bind=engine)

    with SessionLocal() as db:
        seed_capabilities(db, config.catalog, config.guard_name)
        _warn_unseeded_projection(config)
        ensure_role(db, config.super_admin_role, config.guard_name)
        if seed_demo_data and not _has_seed_data(db):
            _seed(db, config)
            logger.info("Seeded demo actors and records")
        db.commit()


def _warn_unseeded_projection(config: SecurityConfig) -> None:
    # These cells stay false for everyone but the super-admin until the names are added to the catalog.
    missing = projection_capabilities() - set(config.catalog)
    if missing:
        logger.warning("Projection names missing from the capability catalog: %s", ", ".join(sorted(missing)))


def _has_seed_data(db: Session) -> bool:
    return db.execute(select(Actor.id).limit(1)).first() is not None


def _seed(db: Session, config: SecurityConfig) -> None:
    guard = config.guard_name

    # Roles
    admin = ensure_role(db, config.super_admin_role, guard)
    manager = ensure_role(db, "manager", guard)
    general = ensure_role(db, "general", guard)

    grant_capabilities(
        db,
        manager,
        [
            "user.view",
            "user.create",
            "user.update",
            "role.view",
            "shift.view",
            "shift.create",
            "shift.update",
            "shift_application.view",
            "shift_application.update",
            "inventory.view",
            "inventory.update",
            "properties.view",
            "task.view",
            "task.create",
        ],
        guard,
    )
    grant_capabilities(db, general, ["user.view"], guard)

    # Actors
    password_hash = hash_password(DEMO_PASSWORD)

    a1 = Actor(name="Alice Admin", email="admin@example.com", password_hash=password_hash)
    a1.roles.append(admin)

    a2 = Actor(name="Mona Manager", email="manager@example.com", password_hash=password_hash)
    a2.roles.append(manager)

    a3 = Actor(
        name="Gus General",
        email="general@example.com",
        password_hash=password_hash,
        must_change_password=True,
    )
    a3.roles.append(general)

    a4 = Actor(
        name="Rita Retired",
        email="retired@example.com",
        password_hash=password_hash,
        status=ActorStatus.RETIRED,
    )
    a4.roles.append(general)

    a5 = Actor(name="Front Desk", email="desk@example.com", password_hash=password_hash, status=ActorStatus.SHARED)
    a5.roles.append(general)

    db.add_all([a1, a2, a3, a4, a5])
    db.flush()

    # Records with owners
    db.add_all(
        [
            Post(user_id=a2.id, title="Shift swap policy", body="Ask before swapping.", is_public=True),
            Post(user_id=a2.id, title="Draft: summer rota", body=None, is_public=False),
            Task(user_id=a2.id, title="Count linen", is_public=False, assignee_ids=[a3.id]),
            Task(user_id=a1.id, title="Renew fire inspection", is_public=True, assignee_ids=[]),
            ShiftDetail(user_id=a3.id, work_date=date(2025, 12, 15), type="work"),
        ]
    )
    db.flush()
