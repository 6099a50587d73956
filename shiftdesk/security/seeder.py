from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from shiftdesk.models.security import Capability, Role

logger = logging.getLogger(__name__)


def seed_capabilities(db: Session, names: Iterable[str], guard_name: str = "web") -> list[str]:
    """
    Create-if-absent every capability name in `names`.

    Safe to rerun: existing rows are left alone, and stored names that are no
    longer listed are never pruned. Returns the names that were created.
    Flushes but does not commit.
    """

    wanted = list(dict.fromkeys(names))
    existing = set(
        db.scalars(
            select(Capability.name)
            .where(Capability.guard_name == guard_name)
            .where(Capability.name.in_(wanted))
        ).all()
    )

    created = [name for name in wanted if name not in existing]
    db.add_all(Capability(name=name, guard_name=guard_name) for name in created)
    db.flush()

    if created:
        logger.info("Seeded %d capabilities guard=%s", len(created), guard_name)
    return created


def ensure_role(db: Session, name: str, guard_name: str = "web") -> Role:
    role = db.scalars(select(Role).where(Role.name == name).where(Role.guard_name == guard_name)).first()
    if role is None:
        role = Role(name=name, guard_name=guard_name)
        db.add(role)
        db.flush()
    return role


def grant_capabilities(db: Session, role: Role, names: Iterable[str], guard_name: str = "web") -> None:
    """
    Add the named capabilities to `role`, skipping names that are not in the store.
    """

    wanted = set(names)
    if not wanted:
        return

    rows = db.scalars(
        select(Capability).where(Capability.guard_name == guard_name).where(Capability.name.in_(wanted))
    ).all()
    held = {c.id for c in role.capabilities}
    for capability in rows:
        if capability.id not in held:
            role.capabilities.append(capability)
    db.flush()
