"""
Read side of the capability store.

Every method is a fresh query: nothing is cached between calls, so an
assignment change is visible to the very next request.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from shiftdesk.models.security import Actor, Capability, Role, actor_roles, role_capabilities


class CapabilityStore:
    def __init__(self, db: Session, guard_name: str = "web") -> None:
        self._db = db
        self._guard = guard_name

    @property
    def db(self) -> Session:
        return self._db

    def load_actor(self, actor_id: int) -> Actor | None:
        return self._db.execute(
            select(Actor)
            .where(Actor.id == actor_id)
            .options(selectinload(Actor.roles))
        ).scalar_one_or_none()

    def catalog_names(self) -> frozenset[str]:
        """Every capability name that currently exists in the store."""
        rows = self._db.scalars(select(Capability.name).where(Capability.guard_name == self._guard))
        return frozenset(rows.all())

    def role_names(self, actor_id: int) -> frozenset[str]:
        rows = self._db.scalars(
            select(Role.name)
            .join(actor_roles, actor_roles.c.role_id == Role.id)
            .where(actor_roles.c.actor_id == actor_id)
        )
        return frozenset(rows.all())

    def actor_capability_names(self, actor_id: int) -> frozenset[str]:
        """Names reachable through any role the actor holds, deduplicated."""
        rows = self._db.scalars(
            select(Capability.name)
            .join(role_capabilities, role_capabilities.c.capability_id == Capability.id)
            .join(actor_roles, actor_roles.c.role_id == role_capabilities.c.role_id)
            .where(actor_roles.c.actor_id == actor_id)
            .where(Capability.guard_name == self._guard)
            .distinct()
        )
        return frozenset(rows.all())
