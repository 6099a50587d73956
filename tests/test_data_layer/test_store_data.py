"""
Tests for capability store reads (ORM).

Uses db_session fixture: in-memory SQLite, rolled back after each test.
"""
from __future__ import annotations

from sqlalchemy import select

from shiftdesk.models.security import Actor, Capability, Role
from shiftdesk.security.context import build_context
from shiftdesk.security.seeder import seed_capabilities
from shiftdesk.security.store import CapabilityStore


def _role(db_session, name, capability_names):
    role = Role(name=name, guard_name="web")
    role.capabilities = [c for c in db_session.scalars(select(Capability)).all() if c.name in capability_names]
    db_session.add(role)
    db_session.flush()
    return role


def test_load_actor_returns_actor_with_roles(db_session):
    seed_capabilities(db_session, ["shift.view"])
    role = _role(db_session, "manager", {"shift.view"})

    actor = Actor(name="Mona", email="mona@example.com")
    actor.roles.append(role)
    db_session.add(actor)
    db_session.commit()

    loaded = CapabilityStore(db_session).load_actor(actor.id)

    assert loaded is not None
    assert loaded.email == "mona@example.com"
    assert [r.name for r in loaded.roles] == ["manager"]


def test_load_actor_returns_none_when_not_found(db_session):
    assert CapabilityStore(db_session).load_actor(99999) is None


def test_capability_names_are_deduplicated_across_roles(db_session):
    seed_capabilities(db_session, ["shift.view", "shift.create", "task.view"])
    a = _role(db_session, "a", {"shift.view", "shift.create"})
    b = _role(db_session, "b", {"shift.view", "task.view"})

    actor = Actor(name="Multi", email="multi@example.com")
    actor.roles = [a, b]
    db_session.add(actor)
    db_session.commit()

    store = CapabilityStore(db_session)

    assert store.actor_capability_names(actor.id) == frozenset({"shift.view", "shift.create", "task.view"})
    assert store.role_names(actor.id) == frozenset({"a", "b"})


def test_actor_without_roles_has_no_capabilities(db_session):
    seed_capabilities(db_session, ["shift.view"])
    actor = Actor(name="Nobody", email="nobody@example.com")
    db_session.add(actor)
    db_session.commit()

    store = CapabilityStore(db_session)

    assert store.actor_capability_names(actor.id) == frozenset()
    assert store.role_names(actor.id) == frozenset()


def test_catalog_names_are_scoped_to_guard(db_session):
    seed_capabilities(db_session, ["shift.view"], guard_name="web")
    seed_capabilities(db_session, ["shift.view", "api.only"], guard_name="api")
    db_session.commit()

    assert CapabilityStore(db_session, "web").catalog_names() == frozenset({"shift.view"})
    assert CapabilityStore(db_session, "api").catalog_names() == frozenset({"shift.view", "api.only"})


def test_build_context_reflects_store_state(db_session):
    seed_capabilities(db_session, ["shift.view", "task.view"])
    role = _role(db_session, "system_admin", set())
    actor = Actor(name="Alice", email="alice@example.com")
    actor.roles.append(role)
    db_session.add(actor)
    db_session.commit()

    ctx = build_context(CapabilityStore(db_session), actor.id, "system_admin")

    assert ctx.actor_id == actor.id
    assert ctx.is_bypassed is True
    assert ctx.capabilities == frozenset()
    assert ctx.known_capabilities == frozenset({"shift.view", "task.view"})


def test_revoked_capability_is_gone_on_next_read(db_session):
    seed_capabilities(db_session, ["shift.view", "shift.update"])
    role = _role(db_session, "manager", {"shift.view", "shift.update"})
    actor = Actor(name="Mona", email="mona@example.com")
    actor.roles.append(role)
    db_session.add(actor)
    db_session.commit()

    store = CapabilityStore(db_session)
    assert "shift.update" in store.actor_capability_names(actor.id)

    role.capabilities = [c for c in role.capabilities if c.name != "shift.update"]
    db_session.commit()

    assert store.actor_capability_names(actor.id) == frozenset({"shift.view"})
