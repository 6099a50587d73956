"""
Tests for the catalog seeder.

Uses db_session fixture: in-memory SQLite, rolled back after each test.
"""
from __future__ import annotations

from sqlalchemy import func, select

from shiftdesk.models.security import Capability, Role
from shiftdesk.security.seeder import ensure_role, grant_capabilities, seed_capabilities


def _names(db_session):
    return set(db_session.scalars(select(Capability.name)).all())


def test_seed_creates_missing_names(db_session):
    created = seed_capabilities(db_session, ["shift.view", "shift.create"])

    assert created == ["shift.view", "shift.create"]
    assert _names(db_session) == {"shift.view", "shift.create"}


def test_seed_is_idempotent(db_session):
    seed_capabilities(db_session, ["shift.view", "shift.create"])
    created = seed_capabilities(db_session, ["shift.view", "shift.create"])

    assert created == []
    assert db_session.scalar(select(func.count(Capability.id))) == 2


def test_seed_never_prunes_unlisted_names(db_session):
    seed_capabilities(db_session, ["legacy.view", "shift.view"])
    seed_capabilities(db_session, ["shift.view", "task.view"])

    assert _names(db_session) == {"legacy.view", "shift.view", "task.view"}


def test_seed_ignores_duplicates_in_input(db_session):
    created = seed_capabilities(db_session, ["task.view", "task.view"])

    assert created == ["task.view"]


def test_ensure_role_returns_existing(db_session):
    first = ensure_role(db_session, "system_admin")
    second = ensure_role(db_session, "system_admin")

    assert first.id == second.id
    assert db_session.scalar(select(func.count(Role.id))) == 1


def test_grant_skips_names_missing_from_store(db_session):
    seed_capabilities(db_session, ["shift.view"])
    role = ensure_role(db_session, "manager")

    grant_capabilities(db_session, role, ["shift.view", "shift.approve"])
    grant_capabilities(db_session, role, ["shift.view"])

    assert [c.name for c in role.capabilities] == ["shift.view"]
