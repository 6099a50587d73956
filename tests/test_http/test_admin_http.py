from __future__ import annotations

import pytest
from sqlalchemy import select

from shiftdesk.models.security import Actor, Capability, Role


@pytest.fixture
def admin_client(client, app_db, make_actor, login):
    with app_db() as db:
        admin_role = db.scalars(select(Role).where(Role.name == "system_admin")).one()
        make_actor(db, "alice@example.com", [admin_role])
        db.commit()
    login(client, "alice@example.com")
    return client


def _capability_ids(app_db, *names):
    with app_db() as db:
        return list(db.scalars(select(Capability.id).where(Capability.name.in_(names))).all())


def test_startup_seeds_catalog(admin_client):
    names = {c["name"] for c in admin_client.get("/admin/capabilities").json()}

    assert {"shift.view", "properties.reorder", "inventory.log.view", "activitylog.view"} <= names


def test_role_lifecycle(admin_client, app_db):
    created = admin_client.post("/admin/roles", json={"name": "supervisor"})
    assert created.status_code == 201
    role_id = created.json()["id"]

    duplicate = admin_client.post("/admin/roles", json={"name": "supervisor"})
    assert duplicate.status_code == 409

    other_id = admin_client.post("/admin/roles", json={"name": "lead"}).json()["id"]
    taken = admin_client.patch(f"/admin/roles/{role_id}", json={"name": "lead"})
    assert taken.status_code == 409
    assert taken.json() == {"detail": "Role name already taken"}
    assert admin_client.patch(f"/admin/roles/{role_id}", json={"name": "system_admin"}).status_code == 409
    assert admin_client.delete(f"/admin/roles/{other_id}").status_code == 204

    renamed = admin_client.patch(f"/admin/roles/{role_id}", json={"name": "lead"})
    assert renamed.json()["name"] == "lead"

    ids = _capability_ids(app_db, "shift.view", "shift.update")
    synced = admin_client.put(f"/admin/roles/{role_id}/capabilities", json={"capability_ids": ids})
    assert synced.status_code == 200
    assert sorted(c["name"] for c in synced.json()["capabilities"]) == ["shift.update", "shift.view"]

    assert admin_client.delete(f"/admin/roles/{role_id}").status_code == 204
    assert admin_client.patch(f"/admin/roles/{role_id}", json={"name": "x"}).status_code == 404

    # Capabilities outlive the role.
    assert len(_capability_ids(app_db, "shift.view", "shift.update")) == 2


def test_sync_rejects_unknown_capability(admin_client):
    role_id = admin_client.post("/admin/roles", json={"name": "supervisor"}).json()["id"]

    response = admin_client.put(f"/admin/roles/{role_id}/capabilities", json={"capability_ids": [999999]})

    assert response.status_code == 422


def test_assign_roles_and_retire(admin_client, app_db, make_actor):
    with app_db() as db:
        actor_id = make_actor(db, "mona@example.com").id
        db.commit()
    role_id = admin_client.post("/admin/roles", json={"name": "manager"}).json()["id"]

    assigned = admin_client.put(f"/admin/actors/{actor_id}/roles", json={"role_ids": [role_id]})
    assert [r["name"] for r in assigned.json()["roles"]] == ["manager"]

    flagged = admin_client.post(f"/admin/actors/{actor_id}/require-password-change")
    assert flagged.json()["must_change_password"] is True

    retired = admin_client.post(f"/admin/actors/{actor_id}/retire")
    assert retired.json()["status"] == "retired"

    with app_db() as db:
        assert db.get(Actor, actor_id).is_retired is True


def test_admin_listing_needs_capability(client, app_db, make_role, make_actor, login):
    with app_db() as db:
        role = make_role(db, "manager", ["user.view"])
        make_actor(db, "mona@example.com", [role])
        db.commit()
    login(client, "mona@example.com")

    assert client.get("/admin/actors").status_code == 200
    assert client.get("/admin/roles").status_code == 403
    assert client.get("/admin/capabilities").status_code == 403
    assert client.post("/admin/roles", json={"name": "x"}).status_code == 403


def test_reserved_role_cannot_be_renamed_or_deleted(admin_client, app_db):
    with app_db() as db:
        admin_role_id = db.scalars(select(Role.id).where(Role.name == "system_admin")).one()

    renamed = admin_client.patch(f"/admin/roles/{admin_role_id}", json={"name": "root"})
    assert renamed.status_code == 409
    assert admin_client.delete(f"/admin/roles/{admin_role_id}").status_code == 409

    # A no-op rename is refused too; the bypass keeps working.
    assert admin_client.patch(f"/admin/roles/{admin_role_id}", json={"name": "system_admin"}).status_code == 409
    assert admin_client.get("/admin/roles").status_code == 200
    assert admin_client.get("/dashboard").json()["props"]["auth"]["isSuperAdmin"] is True
