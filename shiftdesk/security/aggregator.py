"""
Permission aggregation for the page payload.

`project()` turns an authorization context into a snapshot the frontend can use
to show or hide controls. The nested map is total: every resource/action pair of
`catalog.PROJECTION` is present, defaulting to False, so the UI never meets a
missing key.

Only the capability track is projected. Ownership depends on a concrete subject
and cannot be expressed as one boolean per resource; handlers still call
`abilities.authorize` with the subject.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from shiftdesk.models.security import Actor
from shiftdesk.security.catalog import PROJECTION
from shiftdesk.security.context import AuthorizationContext


@dataclass(frozen=True)
class AuthorizationSnapshot:
    is_bypassed: bool = False
    flat_capabilities: frozenset[str] = frozenset()
    resource_map: Mapping[str, Mapping[str, bool]] = field(default_factory=dict)


def _resource_map(cell: Any, projection: Mapping[str, Mapping[str, str]]) -> dict[str, dict[str, bool]]:
    return {
        resource: {action: bool(cell(name)) for action, name in actions.items()}
        for resource, actions in projection.items()
    }


def project(
    ctx: AuthorizationContext | None,
    projection: Mapping[str, Mapping[str, str]] = PROJECTION,
) -> AuthorizationSnapshot:
    """
    Build the per-request snapshot.

    - anonymous: empty flat set, every cell False
    - bypassed: the whole stored catalog, every cell True
    - otherwise: names reachable through the actor's roles; each cell is a
      drift-tolerant membership test
    """

    if ctx is None:
        return AuthorizationSnapshot(resource_map=_resource_map(lambda _name: False, projection))

    if ctx.is_bypassed:
        return AuthorizationSnapshot(
            is_bypassed=True,
            flat_capabilities=ctx.known_capabilities,
            resource_map=_resource_map(lambda _name: True, projection),
        )

    return AuthorizationSnapshot(
        is_bypassed=False,
        flat_capabilities=ctx.capabilities & ctx.known_capabilities,
        resource_map=_resource_map(ctx.has, projection),
    )


def shared_payload(snapshot: AuthorizationSnapshot, actor: Actor | None) -> dict[str, Any]:
    """
    Render the snapshot as the `auth` and `permissions` page props.

    `auth.isSuperAdmin` and `permissions.is_system_admin` both come from the one
    `snapshot.is_bypassed` value.
    """

    user = None
    if actor is not None:
        user = {"id": actor.id, "name": actor.name, "email": actor.email}

    permissions: dict[str, Any] = {
        resource: dict(actions) for resource, actions in snapshot.resource_map.items()
    }
    permissions["is_system_admin"] = snapshot.is_bypassed

    return {
        "auth": {
            "user": user,
            "isSuperAdmin": snapshot.is_bypassed,
            "permissions": sorted(snapshot.flat_capabilities),
        },
        "permissions": permissions,
    }
