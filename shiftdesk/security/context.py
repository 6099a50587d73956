from __future__ import annotations

from dataclasses import dataclass

from shiftdesk.security.bypass import is_bypassed
from shiftdesk.security.store import CapabilityStore


@dataclass(frozen=True)
class AuthorizationContext:
    """
    Per-request authorization context.

    Built once per request from the capability store and then treated as an
    immutable snapshot. It is attached to:
    - request.state (FastAPI request lifetime)
    - Session.info (SQLAlchemy session lifetime, for list scoping)
    """

    actor_id: int
    roles: frozenset[str]
    capabilities: frozenset[str]

    # Names that exist in the store right now. Checks against anything else deny.
    known_capabilities: frozenset[str]

    is_bypassed: bool

    def has(self, name: str) -> bool:
        """
        Capability-track membership test.

        Pure set lookup: a name that was never seeded is simply absent, so the
        answer is False rather than an error.
        """

        return name in self.known_capabilities and name in self.capabilities

    def owns(self, owner_id: int | None) -> bool:
        return owner_id is not None and owner_id == self.actor_id


def build_context(store: CapabilityStore, actor_id: int, super_admin_role: str) -> AuthorizationContext:
    roles = store.role_names(actor_id)
    return AuthorizationContext(
        actor_id=actor_id,
        roles=roles,
        capabilities=store.actor_capability_names(actor_id),
        known_capabilities=store.catalog_names(),
        is_bypassed=bool(is_bypassed(roles, super_admin_role)),
    )
