"""
Ability resolver.

`authorize(context, action, resource, subject)` answers a single allow/deny
question. Evaluation order:

1. no context (anonymous)            -> deny
2. super-admin bypass                -> allow, even for unmapped actions
3. resource policy lookup            -> unknown resource/action denies
4. the policy's own rule: open defaults and public/private visibility first,
   then ownership OR capability membership.

Capability membership goes through `AuthorizationContext.has`, which is a pure
set lookup against the names currently in the store. A name the seeder has not
written yet is absent, so the check denies instead of raising.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from typing import Any, ClassVar

from shiftdesk.security.context import AuthorizationContext
from shiftdesk.security.diagnostics import DecisionLogger, get_decision_logger

ACTIONS = frozenset(
    {
        "view_any",
        "view",
        "create",
        "update",
        "delete",
        "reorder",
        "view_logs",
        "view_anonymous_votes",
    }
)


class Decision(str, enum.Enum):
    ALLOW = "allow"
    DENY = "deny"

    @property
    def allowed(self) -> bool:
        return self is Decision.ALLOW

    @classmethod
    def of(cls, flag: bool) -> Decision:
        return cls.ALLOW if flag else cls.DENY


def _crud(prefix: str, update: str = "update") -> dict[str, str]:
    return {
        "view_any": f"{prefix}.view",
        "view": f"{prefix}.view",
        "create": f"{prefix}.create",
        "update": f"{prefix}.{update}",
        "delete": f"{prefix}.delete",
    }


def _owner_id(subject: Any) -> int | None:
    return getattr(subject, "user_id", None) if subject is not None else None


def _assignee_ids(subject: Any) -> Iterable[int]:
    return getattr(subject, "assignee_ids", None) or ()


class ResourcePolicy:
    """
    Capability-track policy: each action maps to one capability name.

    Subclasses override individual action methods to add open defaults,
    visibility or ownership rules. An action without a method is unmapped.
    """

    resource: ClassVar[str] = ""
    capabilities: ClassVar[Mapping[str, str]] = {}

    def evaluate(self, ctx: AuthorizationContext, action: str, subject: Any = None) -> bool | None:
        """Return the decision, or None when this policy has no rule for `action`."""
        if action not in ACTIONS:
            return None
        handler = getattr(self, action, None)
        if handler is None:
            return None
        return bool(handler(ctx, subject))

    def granted(self, ctx: AuthorizationContext, action: str) -> bool:
        name = self.capabilities.get(action)
        return name is not None and ctx.has(name)

    def view_any(self, ctx: AuthorizationContext, subject: Any = None) -> bool:
        return self.granted(ctx, "view_any")

    def view(self, ctx: AuthorizationContext, subject: Any = None) -> bool:
        return self.granted(ctx, "view")

    def create(self, ctx: AuthorizationContext, subject: Any = None) -> bool:
        return self.granted(ctx, "create")

    def update(self, ctx: AuthorizationContext, subject: Any = None) -> bool:
        return self.granted(ctx, "update")

    def delete(self, ctx: AuthorizationContext, subject: Any = None) -> bool:
        return self.granted(ctx, "delete")


class UserPolicy(ResourcePolicy):
    resource = "user"
    capabilities = _crud("user")


class RolePolicy(ResourcePolicy):
    resource = "role"
    capabilities = _crud("role")


class PermissionPolicy(ResourcePolicy):
    # Managing capabilities is part of role administration.
    resource = "permission"
    capabilities = _crud("role")


class ShiftPolicy(ResourcePolicy):
    resource = "shift"
    capabilities = _crud("shift")


class ShiftApplicationPolicy(ResourcePolicy):
    resource = "shift_application"
    capabilities = _crud("shift_application")


class DefaultShiftPolicy(ResourcePolicy):
    resource = "default_shift"
    capabilities = _crud("default_shift")


class UserShiftSettingPolicy(ResourcePolicy):
    resource = "user_shift_setting"
    capabilities = _crud("user_shift_setting")


class InventoryPolicy(ResourcePolicy):
    resource = "inventory"
    capabilities = {**_crud("inventory"), "view_logs": "inventory.log.view"}

    def view_logs(self, ctx: AuthorizationContext, subject: Any = None) -> bool:
        return self.granted(ctx, "view_logs")


class DamagedInventoryPolicy(ResourcePolicy):
    resource = "damaged_inventory"
    capabilities = _crud("damaged_inventory")


class PropertyPolicy(ResourcePolicy):
    resource = "property"
    capabilities = {**_crud("properties", update="edit"), "reorder": "properties.reorder"}

    def reorder(self, ctx: AuthorizationContext, subject: Any = None) -> bool:
        return self.granted(ctx, "reorder")


class ShiftDetailPolicy(ResourcePolicy):
    """A shift-detail row is also editable by the actor it belongs to."""

    resource = "shift_detail"
    capabilities = _crud("shift")

    def view(self, ctx: AuthorizationContext, subject: Any = None) -> bool:
        return self.granted(ctx, "view") or ctx.owns(_owner_id(subject))

    def update(self, ctx: AuthorizationContext, subject: Any = None) -> bool:
        return self.granted(ctx, "update") or ctx.owns(_owner_id(subject))

    def delete(self, ctx: AuthorizationContext, subject: Any = None) -> bool:
        return self.granted(ctx, "delete") or ctx.owns(_owner_id(subject))


class TaskPolicy(ResourcePolicy):
    resource = "task"
    capabilities = _crud("task")

    def view(self, ctx: AuthorizationContext, subject: Any = None) -> bool:
        if subject is not None and getattr(subject, "is_public", False):
            return True
        if ctx.owns(_owner_id(subject)):
            return True
        if ctx.actor_id in _assignee_ids(subject):
            return True
        return self.granted(ctx, "view")

    def update(self, ctx: AuthorizationContext, subject: Any = None) -> bool:
        return ctx.owns(_owner_id(subject)) or self.granted(ctx, "update")

    def delete(self, ctx: AuthorizationContext, subject: Any = None) -> bool:
        return ctx.owns(_owner_id(subject)) or self.granted(ctx, "delete")


class PostPolicy(ResourcePolicy):
    """Posts are open to every signed-in actor; drafts and edits belong to the author."""

    resource = "post"

    def view_any(self, ctx: AuthorizationContext, subject: Any = None) -> bool:
        return True

    def view(self, ctx: AuthorizationContext, subject: Any = None) -> bool:
        if subject is not None and getattr(subject, "is_public", False):
            return True
        return ctx.owns(_owner_id(subject))

    def create(self, ctx: AuthorizationContext, subject: Any = None) -> bool:
        return True

    def update(self, ctx: AuthorizationContext, subject: Any = None) -> bool:
        return ctx.owns(_owner_id(subject))

    def delete(self, ctx: AuthorizationContext, subject: Any = None) -> bool:
        return ctx.owns(_owner_id(subject))


class PollPolicy(ResourcePolicy):
    resource = "poll"

    def view_anonymous_votes(self, ctx: AuthorizationContext, subject: Any = None) -> bool:
        if subject is None:
            return False
        if not getattr(subject, "is_anonymous", False):
            return True
        return ctx.owns(_owner_id(getattr(subject, "post", None)))


class DailyNotePolicy(ResourcePolicy):
    resource = "daily_note"
    capabilities = {
        "view_any": "daily_note.view",
        "view": "daily_note.view",
        "create": "daily_note.create",
    }

    def update(self, ctx: AuthorizationContext, subject: Any = None) -> bool:
        return ctx.owns(_owner_id(subject))

    def delete(self, ctx: AuthorizationContext, subject: Any = None) -> bool:
        return ctx.owns(_owner_id(subject))


class AnnouncementPolicy(ResourcePolicy):
    """Anyone may read announcements; `announcement.create` covers editing and removal too."""

    resource = "announcement"
    capabilities = {
        "create": "announcement.create",
        "update": "announcement.create",
        "delete": "announcement.create",
    }

    def view(self, ctx: AuthorizationContext, subject: Any = None) -> bool:
        return True


class AccountingPolicy(ResourcePolicy):
    resource = "accounting"
    capabilities = {"view": "accounting.view"}


class ActivityLogPolicy(ResourcePolicy):
    resource = "activity_log"
    capabilities = {"view_any": "activitylog.view"}


POLICIES: Mapping[str, ResourcePolicy] = {
    policy.resource: policy
    for policy in (
        UserPolicy(),
        RolePolicy(),
        PermissionPolicy(),
        ShiftPolicy(),
        ShiftApplicationPolicy(),
        DefaultShiftPolicy(),
        UserShiftSettingPolicy(),
        InventoryPolicy(),
        DamagedInventoryPolicy(),
        PropertyPolicy(),
        ShiftDetailPolicy(),
        TaskPolicy(),
        PostPolicy(),
        PollPolicy(),
        DailyNotePolicy(),
        AnnouncementPolicy(),
        AccountingPolicy(),
        ActivityLogPolicy(),
    )
}


def authorize(
    ctx: AuthorizationContext | None,
    action: str,
    resource: str,
    subject: Any = None,
    *,
    decisions: DecisionLogger | None = None,
) -> Decision:
    """
    Decide whether the actor behind `ctx` may perform `action` on `resource`.

    Never raises for business reasons: unknown resources, unknown actions and
    capabilities missing from the store all resolve to DENY.
    """

    log = decisions or get_decision_logger()

    if ctx is None:
        log.record(None, action, resource, False, "anonymous")
        return Decision.DENY

    if ctx.is_bypassed:
        log.record(ctx.actor_id, action, resource, True, "bypass")
        return Decision.ALLOW

    policy = POLICIES.get(resource)
    if policy is None:
        log.record(ctx.actor_id, action, resource, False, "unmapped resource")
        return Decision.DENY

    result = policy.evaluate(ctx, action, subject)
    if result is None:
        log.record(ctx.actor_id, action, resource, False, "unmapped action")
        return Decision.DENY

    log.record(ctx.actor_id, action, resource, result, "policy")
    return Decision.of(result)


def can(ctx: AuthorizationContext | None, action: str, resource: str, subject: Any = None) -> bool:
    return authorize(ctx, action, resource, subject).allowed
