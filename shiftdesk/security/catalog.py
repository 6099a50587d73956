"""
Capability names referenced by code.

Two sets are in play and they are not guaranteed to match:

- the names below, which ability checks and the page projection look up;
- the names that exist in the capability store, written by the catalog seeder
  from `config/security_config.yaml`.

A name referenced here but missing from the store resolves to deny.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType


def capability_name(resource: str, action: str) -> str:
    """Conventional `<resource>.<action>` name."""
    return f"{resource}.{action}"


def _crud(prefix: str, update: str = "update") -> dict[str, str]:
    return {
        "view": capability_name(prefix, "view"),
        "create": capability_name(prefix, "create"),
        "update": capability_name(prefix, update),
        "delete": capability_name(prefix, "delete"),
    }


# Resource key (as shared with the frontend) -> action -> capability name.
# Every cell is always present in the projected payload.
PROJECTION: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {
        "user": MappingProxyType(_crud("user")),
        "role": MappingProxyType(_crud("role")),
        "permission": MappingProxyType(_crud("permission")),
        "shift": MappingProxyType(_crud("shift")),
        "shift_application": MappingProxyType(_crud("shift_application")),
        "default_shift": MappingProxyType(_crud("default_shift")),
        "user_shift_setting": MappingProxyType(_crud("user_shift_setting")),
        "inventory": MappingProxyType({**_crud("inventory"), "view_logs": "inventory.log.view"}),
        "damaged_inventory": MappingProxyType(_crud("damaged_inventory")),
        "property": MappingProxyType({**_crud("properties", update="edit"), "reorder": "properties.reorder"}),
        "task": MappingProxyType(_crud("task")),
    }
)


def projection_capabilities() -> frozenset[str]:
    return frozenset(name for actions in PROJECTION.values() for name in actions.values())
