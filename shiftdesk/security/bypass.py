from __future__ import annotations

from collections.abc import Iterable


def is_bypassed(role_names: Iterable[str], super_admin_role: str) -> bool | None:
    """
    Super-admin bypass.

    Returns True when the reserved role is held, otherwise None ("no opinion")
    so the resource rules still run. Called on every ability check; keep it free
    of I/O and logging.
    """

    if super_admin_role in frozenset(role_names):
        return True
    return None
