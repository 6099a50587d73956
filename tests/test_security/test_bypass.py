from __future__ import annotations

from shiftdesk.security.bypass import is_bypassed


def test_reserved_role_bypasses():
    assert is_bypassed({"system_admin", "manager"}, "system_admin") is True


def test_other_roles_have_no_opinion():
    assert is_bypassed({"manager"}, "system_admin") is None
    assert is_bypassed([], "system_admin") is None


def test_role_name_must_match_exactly():
    assert is_bypassed({"System_Admin", "system_admin_2"}, "system_admin") is None
