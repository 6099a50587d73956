from __future__ import annotations

from pathlib import Path

import pytest

from shiftdesk.security.config import SecurityConfigError, load_security_config

REPO_CONFIG = Path(__file__).resolve().parents[2] / "config" / "security_config.yaml"


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "security.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_repo_config_loads():
    config = load_security_config(REPO_CONFIG)

    assert config.super_admin_role == "system_admin"
    assert config.guard_name == "web"
    assert "properties.reorder" in config.catalog
    assert "inventory.log.view" in config.catalog
    assert config.pipeline.credential_change_route == "password.change"
    assert "logout" in config.pipeline.rotation_allowed_routes


def test_public_routes_do_not_require_auth():
    config = load_security_config(REPO_CONFIG)

    assert config.match("/login", "GET").auth_required is False
    assert config.match("/login", "post").auth_required is False
    assert config.match("/health", "GET").auth_required is False
    assert config.match("/dashboard", "GET").auth_required is True
    assert config.match("/health", "POST").auth_required is True


def test_template_paths_match(tmp_path):
    path = _write(
        tmp_path,
        """
security:
  routes:
    - path: /posts/{post_id}
      methods: [GET]
      auth_required: false
""",
    )
    config = load_security_config(path)

    assert config.match("/posts/12", "GET").auth_required is False
    assert config.match("/posts/12/poll", "GET").auth_required is True


def test_catalog_duplicates_are_dropped(tmp_path):
    path = _write(
        tmp_path,
        """
security:
  catalog: [shift.view, task.view, shift.view]
""",
    )

    assert load_security_config(path).catalog == ("shift.view", "task.view")


def test_defaults_apply_when_sections_missing(tmp_path):
    config = load_security_config(_write(tmp_path, "security: {}\n"))

    assert config.super_admin_role == "system_admin"
    assert config.catalog == ()
    assert config.pipeline.login_route == "login"
    assert config.match("/anything", "GET").auth_required is True


def test_missing_top_level_key(tmp_path):
    with pytest.raises(SecurityConfigError, match="top-level 'security'"):
        load_security_config(_write(tmp_path, "routes: []\n"))


def test_invalid_shape_is_wrapped(tmp_path):
    with pytest.raises(SecurityConfigError, match="Invalid security config"):
        load_security_config(_write(tmp_path, "security:\n  catalog: not-a-list\n"))


@pytest.mark.parametrize("name", ["shift", ".view", "shift."])
def test_malformed_capability_name(tmp_path, name):
    with pytest.raises(SecurityConfigError, match="<resource>.<action>"):
        load_security_config(_write(tmp_path, f"security:\n  catalog: ['{name}']\n"))
