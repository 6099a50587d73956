from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError


class SecurityConfigError(ValueError):
    """Raised when the security YAML configuration is invalid."""


class DefaultRule(BaseModel):
    auth_required: bool = True


class RouteRule(BaseModel):
    path: str
    methods: list[str] = Field(default_factory=lambda: ["GET"])

    auth_required: bool | None = None

    def normalized_methods(self) -> set[str]:
        return {m.upper() for m in self.methods}


class PipelineConfig(BaseModel):
    # Route *names*, not paths: gates run after routing.
    login_route: str = "login"
    home_route: str = "dashboard"
    credential_change_route: str = "password.change"
    rotation_allowed_routes: list[str] = Field(
        default_factory=lambda: ["password.change", "password.change.store", "logout"]
    )


class MessagesConfig(BaseModel):
    retired: str = "This account has been retired and can no longer sign in."
    credential_rotation_required: str = "You must change your password before continuing."
    unauthenticated: str = "Please sign in to continue."
    invalid_credentials: str = "These credentials do not match our records."
    password_changed: str = "Your password has been changed."
    forbidden: str = "This action is unauthorized."


class SecurityConfigModel(BaseModel):
    super_admin_role: str = "system_admin"
    guard_name: str = "web"

    # Capability names the seeder upserts at deploy time. Code may reference names
    # that are missing here; such checks resolve to deny.
    catalog: list[str] = Field(default_factory=list)

    default: DefaultRule = Field(default_factory=DefaultRule)
    routes: list[RouteRule] = Field(default_factory=list)

    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    messages: MessagesConfig = Field(default_factory=MessagesConfig)


@dataclass(frozen=True)
class EffectiveRule:
    """
    Fully-resolved rule (defaults applied) for a particular request.
    """

    auth_required: bool


def _path_template_to_regex(path_template: str) -> re.Pattern[str]:
    # Convert "/posts/{id}" -> r"^/posts/[^/]+$"
    regex = re.sub(r"\{[^/]+\}", r"[^/]+", path_template)
    return re.compile(rf"^{regex}$")


class SecurityConfig:
    """
    Runtime helper around validated config + route matching.
    """

    def __init__(self, model: SecurityConfigModel):
        self.model = model

        compiled: list[tuple[str, re.Pattern[str], RouteRule]] = []
        for rule in self.model.routes:
            compiled.append((rule.path, _path_template_to_regex(rule.path), rule))

        # Prefer exact matches over templates.
        self._exact_rules: dict[str, list[RouteRule]] = {}
        for r in self.model.routes:
            self._exact_rules.setdefault(r.path, []).append(r)
        self._compiled_rules = compiled

    @property
    def super_admin_role(self) -> str:
        return self.model.super_admin_role

    @property
    def guard_name(self) -> str:
        return self.model.guard_name

    @property
    def catalog(self) -> tuple[str, ...]:
        # Keep first occurrence order, drop duplicates.
        return tuple(dict.fromkeys(self.model.catalog))

    @property
    def pipeline(self) -> PipelineConfig:
        return self.model.pipeline

    @property
    def messages(self) -> MessagesConfig:
        return self.model.messages

    def match(self, path: str, method: str) -> EffectiveRule:
        """
        Find the best matching rule for (path, method), then apply defaults.
        """

        method = method.upper()
        default = self.model.default

        # 1) exact path match
        for candidate in self._exact_rules.get(path, []):
            if method in candidate.normalized_methods():
                return _effective(candidate, default)

        # 2) template match
        for _template, regex, candidate in self._compiled_rules:
            if method not in candidate.normalized_methods():
                continue
            if regex.match(path):
                return _effective(candidate, default)

        # 3) no match -> defaults
        return EffectiveRule(auth_required=default.auth_required)


def _effective(rule: RouteRule, default: DefaultRule) -> EffectiveRule:
    return EffectiveRule(
        auth_required=default.auth_required if rule.auth_required is None else rule.auth_required,
    )


def load_security_config(path: Path) -> SecurityConfig:
    raw_text = path.read_text(encoding="utf-8")
    raw: dict[str, Any] = yaml.safe_load(raw_text) or {}

    if "security" not in raw:
        raise SecurityConfigError(f"Missing top-level 'security' key in config: {path}")

    try:
        model = SecurityConfigModel.model_validate(raw["security"])
    except ValidationError as exc:
        raise SecurityConfigError(f"Invalid security config {path}: {exc}") from exc

    for name in model.catalog:
        if name.count(".") < 1 or name.startswith(".") or name.endswith("."):
            raise SecurityConfigError(f"catalog entry {name!r} must follow '<resource>.<action>'")

    return SecurityConfig(model)
