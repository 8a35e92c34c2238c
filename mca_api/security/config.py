from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from .permissions import PermissionEngine, RoleDef


class AuthConfig(BaseModel):
    authorization_header: str = "Authorization"
    bearer_prefix: str = "Bearer"


class PublicRule(BaseModel):
    path: str
    methods: list[str] = Field(default_factory=lambda: ["GET"])

    def normalized_methods(self) -> set[str]:
        return {m.upper() for m in self.methods}


class RoleRule(BaseModel):
    extends: str | None = None
    description: str | None = None
    permissions: list[str] = Field(default_factory=list)


class SecurityConfigModel(BaseModel):
    auth: AuthConfig = Field(default_factory=AuthConfig)
    public: list[PublicRule] = Field(default_factory=list)
    resources: list[str] = Field(default_factory=list)
    actions: list[str] = Field(default_factory=list)
    roles: dict[str, RoleRule] = Field(default_factory=dict)


def _path_template_to_regex(path_template: str) -> re.Pattern[str]:
    # Convert "/fundings/{id}" -> r"^/fundings/[^/]+$"
    regex = re.sub(r"\{[^/]+\}", r"[^/]+", path_template)
    return re.compile(rf"^{regex}$")


class SecurityConfig:
    """
    Runtime helper around validated config: public-route matching and the
    role -> permission engine.
    """

    def __init__(self, model: SecurityConfigModel):
        self.model = model
        self._public_rules = [
            (_path_template_to_regex(rule.path), rule.normalized_methods()) for rule in self.model.public
        ]
        self.permissions = PermissionEngine(
            resources=model.resources,
            actions=model.actions,
            roles={
                name: RoleDef(
                    name=name,
                    permissions=frozenset(rule.permissions),
                    extends=rule.extends,
                    description=rule.description,
                )
                for name, rule in model.roles.items()
            },
        )

    @property
    def auth(self) -> AuthConfig:
        return self.model.auth

    def is_public(self, path: str, method: str) -> bool:
        method = method.upper()
        for regex, methods in self._public_rules:
            if method in methods and regex.match(path):
                return True
        return False


def load_security_config(path: Path) -> SecurityConfig:
    raw_text = path.read_text(encoding="utf-8")
    raw: dict[str, Any] = yaml.safe_load(raw_text) or {}

    if "security" not in raw:
        raise ValueError(f"Missing top-level 'security' key in config: {path}")

    model = SecurityConfigModel.model_validate(raw["security"])
    return SecurityConfig(model)
