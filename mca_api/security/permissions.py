"""
Role -> permission engine.

Permissions are `resource:action` strings. A role lists permissions directly
and may `extends` one parent role. Two wildcard forms are accepted in role
definitions and extra grants:

    *               every action on every resource
    funding:*       every action on one resource

Effective permissions are precomputed once at startup, with wildcards expanded
against the configured resources and actions, so runtime checks are set
lookups.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)

WILDCARD = "*"


class PermissionConfigError(ValueError):
    """Raised when the role/permission configuration is invalid."""


@dataclass(frozen=True)
class RoleDef:
    name: str
    permissions: frozenset[str]
    extends: str | None = None
    description: str | None = None


def permission(resource: str, action: str) -> str:
    return f"{resource}:{action}"


class PermissionEngine:
    """
    Usage:
        engine = PermissionEngine(resources, actions, roles)
        engine.has_all("funder_user", ["funding:read"])
    """

    def __init__(
        self,
        resources: Iterable[str],
        actions: Iterable[str],
        roles: Mapping[str, RoleDef],
    ) -> None:
        self._resources = tuple(dict.fromkeys(resources))
        self._actions = tuple(dict.fromkeys(actions))
        self._roles = dict(roles)

        if not self._resources:
            raise PermissionConfigError("at least one resource is required")
        if not self._actions:
            raise PermissionConfigError("at least one action is required")

        for role in self._roles.values():
            if role.extends and role.extends not in self._roles:
                raise PermissionConfigError(f"role {role.name!r} extends unknown role {role.extends!r}")
            for perm in role.permissions:
                try:
                    self.expand(perm)
                except PermissionConfigError as e:
                    raise PermissionConfigError(f"role {role.name!r}: {e}") from e

        self._effective = self._compute_effective()

    def expand(self, perm: str) -> frozenset[str]:
        """Expand one permission (possibly a wildcard) into concrete permissions."""
        if perm == WILDCARD:
            return frozenset(permission(r, a) for r in self._resources for a in self._actions)

        resource, sep, action = perm.partition(":")
        if not sep or not resource or not action:
            raise PermissionConfigError(f"malformed permission {perm!r}; expected 'resource:action'")
        if resource not in self._resources:
            raise PermissionConfigError(f"unknown resource in {perm!r}")
        if action == WILDCARD:
            return frozenset(permission(resource, a) for a in self._actions)
        if action not in self._actions:
            raise PermissionConfigError(f"unknown action in {perm!r}")
        return frozenset((perm,))

    def _compute_effective(self) -> dict[str, frozenset[str]]:
        effective: dict[str, frozenset[str]] = {}
        visiting: set[str] = set()

        def dfs(role_name: str) -> frozenset[str]:
            if role_name in effective:
                return effective[role_name]
            if role_name in visiting:
                raise PermissionConfigError(f"cycle detected in role inheritance at {role_name!r}")
            visiting.add(role_name)
            role = self._roles[role_name]
            perms: set[str] = set()
            for p in role.permissions:
                perms.update(self.expand(p))
            if role.extends:
                perms.update(dfs(role.extends))
            result = frozenset(perms)
            effective[role_name] = result
            visiting.remove(role_name)
            return result

        for name in self._roles:
            dfs(name)
        return effective

    def effective(self, role: str) -> frozenset[str]:
        """Effective permissions of `role`; unknown roles have none."""
        return self._effective.get(role, frozenset())

    def permissions_for(self, role: str, extra: Iterable[str] = ()) -> frozenset[str]:
        """Role permissions plus per-principal extra grants."""
        perms = set(self.effective(role))
        for p in extra:
            try:
                perms.update(self.expand(p))
            except PermissionConfigError:
                logger.debug("Ignoring unknown extra permission %r for role=%s", p, role)
        return frozenset(perms)

    def has_all(self, role: str, required: Iterable[str], extra: Iterable[str] = ()) -> bool:
        required = frozenset(required)
        if not required:
            return True
        return required <= self.permissions_for(role, extra)
