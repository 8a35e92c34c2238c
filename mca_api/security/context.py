from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from mca_api.constants import EntityKind

from .access import assert_access
from .filters import FilterValue, QueryFragment, build_filter
from .principal import Principal
from .resolver import RelationshipLookup, ScopeResolver
from .scope import Scope, ScopeMap


@dataclass(frozen=True)
class AuthContext:
    """
    Per-request authorization context.

    Built once by the security dependency and passed explicitly to handlers.
    Scopes are resolved on first use and cached inside `resolver`, which lives
    only as long as this request.
    """

    principal: Principal
    permissions: frozenset[str]
    resolver: ScopeResolver = field(repr=False, compare=False)

    @classmethod
    def build(
        cls,
        principal: Principal,
        lookup: RelationshipLookup | None,
        permissions: frozenset[str] = frozenset(),
    ) -> AuthContext:
        return cls(principal=principal, permissions=permissions, resolver=ScopeResolver(principal, lookup))

    @property
    def is_admin(self) -> bool:
        return self.principal.is_admin

    def scope(self, kind: EntityKind) -> Scope:
        return self.resolver.scope(kind)

    def scopes(self) -> ScopeMap:
        return self.resolver.resolve()

    def filter_for(self, kind: EntityKind, requested: FilterValue | str | Sequence[str] = None) -> QueryFragment:
        return build_filter(kind, self.scope(kind), requested)

    def require(self, entity: Any, label: str) -> None:
        assert_access(self, entity, label)

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions
