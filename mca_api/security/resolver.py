"""
Role/scope resolution.

The rules are a table keyed by (portal, entity kind). Each cell says where the
allowed ids come from:

    ALL             no restriction
    NONE            explicit denial
    OWN             the principal's own list; a missing list means NONE
    OWN_IF_GRANTED  the principal's own list; a missing list means ALL
    RELATED(via)    ids linked to the principal's own `via` ids through the
                    relationship store (e.g. ISOs working with my funders)

Resolution is lazy and memoized per resolver instance. One resolver lives for
one request, so relationship changes are picked up on the next request.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from mca_api.constants import EntityKind, PortalType

from .principal import Principal
from .scope import Scope, ScopeMap

logger = logging.getLogger(__name__)


class RelationshipLookup(Protocol):
    def list_related_ids(
        self,
        owner_kind: EntityKind,
        owner_ids: Sequence[str],
        target_kind: EntityKind,
    ) -> list[str]: ...


@dataclass(frozen=True)
class ScopeRule:
    source: str
    via: EntityKind | None = None


ALL = ScopeRule("all")
NONE = ScopeRule("none")
OWN = ScopeRule("own")
OWN_IF_GRANTED = ScopeRule("own_if_granted")


def related(via: EntityKind) -> ScopeRule:
    return ScopeRule("related", via)


K = EntityKind

SCOPE_RULES: dict[PortalType, dict[EntityKind, ScopeRule]] = {
    PortalType.ADMIN: {
        K.FUNDER: ALL,
        K.LENDER: ALL,
        K.ISO: ALL,
        K.MERCHANT: ALL,
        K.SYNDICATOR: ALL,
    },
    PortalType.BOOKKEEPER: {
        K.FUNDER: OWN,
        K.LENDER: ALL,
        K.ISO: ALL,
        K.MERCHANT: ALL,
        K.SYNDICATOR: ALL,
    },
    PortalType.FUNDER: {
        K.FUNDER: OWN,
        K.LENDER: OWN_IF_GRANTED,
        K.ISO: related(K.FUNDER),
        K.MERCHANT: related(K.FUNDER),
        K.SYNDICATOR: related(K.FUNDER),
    },
    PortalType.ISO: {
        K.FUNDER: related(K.ISO),
        K.LENDER: ALL,
        K.ISO: OWN,
        K.MERCHANT: related(K.ISO),
        K.SYNDICATOR: NONE,
    },
    PortalType.MERCHANT: {
        K.FUNDER: related(K.MERCHANT),
        K.LENDER: ALL,
        K.ISO: related(K.MERCHANT),
        K.MERCHANT: OWN,
        K.SYNDICATOR: NONE,
    },
    PortalType.SYNDICATOR: {
        K.FUNDER: related(K.SYNDICATOR),
        K.LENDER: related(K.SYNDICATOR),
        K.ISO: NONE,
        K.MERCHANT: NONE,
        K.SYNDICATOR: OWN,
    },
    PortalType.LENDER: {
        K.FUNDER: related(K.LENDER),
        K.LENDER: OWN,
        K.ISO: NONE,
        K.MERCHANT: NONE,
        K.SYNDICATOR: related(K.LENDER),
    },
}


class ScopeResolver:
    """Resolve (and cache) the scope of one principal for one request."""

    def __init__(self, principal: Principal, lookup: RelationshipLookup | None = None) -> None:
        self._principal = principal
        self._lookup = lookup
        self._cache: dict[EntityKind, Scope] = {}

    @property
    def principal(self) -> Principal:
        return self._principal

    def scope(self, kind: EntityKind) -> Scope:
        cached = self._cache.get(kind)
        if cached is not None:
            return cached
        resolved = self._resolve(kind)
        self._cache[kind] = resolved
        return resolved

    def resolve(self) -> ScopeMap:
        return ScopeMap(**{kind.value: self.scope(kind) for kind in EntityKind})

    def _resolve(self, kind: EntityKind) -> Scope:
        rule = SCOPE_RULES[self._principal.portal][kind]

        if rule is ALL:
            return Scope.all()
        if rule is NONE:
            return Scope.none()

        if rule is OWN or rule is OWN_IF_GRANTED:
            owned = self._principal.owned(kind)
            if owned is None:
                return Scope.all() if rule is OWN_IF_GRANTED else Scope.none()
            return Scope.of(owned)

        # RELATED
        if rule.via is None:
            raise RuntimeError(f"Related scope rule for {kind.value} names no source kind")
        source = self._principal.owned(rule.via)
        if not source:
            return Scope.none()
        if self._lookup is None:
            raise RuntimeError(f"Scope for {kind.value} needs a relationship lookup")

        ids = self._lookup.list_related_ids(rule.via, list(source), kind)
        logger.debug(
            "Resolved %s scope via %s principal=%s portal=%s count=%d",
            kind.value,
            rule.via.value,
            self._principal.id,
            self._principal.portal.value,
            len(ids),
        )
        return Scope.of(ids)


def resolve_scope(principal: Principal, lookup: RelationshipLookup | None = None) -> ScopeMap:
    """Resolve every kind at once. Prefer `ScopeResolver.scope` when only a few are needed."""
    return ScopeResolver(principal, lookup).resolve()
