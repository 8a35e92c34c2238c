from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from mca_api.constants import EntityKind


class ScopeMode(str, Enum):
    ALL = "all"
    NONE = "none"
    SET = "set"


@dataclass(frozen=True)
class Scope:
    """
    What a principal may touch for one entity kind.

    - ALL: no restriction (admin, or kinds a portal is not scoped by).
    - NONE: explicit denial; the principal has no entities of this kind.
    - SET: exactly `ids`. Never empty; an empty set collapses to NONE.
    """

    mode: ScopeMode
    ids: frozenset[str] = frozenset()

    @classmethod
    def all(cls) -> Scope:
        return cls(ScopeMode.ALL)

    @classmethod
    def none(cls) -> Scope:
        return cls(ScopeMode.NONE)

    @classmethod
    def of(cls, ids: Iterable[object]) -> Scope:
        normalized = frozenset(str(i) for i in ids if i is not None and str(i) != "")
        if not normalized:
            return cls.none()
        return cls(ScopeMode.SET, normalized)

    @property
    def unrestricted(self) -> bool:
        return self.mode is ScopeMode.ALL

    def allows(self, entity_id: object) -> bool:
        if self.mode is ScopeMode.ALL:
            return True
        if self.mode is ScopeMode.NONE or entity_id is None:
            return False
        return str(entity_id) in self.ids

    def sorted_ids(self) -> list[str]:
        return sorted(self.ids)

    def describe(self) -> str | list[str]:
        """JSON-friendly summary: "all", "none", or the sorted id list."""
        if self.mode is ScopeMode.SET:
            return self.sorted_ids()
        return self.mode.value


@dataclass(frozen=True)
class ScopeMap:
    """Resolved scope for every entity kind."""

    funder: Scope
    lender: Scope
    iso: Scope
    syndicator: Scope
    merchant: Scope

    @classmethod
    def unrestricted(cls) -> ScopeMap:
        return cls(**{kind.value: Scope.all() for kind in EntityKind})

    def scope(self, kind: EntityKind) -> Scope:
        return getattr(self, kind.value)

    def __getitem__(self, kind: EntityKind) -> Scope:
        return self.scope(kind)

    def describe(self) -> dict[str, str | list[str]]:
        return {kind.value: self.scope(kind).describe() for kind in EntityKind}
