"""
Filter builder: intersect a resolved scope with a client-requested filter.

Policy, applied the same way for every kind and every call site:
- A single requested id outside the scope is rejected with Forbidden.
- A requested list is intersected with the scope silently; an empty
  intersection becomes a zero-match fragment.
- A NONE scope always yields a zero-match fragment.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

import sqlalchemy as sa
from sqlalchemy.sql.elements import ColumnElement

from mca_api.constants import EntityKind
from mca_api.errors import Forbidden

from .scope import Scope, ScopeMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Single:
    value: str


@dataclass(frozen=True)
class Many:
    values: tuple[str, ...]


FilterValue = Union[Single, Many, None]


def parse_filter_value(raw: FilterValue | str | Sequence[str]) -> FilterValue:
    """
    Normalize a raw value: a string is Single, any sequence is Many.

    An empty string is treated as absent; an empty sequence stays an empty
    Many so it can contribute a zero-match constraint.
    """

    if raw is None or isinstance(raw, (Single, Many)):
        return raw
    if isinstance(raw, str):
        return Single(raw) if raw else None
    return Many(tuple(str(v) for v in raw if v is not None and str(v) != ""))


def from_query_param(values: Sequence[str] | None) -> FilterValue:
    """
    Map a repeatable query parameter to a FilterValue.

    `?funder=a` is Single("a"); `?funder=a&funder=b` is Many(("a", "b")).
    """

    if not values:
        return None
    if len(values) == 1:
        return Single(values[0]) if values[0] else None
    return Many(tuple(v for v in values if v))


class FragmentOp(str, Enum):
    ANY = "any"
    EQ = "eq"
    IN = "in"
    NOTHING = "nothing"


@dataclass(frozen=True)
class QueryFragment:
    """
    A constraint on one owner-reference column.

    Renders either as a document-query value (`to_document`) or as a
    SQLAlchemy clause (`to_clause`). `ANY` means "omit the constraint".
    """

    op: FragmentOp
    values: tuple[str, ...] = ()

    @classmethod
    def unconstrained(cls) -> QueryFragment:
        return cls(FragmentOp.ANY)

    @classmethod
    def nothing(cls) -> QueryFragment:
        return cls(FragmentOp.NOTHING)

    @classmethod
    def equals(cls, value: object) -> QueryFragment:
        return cls(FragmentOp.EQ, (str(value),))

    @classmethod
    def within(cls, values: Iterable[object]) -> QueryFragment:
        unique = tuple(dict.fromkeys(str(v) for v in values))
        if not unique:
            return cls.nothing()
        return cls(FragmentOp.IN, unique)

    @property
    def is_unconstrained(self) -> bool:
        return self.op is FragmentOp.ANY

    @property
    def matches_nothing(self) -> bool:
        return self.op is FragmentOp.NOTHING

    def matches(self, value: object) -> bool:
        if self.op is FragmentOp.ANY:
            return True
        if self.op is FragmentOp.NOTHING or value is None:
            return False
        return str(value) in self.values

    def to_document(self) -> Any:
        if self.op is FragmentOp.ANY:
            return None
        if self.op is FragmentOp.EQ:
            return self.values[0]
        return {"$in": list(self.values)}

    def to_clause(self, column: Any) -> ColumnElement[bool] | None:
        if self.op is FragmentOp.ANY:
            return None
        if self.op is FragmentOp.NOTHING:
            return sa.false()
        if self.op is FragmentOp.EQ:
            return column == self.values[0]
        return column.in_(self.values)


def build_filter(kind: EntityKind, scope: Scope, requested: FilterValue | str | Sequence[str] = None) -> QueryFragment:
    requested = parse_filter_value(requested)

    if scope.mode is ScopeMode.NONE:
        return QueryFragment.nothing()

    if scope.mode is ScopeMode.ALL:
        if requested is None:
            return QueryFragment.unconstrained()
        if isinstance(requested, Single):
            return QueryFragment.equals(requested.value)
        return QueryFragment.within(requested.values)

    if requested is None:
        return QueryFragment.within(scope.sorted_ids())

    if isinstance(requested, Single):
        if scope.allows(requested.value):
            return QueryFragment.equals(requested.value)
        logger.warning("Requested %s outside scope: %s", kind.value, requested.value)
        raise Forbidden(kind.value)

    return QueryFragment.within(v for v in requested.values if scope.allows(v))


def build_funder_filter(scope: Scope, requested: FilterValue | str | Sequence[str] = None) -> QueryFragment:
    return build_filter(EntityKind.FUNDER, scope, requested)


def build_lender_filter(scope: Scope, requested: FilterValue | str | Sequence[str] = None) -> QueryFragment:
    return build_filter(EntityKind.LENDER, scope, requested)


def build_iso_filter(scope: Scope, requested: FilterValue | str | Sequence[str] = None) -> QueryFragment:
    return build_filter(EntityKind.ISO, scope, requested)


def build_merchant_filter(scope: Scope, requested: FilterValue | str | Sequence[str] = None) -> QueryFragment:
    return build_filter(EntityKind.MERCHANT, scope, requested)


def build_syndicator_filter(scope: Scope, requested: FilterValue | str | Sequence[str] = None) -> QueryFragment:
    return build_filter(EntityKind.SYNDICATOR, scope, requested)


def build_array_filter(value: FilterValue | str | Sequence[str]) -> QueryFragment:
    """Equality for a single value, IN for a list, zero-match for an empty list."""
    parsed = parse_filter_value(value)
    if parsed is None:
        return QueryFragment.unconstrained()
    if isinstance(parsed, Single):
        return QueryFragment.equals(parsed.value)
    return QueryFragment.within(parsed.values)
