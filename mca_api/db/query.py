"""
List-query plumbing shared by every controller: sorting, search, array and
range filters, owner-scope constraints and pagination.
"""

from __future__ import annotations

import math
import operator
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from fastapi import Depends, HTTPException, Query, status
from sqlalchemy import Select, and_, false, func, not_, or_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from mca_api.constants import EntityKind
from mca_api.errors import NotFound
from mca_api.money import dollars_to_cents
from mca_api.security import AuthContext
from mca_api.security.filters import FilterValue, from_query_param
from mca_api.settings import Settings, get_settings

EMPTY = "EMPTY"


@dataclass(frozen=True)
class ListParams:
    page: int
    limit: int
    sort: str | None
    search: str | None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def list_params(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    sort: str | None = Query(None, description="Comma separated fields, '-' prefix for descending"),
    search: str | None = Query(None),
    settings: Settings = Depends(get_settings),
) -> ListParams:
    limit = min(limit or settings.default_page_size, settings.max_page_size)
    return ListParams(page=page, limit=limit, sort=sort, search=search)


# ---- Sorting -------------------------------------------------------------------------


def build_sort(sort: str | None, columns: Mapping[str, Any], default: str) -> list[Any]:
    """
    Parse `"-created_at,name"` into ORDER BY clauses.

    Only fields present in `columns` are sortable; anything else is a 400.
    """

    fields = sort or default
    clauses: list[Any] = []
    for item in fields.split(","):
        item = item.strip()
        if not item:
            continue
        descending = item.startswith("-")
        name = item[1:] if descending else item
        column = columns.get(name)
        if column is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid sort field: {name}")
        clauses.append(column.desc() if descending else column.asc())
    return clauses


# ---- Filters -------------------------------------------------------------------------


def _blank(column: Any) -> ColumnElement[bool]:
    return or_(column.is_(None), func.trim(column) == "")


def build_search_filter(columns: Sequence[Any], value: str | None) -> ColumnElement[bool] | None:
    """
    Case-insensitive substring search over `columns`.

    Terms are space separated. Plain terms are OR-ed across all columns; a
    `-term` excludes rows where any column contains it. `EMPTY` matches a
    blank column and `-EMPTY` a non-blank one.
    """

    if not value or not value.strip() or not columns:
        return None

    terms = [t for t in value.split(" ") if t.strip()]
    excludes = [t[1:].strip() for t in terms if t.startswith("-") and t[1:].strip()]
    includes = [t.strip() for t in terms if not t.startswith("-")]

    clauses: list[ColumnElement[bool]] = []
    for term in excludes:
        for column in columns:
            if term == EMPTY:
                clauses.append(not_(_blank(column)))
            else:
                clauses.append(or_(column.is_(None), not_(column.ilike(f"%{term}%"))))

    if includes:
        alternatives: list[ColumnElement[bool]] = []
        for term in includes:
            for column in columns:
                alternatives.append(_blank(column) if term == EMPTY else column.ilike(f"%{term}%"))
        clauses.append(or_(*alternatives))

    if not clauses:
        return None
    return and_(*clauses)


def build_array_condition(column: Any, values: str | Sequence[str] | None) -> ColumnElement[bool] | None:
    """
    Membership filter on one column.

    `-value` excludes, `EMPTY` matches NULL, `-EMPTY` requires a value. A
    single value is equality, several are IN. An explicitly empty list
    matches nothing.
    """

    if values is None:
        return None
    if isinstance(values, str):
        values = [values] if values else []
    if not values:
        return false()

    excludes = [v[1:] for v in values if v.startswith("-")]
    includes = [v for v in values if not v.startswith("-")]

    clauses: list[ColumnElement[bool]] = []
    if excludes:
        if EMPTY in excludes:
            clauses.append(column.is_not(None))
        rest = [v for v in excludes if v != EMPTY]
        if rest:
            clauses.append(or_(column.is_(None), column.not_in(rest)))

    if includes:
        options: list[ColumnElement[bool]] = []
        if EMPTY in includes:
            options.append(column.is_(None))
        rest = [v for v in includes if v != EMPTY]
        if len(rest) == 1:
            options.append(column == rest[0])
        elif rest:
            options.append(column.in_(rest))
        clauses.append(or_(*options))

    return and_(*clauses)


def build_boolean_filter(column: Any, value: bool | None) -> ColumnElement[bool] | None:
    if value is None:
        return None
    if value:
        return column.is_(True)
    return or_(column.is_(None), column.is_not(True))


def _bound(
    column: Any,
    value: Any,
    compare: Callable[[Any, Any], ColumnElement[bool]],
    dollars: bool,
    parse: Callable[[str], Any] | None,
) -> ColumnElement[bool] | None:
    if value is None or value == "":
        return None

    if isinstance(value, str):
        raw = value.strip()
        if raw == EMPTY:
            return column.is_(None)
        if raw == f"-{EMPTY}":
            return column.is_not(None)
        try:
            if dollars:
                value = float(raw)
            elif parse is not None:
                value = parse(raw)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid range value: {raw}") from e

    if dollars:
        value = dollars_to_cents(value)
    return compare(column, value)


def build_gte_filter(
    column: Any, value: Any, dollars: bool = False, parse: Callable[[str], Any] | None = None
) -> ColumnElement[bool] | None:
    return _bound(column, value, operator.ge, dollars, parse)


def build_lte_filter(
    column: Any, value: Any, dollars: bool = False, parse: Callable[[str], Any] | None = None
) -> ColumnElement[bool] | None:
    return _bound(column, value, operator.le, dollars, parse)


# ---- Owner scope ---------------------------------------------------------------------


def scope_conditions(
    auth: AuthContext,
    owners: Sequence[tuple[EntityKind, Any, FilterValue | Sequence[str]]],
) -> list[ColumnElement[bool]]:
    """
    One constraint per owner column: the principal's scope for that kind,
    intersected with whatever the client asked for.

    `owners` holds `(kind, column, requested)`; `requested` may be a raw list
    of query values (one value is Single, several are Many). Rows with a NULL
    optional owner are not constrained by scope, the same way the access gate
    skips absent references.
    """

    clauses: list[ColumnElement[bool]] = []
    for kind, column, requested in owners:
        if isinstance(requested, list):
            requested = from_query_param(requested)
        fragment = auth.filter_for(kind, requested)
        clause = fragment.to_clause(column)
        if clause is None:
            continue
        if requested is None and _nullable(column):
            clause = or_(column.is_(None), clause)
        clauses.append(clause)
    return clauses


def _nullable(column: Any) -> bool:
    prop = getattr(column, "property", None)
    columns = getattr(prop, "columns", None)
    if columns:
        return bool(columns[0].nullable)
    return bool(getattr(column, "nullable", False))


def apply_conditions(stmt: Select, conditions: Sequence[ColumnElement[bool] | None]) -> Select:
    for condition in conditions:
        if condition is not None:
            stmt = stmt.where(condition)
    return stmt


# ---- Fetch helpers -------------------------------------------------------------------


def paginate(db: Session, stmt: Select, params: ListParams, order_by: Sequence[Any]) -> dict[str, Any]:
    total = db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery())) or 0
    docs = list(db.scalars(stmt.order_by(*order_by).offset(params.offset).limit(params.limit)).all())
    return {
        "docs": docs,
        "pagination": {
            "page": params.page,
            "limit": params.limit,
            "total": total,
            "pages": math.ceil(total / params.limit) if total else 0,
        },
    }


def get_or_404(db: Session, model: type, id: str, label: str) -> Any:
    obj = db.get(model, id)
    if obj is None:
        raise NotFound(label)
    return obj
