"""
Post-fetch access gate for single records.

A record is accessible only if every owner reference it carries is inside the
principal's scope for that reference's kind. References are read from, in
order: `<kind>_id`, `<kind>` (single), then `<kind>_ids`, `<kind>_list`
(multi). A multi-valued reference passes when any of its ids is in scope.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from mca_api.constants import EntityKind
from mca_api.errors import Forbidden, NotFound

from .scope import Scope

logger = logging.getLogger(__name__)

_SINGLE_FIELDS = ("{kind}_id", "{kind}")
_MULTI_FIELDS = ("{kind}_ids", "{kind}_list")


class ScopeSource(Protocol):
    def scope(self, kind: EntityKind) -> Scope: ...


def extract_id(ref: Any) -> str | None:
    """String id from a raw id, a mapping with `id`/`_id`, or an object with `.id`."""
    if ref is None or isinstance(ref, bool):
        return None
    if isinstance(ref, str):
        return ref or None
    if isinstance(ref, int):
        return str(ref)
    if isinstance(ref, Mapping):
        for key in ("id", "_id"):
            value = ref.get(key)
            if value is not None:
                return str(value)
        return None
    value = getattr(ref, "id", None)
    return str(value) if value is not None else None


def _field(entity: Any, name: str) -> Any:
    if isinstance(entity, Mapping):
        return entity.get(name)
    return getattr(entity, name, None)


def owner_references(entity: Any, kind: EntityKind) -> tuple[list[Any], bool] | None:
    """Return (references, is_multi) for `kind`, or None when the entity carries none."""
    for template in _SINGLE_FIELDS:
        value = _field(entity, template.format(kind=kind.value))
        if value is None:
            continue
        if isinstance(value, (list, tuple, set, frozenset)):
            return (list(value), True) if value else None
        return [value], False

    for template in _MULTI_FIELDS:
        value = _field(entity, template.format(kind=kind.value))
        if value:
            return list(value), True

    return None


def assert_access(scopes: ScopeSource, entity: Any, label: str = "record") -> None:
    """
    Raise unless `entity` is inside `scopes`.

    NotFound for a missing entity; Forbidden naming `label` when any owner
    reference is out of scope or cannot be read as an id.
    """

    if entity is None:
        raise NotFound(label)

    for kind in EntityKind:
        found = owner_references(entity, kind)
        if found is None:
            continue

        scope = scopes.scope(kind)
        if scope.unrestricted:
            continue

        refs, is_multi = found
        ids = [extract_id(r) for r in refs]
        if is_multi:
            allowed = any(i is not None and scope.allows(i) for i in ids)
        else:
            allowed = ids[0] is not None and scope.allows(ids[0])

        if not allowed:
            logger.warning("Access denied label=%s kind=%s", label, kind.value)
            raise Forbidden(label)
