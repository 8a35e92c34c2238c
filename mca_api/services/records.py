from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from mca_api.money import dollars_to_cents


def apply_changes(obj: Any, changes: dict[str, Any], money_fields: Iterable[str] = ()) -> Any:
    """Copy `changes` onto `obj`, converting dollar amounts to cents."""
    money = set(money_fields)
    for name, value in changes.items():
        if name in money:
            value = dollars_to_cents(value)
        setattr(obj, name, value)
    return obj


def to_columns(data: dict[str, Any], money_fields: Iterable[str] = ()) -> dict[str, Any]:
    money = set(money_fields)
    return {k: (dollars_to_cents(v) if k in money else v) for k, v in data.items()}
