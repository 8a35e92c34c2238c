from __future__ import annotations

from collections.abc import Callable

REQUIRED_PERMISSIONS_ATTR = "__required_permissions__"


def requires(*permissions: str) -> Callable:
    """
    Declare the `resource:action` permissions a route handler needs.

    The decorator does NOT check anything itself. It attaches metadata that
    the global security dependency reads after routing. Stacking decorators
    accumulates permissions; all of them are required.
    """

    def decorator(fn: Callable) -> Callable:
        existing = frozenset(getattr(fn, REQUIRED_PERMISSIONS_ATTR, frozenset()))
        setattr(fn, REQUIRED_PERMISSIONS_ATTR, existing | frozenset(permissions))
        return fn

    return decorator


def required_permissions(endpoint: Callable | None) -> frozenset[str]:
    if endpoint is None:
        return frozenset()
    return frozenset(getattr(endpoint, REQUIRED_PERMISSIONS_ATTR, frozenset()))
