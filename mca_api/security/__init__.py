"""
Request-scoped authorization for the MCA API.

The pieces, leaf to root:
- `scope`: per-kind access scope values (ALL / NONE / SET of ids).
- `resolver`: principal -> scope per entity kind (with relationship lookups).
- `filters`: scope + requested filter -> query fragment, or Forbidden.
- `access`: post-fetch gate for single records.
"""

from .access import assert_access
from .context import AuthContext
from .filters import Many, QueryFragment, Single, build_array_filter, build_filter
from .principal import Principal
from .resolver import ScopeResolver, resolve_scope
from .scope import Scope, ScopeMap

__all__ = [
    "AuthContext",
    "Many",
    "Principal",
    "QueryFragment",
    "Scope",
    "ScopeMap",
    "ScopeResolver",
    "Single",
    "assert_access",
    "build_array_filter",
    "build_filter",
    "resolve_scope",
]
