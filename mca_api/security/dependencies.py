from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from mca_api.db.session import get_db
from mca_api.services.relationships import RelationshipStore

from .auth import extract_token, load_principal_record
from .config import SecurityConfig
from .context import AuthContext
from .decorators import required_permissions
from .principal import Principal
from .tokens import AccessTokenValidator, TokenValidationError

logger = logging.getLogger(__name__)


def get_security_config(request: Request) -> SecurityConfig:
    config = getattr(request.app.state, "security_config", None)
    if config is None:
        raise RuntimeError("Security config not loaded. Did app startup run?")
    return config


def get_token_validator(request: Request) -> AccessTokenValidator:
    validator = getattr(request.app.state, "token_validator", None)
    if validator is None:
        raise RuntimeError("Token validator not configured. Did app startup run?")
    return validator


def enforce_security(
    request: Request,
    config: SecurityConfig = Depends(get_security_config),
    validator: AccessTokenValidator = Depends(get_token_validator),
    db: Session = Depends(get_db),
) -> None:
    """
    Global security dependency.

    Runs after routing for every route, so it can read the `@requires`
    metadata of the matched handler. Public routes without requirements skip
    authentication entirely.
    """

    path = request.url.path
    method = request.method.upper()

    required = required_permissions(request.scope.get("endpoint"))
    if not required and config.is_public(path, method):
        return

    token = extract_token(request, config)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        principal = validator.validate_and_extract(token)
    except TokenValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    record = load_principal_record(db, principal)

    extra = set(principal.permission_list) | set(getattr(record, "permission_list", None) or [])
    permissions = config.permissions.permissions_for(principal.role, extra)

    if not required <= permissions:
        logger.warning(
            "Permission denied principal=%s portal=%s role=%s missing=%s",
            principal.id,
            principal.portal.value,
            principal.role,
            sorted(required - permissions),
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to perform this action")

    request.state.principal = principal
    request.state.permissions = permissions


def get_current_principal(request: Request) -> Principal:
    principal = getattr(request.state, "principal", None)
    if principal is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return principal


def get_auth_context(request: Request, db: Session = Depends(get_db)) -> AuthContext:
    """
    Build the request's `AuthContext`.

    FastAPI caches dependencies per request, so every handler parameter that
    depends on this shares one context and therefore one set of resolved
    scopes.
    """

    principal = get_current_principal(request)
    permissions = getattr(request.state, "permissions", frozenset())
    return AuthContext.build(principal, RelationshipStore(db), frozenset(permissions))
