from __future__ import annotations

import logging

from fastapi import HTTPException, Request, status
from sqlalchemy.orm import Session

from mca_api.constants import PortalType
from mca_api.models import Admin, Bookkeeper, Contact, Representative, Syndicator, User

from .config import SecurityConfig
from .principal import Principal

logger = logging.getLogger(__name__)

# Which table backs each portal's logins.
PRINCIPAL_MODELS: dict[PortalType, type] = {
    PortalType.ADMIN: Admin,
    PortalType.BOOKKEEPER: Bookkeeper,
    PortalType.FUNDER: User,
    PortalType.LENDER: User,
    PortalType.ISO: Representative,
    PortalType.MERCHANT: Contact,
    PortalType.SYNDICATOR: Syndicator,
}


def extract_token(request: Request, config: SecurityConfig) -> str | None:
    """
    Read `Authorization: Bearer <token>`.

    Returns None when the header is absent; raises 400 when it is present but
    not in the expected shape.
    """

    header_name = config.auth.authorization_header
    bearer_prefix = config.auth.bearer_prefix

    raw = request.headers.get(header_name)
    if not raw:
        logger.info("Missing Authorization header (auth required) path=%s method=%s", request.url.path, request.method)
        return None

    prefix = f"{bearer_prefix} "
    if not raw.startswith(prefix):
        logger.warning("Invalid Authorization header format path=%s method=%s", request.url.path, request.method)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {header_name}. Expected '{bearer_prefix} <token>'.",
        )

    token = raw[len(prefix) :].strip()
    if not token:
        logger.warning("Empty bearer token path=%s method=%s", request.url.path, request.method)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {header_name}. Missing token after '{bearer_prefix}'.",
        )

    return token


def load_principal_record(db: Session, principal: Principal) -> object:
    """The login record behind a token must still exist and be active."""
    model = PRINCIPAL_MODELS[principal.portal]
    record = db.get(model, principal.id)

    if record is None or getattr(record, "inactive", False):
        logger.info("Token for missing or inactive principal portal=%s", principal.portal.value)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or inactive user")

    return record
