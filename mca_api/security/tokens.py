"""
Verify access tokens and turn their claims into a `Principal`.

Tokens are issued by the auth service at login (not by this API). The payload
carries who the caller is and the ownership lists computed at that time:

    {
      "id": "<principal id>",
      "portal": "funder",
      "role": "funder_manager",
      "filter": {"funder_list": ["..."], "lender_list": ["..."]},
      "permission_list": ["funding:create"],
      "exp": 1700000000
    }

Nothing in the payload is read before the signature and lifetime checks pass.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import jwt

from mca_api.constants import PORTAL_DEFAULT_ROLES, EntityKind, PortalType
from mca_api.settings import Settings

from .principal import Principal

logger = logging.getLogger(__name__)


class TokenValidationError(Exception):
    """Raised when token validation fails. Do not log the token."""


def _id_list(raw: Any) -> tuple[str, ...] | None:
    if raw is None:
        return None
    if isinstance(raw, (str, int)):
        raw = [raw]
    if not isinstance(raw, list):
        raise TokenValidationError("Invalid token: malformed filter list")
    return tuple(str(v) for v in raw if v is not None and str(v) != "")


def _extract_principal(payload: dict[str, Any]) -> Principal:
    """
    Build a `Principal` from a validated payload.

    * **id** is preferred; **sub** is accepted for tokens minted by generic
      JWT tooling.
    * **filter** may be absent (admins) or hold any subset of the five
      `<kind>_list` keys. A missing key means "not granted", an empty list
      means "granted, owns nothing".
    * Syndicators always own themselves when no list is given.
    """

    principal_id = payload.get("id") or payload.get("sub")
    if principal_id is None or str(principal_id) == "":
        raise TokenValidationError("Invalid token: missing subject")
    principal_id = str(principal_id)

    try:
        portal = PortalType(str(payload.get("portal", "")).lower())
    except ValueError as e:
        raise TokenValidationError("Invalid token: unknown portal") from e

    role = payload.get("role")
    role = str(role) if role else PORTAL_DEFAULT_ROLES[portal].value

    raw_filter = payload.get("filter") or {}
    if not isinstance(raw_filter, dict):
        raise TokenValidationError("Invalid token: malformed filter")

    lists: dict[str, tuple[str, ...] | None] = {}
    for kind in EntityKind:
        key = f"{kind.value}_list"
        lists[key] = _id_list(raw_filter.get(key, payload.get(key)))

    if portal is PortalType.SYNDICATOR and lists["syndicator_list"] is None:
        lists["syndicator_list"] = (principal_id,)

    permission_list = _id_list(payload.get("permission_list")) or ()

    return Principal(
        id=principal_id,
        portal=portal,
        role=role,
        permission_list=permission_list,
        **lists,
    )


class AccessTokenValidator:
    """
    Validates HS-signed access tokens with a shared secret.

    Signature and exp/nbf are always verified; the issuer only when one is
    configured.
    """

    def __init__(
        self,
        secret: str,
        algorithms: Sequence[str] = ("HS256",),
        issuer: str | None = None,
        leeway: int = 0,
    ) -> None:
        if not secret:
            raise ValueError("secret is required")
        self._secret = secret
        self._algorithms = list(algorithms)
        self._issuer = issuer
        self._leeway = leeway

    @classmethod
    def from_settings(cls, settings: Settings) -> AccessTokenValidator:
        return cls(
            secret=settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            leeway=settings.clock_skew_seconds,
        )

    def validate_and_extract(self, token: str) -> Principal:
        """
        Validate the access token and return the caller's `Principal`.

        Raises TokenValidationError if the signature, lifetime, issuer or
        claim shape is invalid.
        """

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=self._algorithms,
                issuer=self._issuer,
                leeway=self._leeway,
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_nbf": True,
                    "verify_iss": self._issuer is not None,
                    "verify_aud": False,
                },
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("Token expired")
            raise TokenValidationError("Token expired") from e
        except jwt.InvalidIssuerError as e:
            logger.info("Token invalid issuer")
            raise TokenValidationError("Invalid token: issuer") from e
        except jwt.InvalidTokenError as e:
            logger.info("Token invalid: %s", type(e).__name__)
            raise TokenValidationError("Invalid token") from e

        if not isinstance(payload, dict):
            raise TokenValidationError("Invalid token")

        return _extract_principal(payload)
