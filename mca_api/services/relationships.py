"""
Relationship lookups used to derive scopes (e.g. the ISOs working with my funders).

Each supported (owner kind, target kind) pair maps onto one table with an
owner column and a target column. Lookups read the database every time they
are called; caching is the resolver's job and never outlives a request.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mca_api.constants import EntityKind
from mca_api.errors import ScopeResolutionFailure
from mca_api.models import (
    ISOFunder,
    ISOMerchant,
    Lender,
    MerchantFunder,
    SyndicatorFunder,
    SyndicatorLender,
)

logger = logging.getLogger(__name__)

K = EntityKind


@dataclass(frozen=True)
class LinkTable:
    model: type
    owner_column: str
    target_column: str
    skip_inactive: bool = True


LINKS: dict[tuple[EntityKind, EntityKind], LinkTable] = {
    (K.FUNDER, K.ISO): LinkTable(ISOFunder, "funder_id", "iso_id"),
    (K.FUNDER, K.MERCHANT): LinkTable(MerchantFunder, "funder_id", "merchant_id"),
    (K.FUNDER, K.SYNDICATOR): LinkTable(SyndicatorFunder, "funder_id", "syndicator_id"),
    (K.ISO, K.FUNDER): LinkTable(ISOFunder, "iso_id", "funder_id"),
    (K.ISO, K.MERCHANT): LinkTable(ISOMerchant, "iso_id", "merchant_id"),
    (K.MERCHANT, K.FUNDER): LinkTable(MerchantFunder, "merchant_id", "funder_id"),
    (K.MERCHANT, K.ISO): LinkTable(ISOMerchant, "merchant_id", "iso_id"),
    (K.SYNDICATOR, K.FUNDER): LinkTable(SyndicatorFunder, "syndicator_id", "funder_id"),
    (K.SYNDICATOR, K.LENDER): LinkTable(SyndicatorLender, "syndicator_id", "lender_id"),
    (K.LENDER, K.SYNDICATOR): LinkTable(SyndicatorLender, "lender_id", "syndicator_id"),
    # A lender belongs to exactly one funder, active or not.
    (K.LENDER, K.FUNDER): LinkTable(Lender, "id", "funder_id", skip_inactive=False),
}


class RelationshipStore:
    """Read-only relationship lookups over the link tables of one session."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def list_related_ids(
        self,
        owner_kind: EntityKind,
        owner_ids: Sequence[str],
        target_kind: EntityKind,
    ) -> list[str]:
        link = LINKS.get((owner_kind, target_kind))
        if link is None:
            raise ValueError(f"No relationship from {owner_kind.value} to {target_kind.value}")
        if not owner_ids:
            return []

        owner_col = getattr(link.model, link.owner_column)
        target_col = getattr(link.model, link.target_column)

        stmt = select(target_col).where(owner_col.in_(list(owner_ids))).distinct()
        if link.skip_inactive:
            stmt = stmt.where(link.model.inactive.is_(False))

        try:
            ids = self._db.scalars(stmt).all()
        except SQLAlchemyError as e:
            logger.error(
                "Relationship lookup failed owner=%s target=%s: %s",
                owner_kind.value,
                target_kind.value,
                type(e).__name__,
            )
            raise ScopeResolutionFailure() from e

        return sorted(str(i) for i in ids if i is not None)


def ensure_link(db: Session, model: type, **columns: str) -> Any:
    """Create (or reactivate) the link row identified by `columns` and return it."""
    stmt = select(model)
    for name, value in columns.items():
        stmt = stmt.where(getattr(model, name) == value)
    link = db.scalars(stmt).first()
    if link is None:
        link = model(**columns)
        db.add(link)
    elif link.inactive:
        link.inactive = False
    return link
