from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from mca_api.constants import EntityKind
from mca_api.db.query import (
    ListParams,
    apply_conditions,
    build_array_condition,
    build_boolean_filter,
    build_sort,
    get_or_404,
    list_params,
    paginate,
    scope_conditions,
)
from mca_api.db.session import get_db
from mca_api.models import Payout, Syndication
from mca_api.schemas.common import Page
from mca_api.schemas.fundings import PayoutCreate, PayoutOut, PayoutUpdate
from mca_api.security import AuthContext
from mca_api.security.decorators import requires
from mca_api.security.dependencies import get_auth_context
from mca_api.services.records import apply_changes, to_columns

router = APIRouter(prefix="/payouts", tags=["payouts"])

MONEY_FIELDS = ("payout_amount", "fee_amount")

SORTABLE = {
    "created_at": Payout.created_at,
    "redeemed_date": Payout.redeemed_date,
    "payout_amount": Payout.payout_amount,
}


@router.get("", response_model=Page[PayoutOut])
@requires("payout:read")
def list_payouts(
    funder: list[str] | None = Query(None),
    lender: list[str] | None = Query(None),
    syndicator: list[str] | None = Query(None),
    funding: list[str] | None = Query(None),
    syndication: list[str] | None = Query(None),
    pending: bool | None = None,
    params: ListParams = Depends(list_params),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> dict:
    conditions = scope_conditions(
        auth,
        [
            (EntityKind.FUNDER, Payout.funder_id, funder),
            (EntityKind.LENDER, Payout.lender_id, lender),
            (EntityKind.SYNDICATOR, Payout.syndicator_id, syndicator),
        ],
    )
    conditions += [
        build_array_condition(Payout.funding_id, funding),
        build_array_condition(Payout.syndication_id, syndication),
        build_boolean_filter(Payout.pending, pending),
    ]

    stmt = apply_conditions(select(Payout), conditions)
    return paginate(db, stmt, params, build_sort(params.sort, SORTABLE, "-created_at"))


@router.get("/{id}", response_model=PayoutOut)
@requires("payout:read")
def get_payout(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)) -> Payout:
    payout = get_or_404(db, Payout, id, "payout")
    auth.require(payout, "payout")
    return payout


@router.post("", response_model=PayoutOut, status_code=status.HTTP_201_CREATED)
@requires("payout:create")
def create_payout(
    payload: PayoutCreate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> Payout:
    syndication = get_or_404(db, Syndication, payload.syndication_id, "syndication")
    auth.require(syndication, "syndication")

    payout = Payout(
        funding_id=syndication.funding_id,
        funder_id=syndication.funder_id,
        lender_id=syndication.lender_id,
        syndicator_id=syndication.syndicator_id,
        **to_columns(payload.model_dump(), MONEY_FIELDS),
    )
    db.add(payout)
    db.commit()
    db.refresh(payout)
    return payout


@router.put("/{id}", response_model=PayoutOut)
@requires("payout:update")
def update_payout(
    id: str,
    payload: PayoutUpdate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> Payout:
    payout = get_or_404(db, Payout, id, "payout")
    auth.require(payout, "payout")
    apply_changes(payout, payload.model_dump(exclude_unset=True), MONEY_FIELDS)
    db.commit()
    db.refresh(payout)
    return payout


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
@requires("payout:delete")
def delete_payout(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)) -> None:
    payout = get_or_404(db, Payout, id, "payout")
    auth.require(payout, "payout")
    db.delete(payout)
    db.commit()
