from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from mca_api.constants import EntityKind
from mca_api.db.query import (
    ListParams,
    apply_conditions,
    build_array_condition,
    build_gte_filter,
    build_lte_filter,
    build_search_filter,
    build_sort,
    get_or_404,
    list_params,
    paginate,
    scope_conditions,
)
from mca_api.db.session import get_db
from mca_api.models import Funding, Payback
from mca_api.schemas.common import Page
from mca_api.schemas.fundings import PaybackCreate, PaybackOut, PaybackUpdate
from mca_api.security import AuthContext
from mca_api.security.decorators import requires
from mca_api.security.dependencies import get_auth_context
from mca_api.services.records import apply_changes, to_columns

router = APIRouter(prefix="/paybacks", tags=["paybacks"])

MONEY_FIELDS = ("payback_amount",)

SORTABLE = {
    "created_at": Payback.created_at,
    "due_date": Payback.due_date,
    "processed_date": Payback.processed_date,
    "payback_amount": Payback.payback_amount,
    "status": Payback.status,
}


@router.get("", response_model=Page[PaybackOut])
@requires("payback:read")
def list_paybacks(
    funder: list[str] | None = Query(None),
    lender: list[str] | None = Query(None),
    merchant: list[str] | None = Query(None),
    funding: list[str] | None = Query(None),
    status_: list[str] | None = Query(None, alias="status"),
    payment_method: list[str] | None = Query(None),
    due_date_from: str | None = None,
    due_date_to: str | None = None,
    params: ListParams = Depends(list_params),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> dict:
    conditions = scope_conditions(
        auth,
        [
            (EntityKind.FUNDER, Payback.funder_id, funder),
            (EntityKind.LENDER, Payback.lender_id, lender),
            (EntityKind.MERCHANT, Payback.merchant_id, merchant),
        ],
    )
    conditions += [
        build_search_filter([Payback.note], params.search),
        build_array_condition(Payback.funding_id, funding),
        build_array_condition(Payback.status, status_),
        build_array_condition(Payback.payment_method, payment_method),
        build_gte_filter(Payback.due_date, due_date_from, parse=date.fromisoformat),
        build_lte_filter(Payback.due_date, due_date_to, parse=date.fromisoformat),
    ]

    stmt = apply_conditions(select(Payback), conditions)
    return paginate(db, stmt, params, build_sort(params.sort, SORTABLE, "-due_date"))


@router.get("/{id}", response_model=PaybackOut)
@requires("payback:read")
def get_payback(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)) -> Payback:
    payback = get_or_404(db, Payback, id, "payback")
    auth.require(payback, "payback")
    return payback


@router.post("", response_model=PaybackOut, status_code=status.HTTP_201_CREATED)
@requires("payback:create")
def create_payback(
    payload: PaybackCreate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> Payback:
    funding = get_or_404(db, Funding, payload.funding_id, "funding")
    auth.require(funding, "funding")

    payback = Payback(
        funder_id=funding.funder_id,
        lender_id=funding.lender_id,
        merchant_id=funding.merchant_id,
        **to_columns(payload.model_dump(), MONEY_FIELDS),
    )
    db.add(payback)
    db.commit()
    db.refresh(payback)
    return payback


@router.put("/{id}", response_model=PaybackOut)
@requires("payback:update")
def update_payback(
    id: str,
    payload: PaybackUpdate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> Payback:
    payback = get_or_404(db, Payback, id, "payback")
    auth.require(payback, "payback")
    apply_changes(payback, payload.model_dump(exclude_unset=True), MONEY_FIELDS)
    db.commit()
    db.refresh(payback)
    return payback


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
@requires("payback:delete")
def delete_payback(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)) -> None:
    payback = get_or_404(db, Payback, id, "payback")
    auth.require(payback, "payback")
    db.delete(payback)
    db.commit()
