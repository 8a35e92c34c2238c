from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from mca_api.constants import EntityKind
from mca_api.db.query import (
    ListParams,
    apply_conditions,
    build_array_condition,
    build_boolean_filter,
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
from mca_api.models import (
    ISO,
    Application,
    Funder,
    Funding,
    ISOFunder,
    ISOMerchant,
    Lender,
    Merchant,
    MerchantFunder,
)
from mca_api.schemas.common import Page
from mca_api.schemas.fundings import FundingCreate, FundingOut, FundingUpdate
from mca_api.security import AuthContext
from mca_api.security.decorators import requires
from mca_api.security.dependencies import get_auth_context
from mca_api.services.records import apply_changes, to_columns
from mca_api.services.relationships import ensure_link

router = APIRouter(prefix="/fundings", tags=["fundings"])

MONEY_FIELDS = ("funded_amount", "payback_amount")

SORTABLE = {
    "created_at": Funding.created_at,
    "updated_at": Funding.updated_at,
    "name": Funding.name,
    "identifier": Funding.identifier,
    "funded_amount": Funding.funded_amount,
    "payback_amount": Funding.payback_amount,
    "status": Funding.status,
}


def _check_lender(db: Session, lender_id: str, funder_id: str) -> None:
    lender = get_or_404(db, Lender, lender_id, "lender")
    if lender.funder_id != funder_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Lender does not belong to the funder")


@router.get("", response_model=Page[FundingOut])
@requires("funding:read")
def list_fundings(
    funder: list[str] | None = Query(None),
    lender: list[str] | None = Query(None),
    merchant: list[str] | None = Query(None),
    iso: list[str] | None = Query(None),
    type_: list[str] | None = Query(None, alias="type"),
    status_: list[str] | None = Query(None, alias="status"),
    internal: bool | None = None,
    include_inactive: bool = False,
    funded_amount_from: str | None = None,
    funded_amount_to: str | None = None,
    payback_amount_from: str | None = None,
    payback_amount_to: str | None = None,
    params: ListParams = Depends(list_params),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> dict:
    conditions = scope_conditions(
        auth,
        [
            (EntityKind.FUNDER, Funding.funder_id, funder),
            (EntityKind.LENDER, Funding.lender_id, lender),
            (EntityKind.MERCHANT, Funding.merchant_id, merchant),
            (EntityKind.ISO, Funding.iso_id, iso),
        ],
    )
    conditions += [
        build_search_filter([Funding.name, Funding.identifier], params.search),
        build_array_condition(Funding.type, type_),
        build_array_condition(Funding.status, status_),
        build_boolean_filter(Funding.internal, internal),
        build_gte_filter(Funding.funded_amount, funded_amount_from, dollars=True),
        build_lte_filter(Funding.funded_amount, funded_amount_to, dollars=True),
        build_gte_filter(Funding.payback_amount, payback_amount_from, dollars=True),
        build_lte_filter(Funding.payback_amount, payback_amount_to, dollars=True),
    ]
    if not include_inactive:
        conditions.append(Funding.inactive.is_(False))

    stmt = apply_conditions(select(Funding), conditions)
    return paginate(db, stmt, params, build_sort(params.sort, SORTABLE, "-created_at"))


@router.get("/{id}", response_model=FundingOut)
@requires("funding:read")
def get_funding(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)) -> Funding:
    funding = get_or_404(db, Funding, id, "funding")
    auth.require(funding, "funding")
    return funding


@router.post("", response_model=FundingOut, status_code=status.HTTP_201_CREATED)
@requires("funding:create")
def create_funding(
    payload: FundingCreate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> Funding:
    data = payload.model_dump()
    auth.require(data, "funding")

    if payload.application_id:
        application = get_or_404(db, Application, payload.application_id, "application")
        auth.require(application, "application")

    get_or_404(db, Funder, payload.funder_id, "funder")
    get_or_404(db, Merchant, payload.merchant_id, "merchant")
    if payload.iso_id:
        get_or_404(db, ISO, payload.iso_id, "iso")
    _check_lender(db, payload.lender_id, payload.funder_id)

    funding = Funding(**to_columns(data, MONEY_FIELDS))
    db.add(funding)

    ensure_link(db, MerchantFunder, merchant_id=payload.merchant_id, funder_id=payload.funder_id)
    if payload.iso_id:
        ensure_link(db, ISOFunder, iso_id=payload.iso_id, funder_id=payload.funder_id)
        ensure_link(db, ISOMerchant, iso_id=payload.iso_id, merchant_id=payload.merchant_id)

    db.commit()
    db.refresh(funding)
    return funding


@router.put("/{id}", response_model=FundingOut)
@requires("funding:update")
def update_funding(
    id: str,
    payload: FundingUpdate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> Funding:
    funding = get_or_404(db, Funding, id, "funding")
    auth.require(funding, "funding")

    changes = payload.model_dump(exclude_unset=True)
    if changes.get("lender_id"):
        auth.require({"lender_id": changes["lender_id"]}, "lender")
        _check_lender(db, changes["lender_id"], funding.funder_id)

    apply_changes(funding, changes, MONEY_FIELDS)
    db.commit()
    db.refresh(funding)
    return funding


@router.delete("/{id}", response_model=FundingOut)
@requires("funding:delete")
def delete_funding(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)) -> Funding:
    funding = get_or_404(db, Funding, id, "funding")
    auth.require(funding, "funding")
    funding.inactive = True
    db.commit()
    db.refresh(funding)
    return funding
