from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from mca_api.constants import EntityKind
from mca_api.db.query import (
    ListParams,
    apply_conditions,
    build_search_filter,
    build_sort,
    get_or_404,
    list_params,
    paginate,
    scope_conditions,
)
from mca_api.db.session import get_db
from mca_api.models import ISOMerchant, Merchant, MerchantFunder
from mca_api.schemas.common import Page
from mca_api.schemas.parties import MerchantCreate, MerchantOut, MerchantUpdate
from mca_api.security import AuthContext
from mca_api.security.decorators import requires
from mca_api.security.dependencies import get_auth_context
from mca_api.services.records import apply_changes
from mca_api.services.relationships import ensure_link

router = APIRouter(prefix="/merchants", tags=["merchants"])

SORTABLE = {
    "created_at": Merchant.created_at,
    "name": Merchant.name,
    "dba_name": Merchant.dba_name,
    "email": Merchant.email,
}


def _owners(merchant: Merchant) -> dict[str, str]:
    return {"merchant_id": merchant.id}


@router.get("", response_model=Page[MerchantOut])
@requires("merchant:read")
def list_merchants(
    id: list[str] | None = Query(None),
    include_inactive: bool = False,
    params: ListParams = Depends(list_params),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> dict:
    conditions = scope_conditions(auth, [(EntityKind.MERCHANT, Merchant.id, id)])
    conditions.append(
        build_search_filter([Merchant.name, Merchant.dba_name, Merchant.email, Merchant.phone], params.search)
    )
    if not include_inactive:
        conditions.append(Merchant.inactive.is_(False))

    stmt = apply_conditions(select(Merchant), conditions)
    return paginate(db, stmt, params, build_sort(params.sort, SORTABLE, "name"))


@router.get("/{id}", response_model=MerchantOut)
@requires("merchant:read")
def get_merchant(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)) -> Merchant:
    merchant = get_or_404(db, Merchant, id, "merchant")
    auth.require(_owners(merchant), "merchant")
    return merchant


@router.post("", response_model=MerchantOut, status_code=status.HTTP_201_CREATED)
@requires("merchant:create")
def create_merchant(
    payload: MerchantCreate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> Merchant:
    # The new merchant must be reachable through a link the creator can see.
    linked = payload.funder_id or payload.iso_id
    if not linked and not auth.scope(EntityKind.MERCHANT).unrestricted:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="funder_id or iso_id is required")
    auth.require({"funder_id": payload.funder_id, "iso_id": payload.iso_id}, "merchant")

    merchant = Merchant(**payload.model_dump(exclude={"funder_id", "iso_id"}))
    db.add(merchant)
    db.flush()
    if payload.funder_id:
        ensure_link(db, MerchantFunder, merchant_id=merchant.id, funder_id=payload.funder_id)
    if payload.iso_id:
        ensure_link(db, ISOMerchant, iso_id=payload.iso_id, merchant_id=merchant.id)
    db.commit()
    db.refresh(merchant)
    return merchant


@router.put("/{id}", response_model=MerchantOut)
@requires("merchant:update")
def update_merchant(
    id: str,
    payload: MerchantUpdate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> Merchant:
    merchant = get_or_404(db, Merchant, id, "merchant")
    auth.require(_owners(merchant), "merchant")
    apply_changes(merchant, payload.model_dump(exclude_unset=True))
    db.commit()
    db.refresh(merchant)
    return merchant


@router.delete("/{id}", response_model=MerchantOut)
@requires("merchant:delete")
def delete_merchant(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)) -> Merchant:
    merchant = get_or_404(db, Merchant, id, "merchant")
    auth.require(_owners(merchant), "merchant")
    merchant.inactive = True
    db.commit()
    db.refresh(merchant)
    return merchant
