from __future__ import annotations

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
    build_sort,
    get_or_404,
    list_params,
    paginate,
    scope_conditions,
)
from mca_api.db.session import get_db
from mca_api.models import Funding, Syndication, Syndicator, SyndicatorLender
from mca_api.schemas.common import Page
from mca_api.schemas.fundings import SyndicationCreate, SyndicationOut, SyndicationUpdate
from mca_api.security import AuthContext
from mca_api.security.decorators import requires
from mca_api.security.dependencies import get_auth_context
from mca_api.services.records import apply_changes, to_columns
from mca_api.services.relationships import ensure_link

router = APIRouter(prefix="/syndications", tags=["syndications"])

MONEY_FIELDS = ("participate_amount",)

SORTABLE = {
    "created_at": Syndication.created_at,
    "start_date": Syndication.start_date,
    "participate_amount": Syndication.participate_amount,
    "participate_percent": Syndication.participate_percent,
    "status": Syndication.status,
}


@router.get("", response_model=Page[SyndicationOut])
@requires("syndication:read")
def list_syndications(
    funder: list[str] | None = Query(None),
    lender: list[str] | None = Query(None),
    syndicator: list[str] | None = Query(None),
    funding: list[str] | None = Query(None),
    status_: list[str] | None = Query(None, alias="status"),
    participate_amount_from: str | None = None,
    participate_amount_to: str | None = None,
    params: ListParams = Depends(list_params),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> dict:
    conditions = scope_conditions(
        auth,
        [
            (EntityKind.FUNDER, Syndication.funder_id, funder),
            (EntityKind.LENDER, Syndication.lender_id, lender),
            (EntityKind.SYNDICATOR, Syndication.syndicator_id, syndicator),
        ],
    )
    conditions += [
        build_array_condition(Syndication.funding_id, funding),
        build_array_condition(Syndication.status, status_),
        build_gte_filter(Syndication.participate_amount, participate_amount_from, dollars=True),
        build_lte_filter(Syndication.participate_amount, participate_amount_to, dollars=True),
    ]

    stmt = apply_conditions(select(Syndication), conditions)
    return paginate(db, stmt, params, build_sort(params.sort, SORTABLE, "-created_at"))


@router.get("/{id}", response_model=SyndicationOut)
@requires("syndication:read")
def get_syndication(
    id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)
) -> Syndication:
    syndication = get_or_404(db, Syndication, id, "syndication")
    auth.require(syndication, "syndication")
    return syndication


@router.post("", response_model=SyndicationOut, status_code=status.HTTP_201_CREATED)
@requires("syndication:create")
def create_syndication(
    payload: SyndicationCreate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> Syndication:
    funding = get_or_404(db, Funding, payload.funding_id, "funding")
    auth.require(funding, "funding")
    auth.require({"syndicator_id": payload.syndicator_id}, "syndication")
    get_or_404(db, Syndicator, payload.syndicator_id, "syndicator")

    syndication = Syndication(
        funder_id=funding.funder_id,
        lender_id=funding.lender_id,
        **to_columns(payload.model_dump(), MONEY_FIELDS),
    )
    db.add(syndication)
    ensure_link(db, SyndicatorLender, syndicator_id=payload.syndicator_id, lender_id=funding.lender_id)
    db.commit()
    db.refresh(syndication)
    return syndication


@router.put("/{id}", response_model=SyndicationOut)
@requires("syndication:update")
def update_syndication(
    id: str,
    payload: SyndicationUpdate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> Syndication:
    syndication = get_or_404(db, Syndication, id, "syndication")
    auth.require(syndication, "syndication")
    apply_changes(syndication, payload.model_dump(exclude_unset=True), MONEY_FIELDS)
    db.commit()
    db.refresh(syndication)
    return syndication


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
@requires("syndication:delete")
def delete_syndication(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)) -> None:
    syndication = get_or_404(db, Syndication, id, "syndication")
    auth.require(syndication, "syndication")
    db.delete(syndication)
    db.commit()
