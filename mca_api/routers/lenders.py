from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from mca_api.constants import EntityKind
from mca_api.db.query import (
    ListParams,
    apply_conditions,
    build_boolean_filter,
    build_search_filter,
    build_sort,
    get_or_404,
    list_params,
    paginate,
    scope_conditions,
)
from mca_api.db.session import get_db
from mca_api.models import Funder, Lender
from mca_api.schemas.common import Page
from mca_api.schemas.parties import LenderCreate, LenderOut, LenderUpdate
from mca_api.security import AuthContext
from mca_api.security.decorators import requires
from mca_api.security.dependencies import get_auth_context
from mca_api.services.records import apply_changes

router = APIRouter(prefix="/lenders", tags=["lenders"])

SORTABLE = {"created_at": Lender.created_at, "name": Lender.name, "email": Lender.email}


def _owners(lender: Lender) -> dict[str, str]:
    return {"lender_id": lender.id, "funder_id": lender.funder_id}


@router.get("", response_model=Page[LenderOut])
@requires("lender:read")
def list_lenders(
    id: list[str] | None = Query(None),
    funder: list[str] | None = Query(None),
    internal: bool | None = None,
    include_inactive: bool = False,
    params: ListParams = Depends(list_params),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> dict:
    conditions = scope_conditions(
        auth,
        [
            (EntityKind.LENDER, Lender.id, id),
            (EntityKind.FUNDER, Lender.funder_id, funder),
        ],
    )
    conditions += [
        build_search_filter([Lender.name, Lender.email, Lender.phone], params.search),
        build_boolean_filter(Lender.internal, internal),
    ]
    if not include_inactive:
        conditions.append(Lender.inactive.is_(False))

    stmt = apply_conditions(select(Lender), conditions)
    return paginate(db, stmt, params, build_sort(params.sort, SORTABLE, "name"))


@router.get("/{id}", response_model=LenderOut)
@requires("lender:read")
def get_lender(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)) -> Lender:
    lender = get_or_404(db, Lender, id, "lender")
    auth.require(_owners(lender), "lender")
    return lender


@router.post("", response_model=LenderOut, status_code=status.HTTP_201_CREATED)
@requires("lender:create")
def create_lender(
    payload: LenderCreate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> Lender:
    auth.require({"funder_id": payload.funder_id}, "lender")
    get_or_404(db, Funder, payload.funder_id, "funder")

    lender = Lender(**payload.model_dump())
    db.add(lender)
    db.commit()
    db.refresh(lender)
    return lender


@router.put("/{id}", response_model=LenderOut)
@requires("lender:update")
def update_lender(
    id: str,
    payload: LenderUpdate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> Lender:
    lender = get_or_404(db, Lender, id, "lender")
    auth.require(_owners(lender), "lender")
    apply_changes(lender, payload.model_dump(exclude_unset=True))
    db.commit()
    db.refresh(lender)
    return lender


@router.delete("/{id}", response_model=LenderOut)
@requires("lender:delete")
def delete_lender(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)) -> Lender:
    lender = get_or_404(db, Lender, id, "lender")
    auth.require(_owners(lender), "lender")
    lender.inactive = True
    db.commit()
    db.refresh(lender)
    return lender
