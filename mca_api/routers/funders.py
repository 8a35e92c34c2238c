from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
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
from mca_api.models import Funder
from mca_api.schemas.common import Page
from mca_api.schemas.parties import FunderCreate, FunderOut, FunderUpdate
from mca_api.security import AuthContext
from mca_api.security.decorators import requires
from mca_api.security.dependencies import get_auth_context
from mca_api.services.records import apply_changes

router = APIRouter(prefix="/funders", tags=["funders"])

SORTABLE = {"created_at": Funder.created_at, "name": Funder.name, "email": Funder.email}


def _owners(funder: Funder) -> dict[str, str]:
    return {"funder_id": funder.id}


@router.get("", response_model=Page[FunderOut])
@requires("funder:read")
def list_funders(
    id: list[str] | None = Query(None),
    include_inactive: bool = False,
    params: ListParams = Depends(list_params),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> dict:
    conditions = scope_conditions(auth, [(EntityKind.FUNDER, Funder.id, id)])
    conditions.append(build_search_filter([Funder.name, Funder.email, Funder.phone], params.search))
    if not include_inactive:
        conditions.append(Funder.inactive.is_(False))

    stmt = apply_conditions(select(Funder), conditions)
    return paginate(db, stmt, params, build_sort(params.sort, SORTABLE, "name"))


@router.get("/{id}", response_model=FunderOut)
@requires("funder:read")
def get_funder(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)) -> Funder:
    funder = get_or_404(db, Funder, id, "funder")
    auth.require(_owners(funder), "funder")
    return funder


@router.post("", response_model=FunderOut, status_code=status.HTTP_201_CREATED)
@requires("funder:create")
def create_funder(payload: FunderCreate, db: Session = Depends(get_db)) -> Funder:
    funder = Funder(**payload.model_dump())
    db.add(funder)
    db.commit()
    db.refresh(funder)
    return funder


@router.put("/{id}", response_model=FunderOut)
@requires("funder:update")
def update_funder(
    id: str,
    payload: FunderUpdate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> Funder:
    funder = get_or_404(db, Funder, id, "funder")
    auth.require(_owners(funder), "funder")
    apply_changes(funder, payload.model_dump(exclude_unset=True))
    db.commit()
    db.refresh(funder)
    return funder


@router.delete("/{id}", response_model=FunderOut)
@requires("funder:delete")
def delete_funder(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)) -> Funder:
    funder = get_or_404(db, Funder, id, "funder")
    auth.require(_owners(funder), "funder")
    funder.inactive = True
    db.commit()
    db.refresh(funder)
    return funder
