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
from mca_api.models import ISO, ISOFunder
from mca_api.schemas.common import Page
from mca_api.schemas.parties import ISOCreate, ISOOut, ISOUpdate
from mca_api.security import AuthContext
from mca_api.security.decorators import requires
from mca_api.security.dependencies import get_auth_context
from mca_api.services.records import apply_changes
from mca_api.services.relationships import ensure_link

router = APIRouter(prefix="/isos", tags=["isos"])

SORTABLE = {"created_at": ISO.created_at, "name": ISO.name, "email": ISO.email}


def _owners(iso: ISO) -> dict[str, str]:
    return {"iso_id": iso.id}


@router.get("", response_model=Page[ISOOut])
@requires("iso:read")
def list_isos(
    id: list[str] | None = Query(None),
    include_inactive: bool = False,
    params: ListParams = Depends(list_params),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> dict:
    conditions = scope_conditions(auth, [(EntityKind.ISO, ISO.id, id)])
    conditions.append(build_search_filter([ISO.name, ISO.email, ISO.phone], params.search))
    if not include_inactive:
        conditions.append(ISO.inactive.is_(False))

    stmt = apply_conditions(select(ISO), conditions)
    return paginate(db, stmt, params, build_sort(params.sort, SORTABLE, "name"))


@router.get("/{id}", response_model=ISOOut)
@requires("iso:read")
def get_iso(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)) -> ISO:
    iso = get_or_404(db, ISO, id, "iso")
    auth.require(_owners(iso), "iso")
    return iso


@router.post("", response_model=ISOOut, status_code=status.HTTP_201_CREATED)
@requires("iso:create")
def create_iso(
    payload: ISOCreate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> ISO:
    if payload.funder_id is None and not auth.scope(EntityKind.ISO).unrestricted:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="funder_id is required")
    if payload.funder_id:
        auth.require({"funder_id": payload.funder_id}, "funder")

    iso = ISO(**payload.model_dump(exclude={"funder_id"}))
    db.add(iso)
    db.flush()
    if payload.funder_id:
        ensure_link(db, ISOFunder, iso_id=iso.id, funder_id=payload.funder_id)
    db.commit()
    db.refresh(iso)
    return iso


@router.put("/{id}", response_model=ISOOut)
@requires("iso:update")
def update_iso(
    id: str,
    payload: ISOUpdate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> ISO:
    iso = get_or_404(db, ISO, id, "iso")
    auth.require(_owners(iso), "iso")
    apply_changes(iso, payload.model_dump(exclude_unset=True))
    db.commit()
    db.refresh(iso)
    return iso


@router.delete("/{id}", response_model=ISOOut)
@requires("iso:delete")
def delete_iso(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)) -> ISO:
    iso = get_or_404(db, ISO, id, "iso")
    auth.require(_owners(iso), "iso")
    iso.inactive = True
    db.commit()
    db.refresh(iso)
    return iso
