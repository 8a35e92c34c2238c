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
from mca_api.models import Syndicator, SyndicatorFunder
from mca_api.schemas.common import Page
from mca_api.schemas.parties import SyndicatorCreate, SyndicatorOut, SyndicatorUpdate
from mca_api.security import AuthContext
from mca_api.security.decorators import requires
from mca_api.security.dependencies import get_auth_context
from mca_api.services.records import apply_changes
from mca_api.services.relationships import ensure_link

router = APIRouter(prefix="/syndicators", tags=["syndicators"])

SORTABLE = {"created_at": Syndicator.created_at, "name": Syndicator.name, "email": Syndicator.email}


def _owners(syndicator: Syndicator) -> dict[str, str]:
    return {"syndicator_id": syndicator.id}


@router.get("", response_model=Page[SyndicatorOut])
@requires("syndicator:read")
def list_syndicators(
    id: list[str] | None = Query(None),
    include_inactive: bool = False,
    params: ListParams = Depends(list_params),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> dict:
    conditions = scope_conditions(auth, [(EntityKind.SYNDICATOR, Syndicator.id, id)])
    conditions.append(
        build_search_filter(
            [Syndicator.name, Syndicator.first_name, Syndicator.last_name, Syndicator.email], params.search
        )
    )
    if not include_inactive:
        conditions.append(Syndicator.inactive.is_(False))

    stmt = apply_conditions(select(Syndicator), conditions)
    return paginate(db, stmt, params, build_sort(params.sort, SORTABLE, "name"))


@router.get("/{id}", response_model=SyndicatorOut)
@requires("syndicator:read")
def get_syndicator(
    id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)
) -> Syndicator:
    syndicator = get_or_404(db, Syndicator, id, "syndicator")
    auth.require(_owners(syndicator), "syndicator")
    return syndicator


@router.post("", response_model=SyndicatorOut, status_code=status.HTTP_201_CREATED)
@requires("syndicator:create")
def create_syndicator(
    payload: SyndicatorCreate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> Syndicator:
    if payload.funder_id is None and not auth.scope(EntityKind.SYNDICATOR).unrestricted:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="funder_id is required")
    if payload.funder_id:
        auth.require({"funder_id": payload.funder_id}, "funder")

    syndicator = Syndicator(**payload.model_dump(exclude={"funder_id"}))
    db.add(syndicator)
    db.flush()
    if payload.funder_id:
        ensure_link(db, SyndicatorFunder, syndicator_id=syndicator.id, funder_id=payload.funder_id)
    db.commit()
    db.refresh(syndicator)
    return syndicator


@router.put("/{id}", response_model=SyndicatorOut)
@requires("syndicator:update")
def update_syndicator(
    id: str,
    payload: SyndicatorUpdate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> Syndicator:
    syndicator = get_or_404(db, Syndicator, id, "syndicator")
    auth.require(_owners(syndicator), "syndicator")
    apply_changes(syndicator, payload.model_dump(exclude_unset=True))
    db.commit()
    db.refresh(syndicator)
    return syndicator


@router.delete("/{id}", response_model=SyndicatorOut)
@requires("syndicator:delete")
def delete_syndicator(
    id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)
) -> Syndicator:
    syndicator = get_or_404(db, Syndicator, id, "syndicator")
    auth.require(_owners(syndicator), "syndicator")
    syndicator.inactive = True
    db.commit()
    db.refresh(syndicator)
    return syndicator
