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
    build_search_filter,
    build_sort,
    get_or_404,
    list_params,
    paginate,
    scope_conditions,
)
from mca_api.db.session import get_db
from mca_api.models import ISO, Application, Funder, ISOFunder, ISOMerchant, Merchant, MerchantFunder
from mca_api.schemas.common import Page
from mca_api.schemas.fundings import ApplicationCreate, ApplicationOut, ApplicationUpdate
from mca_api.security import AuthContext
from mca_api.security.decorators import requires
from mca_api.security.dependencies import get_auth_context
from mca_api.services.records import apply_changes, to_columns
from mca_api.services.relationships import ensure_link

router = APIRouter(prefix="/applications", tags=["applications"])

MONEY_FIELDS = ("request_amount",)

SORTABLE = {
    "created_at": Application.created_at,
    "updated_at": Application.updated_at,
    "name": Application.name,
    "request_amount": Application.request_amount,
    "status": Application.status,
}


@router.get("", response_model=Page[ApplicationOut])
@requires("application:read")
def list_applications(
    funder: list[str] | None = Query(None),
    merchant: list[str] | None = Query(None),
    iso: list[str] | None = Query(None),
    type_: list[str] | None = Query(None, alias="type"),
    status_: list[str] | None = Query(None, alias="status"),
    internal: bool | None = None,
    closed: bool | None = None,
    include_inactive: bool = False,
    params: ListParams = Depends(list_params),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> dict:
    conditions = scope_conditions(
        auth,
        [
            (EntityKind.FUNDER, Application.funder_id, funder),
            (EntityKind.MERCHANT, Application.merchant_id, merchant),
            (EntityKind.ISO, Application.iso_id, iso),
        ],
    )
    conditions += [
        build_search_filter([Application.name, Application.status], params.search),
        build_array_condition(Application.type, type_),
        build_array_condition(Application.status, status_),
        build_boolean_filter(Application.internal, internal),
        build_boolean_filter(Application.closed, closed),
    ]
    if not include_inactive:
        conditions.append(Application.inactive.is_(False))

    stmt = apply_conditions(select(Application), conditions)
    return paginate(db, stmt, params, build_sort(params.sort, SORTABLE, "-created_at"))


@router.get("/{id}", response_model=ApplicationOut)
@requires("application:read")
def get_application(
    id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)
) -> Application:
    application = get_or_404(db, Application, id, "application")
    auth.require(application, "application")
    return application


@router.post("", response_model=ApplicationOut, status_code=status.HTTP_201_CREATED)
@requires("application:create")
def create_application(
    payload: ApplicationCreate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> Application:
    data = payload.model_dump()
    auth.require(data, "application")

    get_or_404(db, Funder, payload.funder_id, "funder")
    get_or_404(db, Merchant, payload.merchant_id, "merchant")
    if payload.iso_id:
        get_or_404(db, ISO, payload.iso_id, "iso")

    application = Application(**to_columns(data, MONEY_FIELDS))
    db.add(application)

    ensure_link(db, MerchantFunder, merchant_id=payload.merchant_id, funder_id=payload.funder_id)
    if payload.iso_id:
        ensure_link(db, ISOFunder, iso_id=payload.iso_id, funder_id=payload.funder_id)
        ensure_link(db, ISOMerchant, iso_id=payload.iso_id, merchant_id=payload.merchant_id)

    db.commit()
    db.refresh(application)
    return application


@router.put("/{id}", response_model=ApplicationOut)
@requires("application:update")
def update_application(
    id: str,
    payload: ApplicationUpdate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> Application:
    application = get_or_404(db, Application, id, "application")
    auth.require(application, "application")
    apply_changes(application, payload.model_dump(exclude_unset=True), MONEY_FIELDS)
    db.commit()
    db.refresh(application)
    return application


@router.delete("/{id}", response_model=ApplicationOut)
@requires("application:delete")
def delete_application(
    id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)
) -> Application:
    application = get_or_404(db, Application, id, "application")
    auth.require(application, "application")
    application.inactive = True
    db.commit()
    db.refresh(application)
    return application
