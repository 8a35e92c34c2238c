"""Fee and expense types. Both are owned by a funder and share one shape of routes."""

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
from mca_api.models import ExpenseType, FeeType, Funder
from mca_api.schemas.catalog import (
    ExpenseTypeCreate,
    ExpenseTypeOut,
    ExpenseTypeUpdate,
    FeeTypeCreate,
    FeeTypeOut,
    FeeTypeUpdate,
)
from mca_api.schemas.common import Page
from mca_api.security import AuthContext
from mca_api.security.decorators import requires
from mca_api.security.dependencies import get_auth_context
from mca_api.services.records import apply_changes


def build_catalog_router(
    *,
    prefix: str,
    resource: str,
    label: str,
    model: type,
    out_schema: type,
    create_schema: type,
    update_schema: type,
) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[resource])
    sortable = {"created_at": model.created_at, "name": model.name}

    @router.get("", response_model=Page[out_schema])
    @requires(f"{resource}:read")
    def list_items(
        funder: list[str] | None = Query(None),
        include_inactive: bool = False,
        params: ListParams = Depends(list_params),
        auth: AuthContext = Depends(get_auth_context),
        db: Session = Depends(get_db),
    ) -> dict:
        conditions = scope_conditions(auth, [(EntityKind.FUNDER, model.funder_id, funder)])
        conditions.append(build_search_filter([model.name], params.search))
        if not include_inactive:
            conditions.append(model.inactive.is_(False))
        stmt = apply_conditions(select(model), conditions)
        return paginate(db, stmt, params, build_sort(params.sort, sortable, "name"))

    @router.get("/{id}", response_model=out_schema)
    @requires(f"{resource}:read")
    def get_item(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)):
        item = get_or_404(db, model, id, label)
        auth.require(item, label)
        return item

    @router.post("", response_model=out_schema, status_code=status.HTTP_201_CREATED)
    @requires(f"{resource}:create")
    def create_item(
        payload: create_schema,
        auth: AuthContext = Depends(get_auth_context),
        db: Session = Depends(get_db),
    ):
        data = payload.model_dump()
        auth.require(data, label)
        get_or_404(db, Funder, data["funder_id"], "funder")
        item = model(**data)
        db.add(item)
        db.commit()
        db.refresh(item)
        return item

    @router.put("/{id}", response_model=out_schema)
    @requires(f"{resource}:update")
    def update_item(
        id: str,
        payload: update_schema,
        auth: AuthContext = Depends(get_auth_context),
        db: Session = Depends(get_db),
    ):
        item = get_or_404(db, model, id, label)
        auth.require(item, label)
        apply_changes(item, payload.model_dump(exclude_unset=True))
        db.commit()
        db.refresh(item)
        return item

    @router.delete("/{id}", response_model=out_schema)
    @requires(f"{resource}:delete")
    def delete_item(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)):
        item = get_or_404(db, model, id, label)
        auth.require(item, label)
        item.inactive = True
        db.commit()
        db.refresh(item)
        return item

    return router


fee_types_router = build_catalog_router(
    prefix="/fee-types",
    resource="fee_type",
    label="fee type",
    model=FeeType,
    out_schema=FeeTypeOut,
    create_schema=FeeTypeCreate,
    update_schema=FeeTypeUpdate,
)

expense_types_router = build_catalog_router(
    prefix="/expense-types",
    resource="expense_type",
    label="expense type",
    model=ExpenseType,
    out_schema=ExpenseTypeOut,
    create_schema=ExpenseTypeCreate,
    update_schema=ExpenseTypeUpdate,
)
