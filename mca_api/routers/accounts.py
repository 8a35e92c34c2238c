"""
Account routes for every party kind.

Each kind gets `/<kind>-accounts` with the same handlers; the owner column
(`funder_id`, `lender_id`, ...) is both the scope column for lists and the
reference the access gate checks.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from mca_api.constants import EntityKind
from mca_api.db.query import (
    ListParams,
    apply_conditions,
    build_array_condition,
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
    Funder,
    FunderAccount,
    ISOAccount,
    Lender,
    LenderAccount,
    Merchant,
    MerchantAccount,
    Syndicator,
    SyndicatorAccount,
)
from mca_api.schemas.accounts import AccountCreate, AccountOut, AccountUpdate
from mca_api.schemas.common import Page
from mca_api.security import AuthContext
from mca_api.security.decorators import requires
from mca_api.security.dependencies import get_auth_context
from mca_api.services.records import apply_changes, to_columns

MONEY_FIELDS = ("available_balance",)

ACCOUNT_MODELS: dict[EntityKind, tuple[type, type]] = {
    EntityKind.FUNDER: (FunderAccount, Funder),
    EntityKind.LENDER: (LenderAccount, Lender),
    EntityKind.ISO: (ISOAccount, ISO),
    EntityKind.MERCHANT: (MerchantAccount, Merchant),
    EntityKind.SYNDICATOR: (SyndicatorAccount, Syndicator),
}


def build_account_router(kind: EntityKind) -> APIRouter:
    model, owner_model = ACCOUNT_MODELS[kind]
    owner_field = f"{kind.value}_id"
    owner_column = getattr(model, owner_field)
    resource = f"{kind.value}_account"
    label = f"{kind.value} account"

    router = APIRouter(prefix=f"/{kind.value}-accounts", tags=["accounts"])
    sortable = {"created_at": model.created_at, "name": model.name, "available_balance": model.available_balance}

    @router.get("", response_model=Page[AccountOut])
    @requires(f"{resource}:read")
    def list_accounts(
        owner: list[str] | None = Query(None, alias=kind.value),
        type_: list[str] | None = Query(None, alias="type"),
        include_inactive: bool = False,
        params: ListParams = Depends(list_params),
        auth: AuthContext = Depends(get_auth_context),
        db: Session = Depends(get_db),
    ) -> dict:
        conditions = scope_conditions(auth, [(kind, owner_column, owner)])
        conditions += [
            build_search_filter([model.name, model.bank], params.search),
            build_array_condition(model.type, type_),
        ]
        if not include_inactive:
            conditions.append(model.inactive.is_(False))
        stmt = apply_conditions(select(model), conditions)
        return paginate(db, stmt, params, build_sort(params.sort, sortable, "name"))

    @router.get("/{id}", response_model=AccountOut)
    @requires(f"{resource}:read")
    def get_account(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)):
        account = get_or_404(db, model, id, label)
        auth.require(account, label)
        return account

    @router.post("", response_model=AccountOut, status_code=status.HTTP_201_CREATED)
    @requires(f"{resource}:create")
    def create_account(
        payload: AccountCreate,
        auth: AuthContext = Depends(get_auth_context),
        db: Session = Depends(get_db),
    ):
        auth.require({owner_field: payload.owner_id}, label)
        get_or_404(db, owner_model, payload.owner_id, kind.value)

        data = to_columns(payload.model_dump(exclude={"owner_id"}), MONEY_FIELDS)
        account = model(**{owner_field: payload.owner_id}, **data)
        db.add(account)
        db.commit()
        db.refresh(account)
        return account

    @router.put("/{id}", response_model=AccountOut)
    @requires(f"{resource}:update")
    def update_account(
        id: str,
        payload: AccountUpdate,
        auth: AuthContext = Depends(get_auth_context),
        db: Session = Depends(get_db),
    ):
        account = get_or_404(db, model, id, label)
        auth.require(account, label)
        apply_changes(account, payload.model_dump(exclude_unset=True), MONEY_FIELDS)
        db.commit()
        db.refresh(account)
        return account

    @router.delete("/{id}", response_model=AccountOut)
    @requires(f"{resource}:delete")
    def delete_account(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)):
        account = get_or_404(db, model, id, label)
        auth.require(account, label)
        account.inactive = True
        db.commit()
        db.refresh(account)
        return account

    return router


routers = [build_account_router(kind) for kind in EntityKind]
