"""
Login management for funder and lender users, ISO representatives and merchant
contacts.

A login is not owned directly; it belongs to parties through a membership
table (user-funder, representative-ISO, contact-merchant). A caller sees a
login when at least one of its active memberships points at a party inside
the caller's scope. Creating a login with a party id also creates that
membership.
"""

import logging
from dataclasses import dataclass

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
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
from mca_api.errors import Forbidden
from mca_api.models import (
    ISO,
    Contact,
    ContactMerchant,
    Funder,
    Merchant,
    Representative,
    RepresentativeISO,
    User,
    UserFunder,
)
from mca_api.schemas.common import Page
from mca_api.schemas.principals import (
    ContactCreate,
    ContactOut,
    ContactUpdate,
    RepresentativeCreate,
    RepresentativeOut,
    RepresentativeUpdate,
    UserCreate,
    UserOut,
    UserUpdate,
)
from mca_api.security import AuthContext
from mca_api.security.decorators import requires
from mca_api.security.dependencies import get_auth_context
from mca_api.services.records import apply_changes
from mca_api.services.relationships import ensure_link

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginRoute:
    path: str
    model: type
    resource: str
    label: str
    membership: type
    member_field: str
    kind: EntityKind
    owner_model: type
    out_schema: type[BaseModel]
    create_schema: type[BaseModel]
    update_schema: type[BaseModel]

    @property
    def owner_field(self) -> str:
        return f"{self.kind.value}_id"


LOGIN_ROUTES = [
    LoginRoute(
        "/users",
        User,
        "user",
        "user",
        UserFunder,
        "user_id",
        EntityKind.FUNDER,
        Funder,
        UserOut,
        UserCreate,
        UserUpdate,
    ),
    LoginRoute(
        "/representatives",
        Representative,
        "representative",
        "representative",
        RepresentativeISO,
        "representative_id",
        EntityKind.ISO,
        ISO,
        RepresentativeOut,
        RepresentativeCreate,
        RepresentativeUpdate,
    ),
    LoginRoute(
        "/contacts",
        Contact,
        "contact",
        "contact",
        ContactMerchant,
        "contact_id",
        EntityKind.MERCHANT,
        Merchant,
        ContactOut,
        ContactCreate,
        ContactUpdate,
    ),
]


def build_login_router(route: LoginRoute) -> APIRouter:
    model = route.model
    membership = route.membership
    member_column = getattr(membership, route.member_field)
    owner_column = getattr(membership, route.owner_field)
    out_schema = route.out_schema
    create_schema = route.create_schema
    update_schema = route.update_schema

    router = APIRouter(prefix=route.path, tags=["logins"])
    sortable = {"created_at": model.created_at, "first_name": model.first_name, "last_name": model.last_name}

    def require_member(auth: AuthContext, db: Session, login) -> None:
        if auth.scope(route.kind).unrestricted:
            return
        owners = db.scalars(
            select(owner_column).where(member_column == login.id, membership.inactive.is_(False))
        ).all()
        if not owners:
            logger.warning("Access denied label=%s kind=%s (no membership)", route.label, route.kind.value)
            raise Forbidden(route.label)
        auth.require({f"{route.kind.value}_ids": list(owners)}, route.label)

    def load(auth: AuthContext, db: Session, id: str):
        login = get_or_404(db, model, id, route.label)
        require_member(auth, db, login)
        return login

    @router.get("", response_model=Page[out_schema])
    @requires(f"{route.resource}:read")
    def list_logins(
        owner: list[str] | None = Query(None, alias=route.kind.value),
        include_inactive: bool = False,
        params: ListParams = Depends(list_params),
        auth: AuthContext = Depends(get_auth_context),
        db: Session = Depends(get_db),
    ) -> dict:
        conditions = [build_search_filter([model.first_name, model.last_name, model.email], params.search)]

        owner_conditions = scope_conditions(auth, [(route.kind, owner_column, owner)])
        if owner_conditions:
            members = select(member_column).where(membership.inactive.is_(False), *owner_conditions)
            conditions.append(model.id.in_(members))

        if not include_inactive:
            conditions.append(model.inactive.is_(False))
        stmt = apply_conditions(select(model), conditions)
        return paginate(db, stmt, params, build_sort(params.sort, sortable, "last_name,first_name"))

    @router.get("/{id}", response_model=out_schema)
    @requires(f"{route.resource}:read")
    def get_login(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)):
        return load(auth, db, id)

    @router.post("", response_model=out_schema, status_code=status.HTTP_201_CREATED)
    @requires(f"{route.resource}:create")
    def create_login(
        payload: create_schema,
        auth: AuthContext = Depends(get_auth_context),
        db: Session = Depends(get_db),
    ):
        data = payload.model_dump(mode="json")
        owner_id = data.pop(route.owner_field)

        if owner_id is None:
            # Only a caller unrestricted for the owner kind may create an unattached login.
            if not auth.scope(route.kind).unrestricted:
                raise Forbidden(route.label)
        else:
            auth.require({route.owner_field: owner_id}, route.label)
            get_or_404(db, route.owner_model, owner_id, route.kind.value)

        if db.scalars(select(model).where(model.email == data["email"])).first() is not None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already in use")

        login = model(**data)
        db.add(login)
        db.flush()
        if owner_id is not None:
            ensure_link(db, membership, **{route.member_field: login.id, route.owner_field: owner_id})
        db.commit()
        db.refresh(login)
        return login

    @router.put("/{id}", response_model=out_schema)
    @requires(f"{route.resource}:update")
    def update_login(
        id: str,
        payload: update_schema,
        auth: AuthContext = Depends(get_auth_context),
        db: Session = Depends(get_db),
    ):
        login = load(auth, db, id)
        apply_changes(login, payload.model_dump(mode="json", exclude_unset=True))
        db.commit()
        db.refresh(login)
        return login

    @router.delete("/{id}", response_model=out_schema)
    @requires(f"{route.resource}:delete")
    def delete_login(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)):
        login = load(auth, db, id)
        login.inactive = True
        db.commit()
        db.refresh(login)
        return login

    return router


routers = [build_login_router(route) for route in LOGIN_ROUTES]
