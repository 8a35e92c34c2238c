"""
Routes for the link tables that derived scopes are computed from.

Each link gets `/<left>-<right>s` with list, get, create and delete. A link is
visible and writable only when both of its party ends are inside the caller's
scope. Login ends (user, representative, contact) are not scoped themselves;
the party end decides. Creating an existing link reactivates it and deleting
only marks it inactive, so history is kept.
"""

from dataclasses import dataclass

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from mca_api.constants import EntityKind
from mca_api.db.query import (
    ListParams,
    apply_conditions,
    build_array_condition,
    build_sort,
    get_or_404,
    list_params,
    paginate,
    scope_conditions,
)
from mca_api.db.session import get_db
from mca_api.models import (
    ISO,
    Contact,
    ContactMerchant,
    Funder,
    ISOFunder,
    ISOMerchant,
    Lender,
    Merchant,
    MerchantFunder,
    Representative,
    RepresentativeISO,
    Syndicator,
    SyndicatorFunder,
    SyndicatorLender,
    User,
    UserFunder,
    UserLender,
)
from mca_api.schemas.common import Page
from mca_api.schemas.links import (
    ContactMerchantCreate,
    ISOFunderCreate,
    ISOMerchantCreate,
    LinkOut,
    MerchantFunderCreate,
    RepresentativeISOCreate,
    SyndicatorFunderCreate,
    SyndicatorLenderCreate,
    UserFunderCreate,
    UserLenderCreate,
)
from mca_api.security import AuthContext
from mca_api.security.decorators import requires
from mca_api.security.dependencies import get_auth_context
from mca_api.services.relationships import ensure_link


@dataclass(frozen=True)
class LinkEnd:
    name: str
    model: type
    kind: EntityKind | None = None

    @property
    def field(self) -> str:
        return f"{self.name}_id"


@dataclass(frozen=True)
class LinkRoute:
    path: str
    model: type
    resource: str
    label: str
    ends: tuple[LinkEnd, LinkEnd]
    create_schema: type[BaseModel]


def _party(kind: EntityKind, model: type) -> LinkEnd:
    return LinkEnd(kind.value, model, kind)


LINK_ROUTES = [
    LinkRoute(
        "/iso-funders",
        ISOFunder,
        "iso_funder",
        "iso funder link",
        (_party(EntityKind.ISO, ISO), _party(EntityKind.FUNDER, Funder)),
        ISOFunderCreate,
    ),
    LinkRoute(
        "/iso-merchants",
        ISOMerchant,
        "iso_merchant",
        "iso merchant link",
        (_party(EntityKind.ISO, ISO), _party(EntityKind.MERCHANT, Merchant)),
        ISOMerchantCreate,
    ),
    LinkRoute(
        "/merchant-funders",
        MerchantFunder,
        "merchant_funder",
        "merchant funder link",
        (_party(EntityKind.MERCHANT, Merchant), _party(EntityKind.FUNDER, Funder)),
        MerchantFunderCreate,
    ),
    LinkRoute(
        "/syndicator-funders",
        SyndicatorFunder,
        "syndicator_funder",
        "syndicator funder link",
        (_party(EntityKind.SYNDICATOR, Syndicator), _party(EntityKind.FUNDER, Funder)),
        SyndicatorFunderCreate,
    ),
    LinkRoute(
        "/syndicator-lenders",
        SyndicatorLender,
        "syndicator_lender",
        "syndicator lender link",
        (_party(EntityKind.SYNDICATOR, Syndicator), _party(EntityKind.LENDER, Lender)),
        SyndicatorLenderCreate,
    ),
    LinkRoute(
        "/user-funders",
        UserFunder,
        "user_funder",
        "user funder link",
        (LinkEnd("user", User), _party(EntityKind.FUNDER, Funder)),
        UserFunderCreate,
    ),
    LinkRoute(
        "/user-lenders",
        UserLender,
        "user_lender",
        "user lender link",
        (LinkEnd("user", User), _party(EntityKind.LENDER, Lender)),
        UserLenderCreate,
    ),
    LinkRoute(
        "/representative-isos",
        RepresentativeISO,
        "representative_iso",
        "representative iso link",
        (LinkEnd("representative", Representative), _party(EntityKind.ISO, ISO)),
        RepresentativeISOCreate,
    ),
    LinkRoute(
        "/contact-merchants",
        ContactMerchant,
        "merchant_contact",
        "merchant contact link",
        (LinkEnd("contact", Contact), _party(EntityKind.MERCHANT, Merchant)),
        ContactMerchantCreate,
    ),
]


def build_link_router(route: LinkRoute) -> APIRouter:
    model = route.model
    first, second = route.ends
    create_schema = route.create_schema

    router = APIRouter(prefix=route.path, tags=["links"])
    sortable = {"created_at": model.created_at, "updated_at": model.updated_at}

    def _filters(requested: dict[LinkEnd, list[str] | None], auth: AuthContext) -> list:
        scoped = [(end.kind, getattr(model, end.field), requested[end]) for end in route.ends if end.kind]
        conditions = scope_conditions(auth, scoped)
        conditions += [
            build_array_condition(getattr(model, end.field), requested[end]) for end in route.ends if not end.kind
        ]
        return conditions

    @router.get("", response_model=Page[LinkOut])
    @requires(f"{route.resource}:read")
    def list_links(
        first_ids: list[str] | None = Query(None, alias=first.name),
        second_ids: list[str] | None = Query(None, alias=second.name),
        include_inactive: bool = False,
        params: ListParams = Depends(list_params),
        auth: AuthContext = Depends(get_auth_context),
        db: Session = Depends(get_db),
    ) -> dict:
        conditions = _filters({first: first_ids, second: second_ids}, auth)
        if not include_inactive:
            conditions.append(model.inactive.is_(False))
        stmt = apply_conditions(select(model), conditions)
        return paginate(db, stmt, params, build_sort(params.sort, sortable, "-created_at"))

    @router.get("/{id}", response_model=LinkOut)
    @requires(f"{route.resource}:read")
    def get_link(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)):
        link = get_or_404(db, model, id, route.label)
        auth.require(link, route.label)
        return link

    @router.post("", response_model=LinkOut, status_code=status.HTTP_201_CREATED)
    @requires(f"{route.resource}:create")
    def create_link(
        payload: create_schema,
        auth: AuthContext = Depends(get_auth_context),
        db: Session = Depends(get_db),
    ):
        data = payload.model_dump()
        auth.require(data, route.label)
        for end in route.ends:
            get_or_404(db, end.model, data[end.field], end.name)

        link = ensure_link(db, model, **data)
        db.commit()
        db.refresh(link)
        return link

    @router.delete("/{id}", response_model=LinkOut)
    @requires(f"{route.resource}:delete")
    def delete_link(id: str, auth: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)):
        link = get_or_404(db, model, id, route.label)
        auth.require(link, route.label)
        link.inactive = True
        db.commit()
        db.refresh(link)
        return link

    return router


routers = [build_link_router(route) for route in LINK_ROUTES]
