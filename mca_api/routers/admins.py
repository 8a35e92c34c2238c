from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from mca_api.db.query import (
    ListParams,
    apply_conditions,
    build_boolean_filter,
    build_search_filter,
    build_sort,
    get_or_404,
    list_params,
    paginate,
)
from mca_api.db.session import get_db
from mca_api.models import Admin, Bookkeeper
from mca_api.schemas.common import Page
from mca_api.schemas.principals import (
    AdminCreate,
    AdminOut,
    AdminUpdate,
    BookkeeperCreate,
    BookkeeperOut,
    BookkeeperUpdate,
)
from mca_api.security.decorators import requires
from mca_api.services.records import apply_changes

# Admin and bookkeeper logins are not owned by any party, so these routes are
# guarded by permissions only.
router = APIRouter(tags=["admins"])

ADMIN_SORTABLE = {"created_at": Admin.created_at, "first_name": Admin.first_name, "last_name": Admin.last_name}
BOOKKEEPER_SORTABLE = {
    "created_at": Bookkeeper.created_at,
    "first_name": Bookkeeper.first_name,
    "last_name": Bookkeeper.last_name,
}


@router.get("/admins", response_model=Page[AdminOut])
@requires("admin:read")
def list_admins(
    super_admin: bool | None = None,
    include_inactive: bool = False,
    params: ListParams = Depends(list_params),
    db: Session = Depends(get_db),
) -> dict:
    conditions = [
        build_search_filter([Admin.first_name, Admin.last_name, Admin.email], params.search),
        build_boolean_filter(Admin.super_admin, super_admin),
    ]
    if not include_inactive:
        conditions.append(Admin.inactive.is_(False))
    stmt = apply_conditions(select(Admin), conditions)
    return paginate(db, stmt, params, build_sort(params.sort, ADMIN_SORTABLE, "last_name,first_name"))


@router.get("/admins/{id}", response_model=AdminOut)
@requires("admin:read")
def get_admin(id: str, db: Session = Depends(get_db)) -> Admin:
    return get_or_404(db, Admin, id, "admin")


@router.post("/admins", response_model=AdminOut, status_code=status.HTTP_201_CREATED)
@requires("admin:create")
def create_admin(payload: AdminCreate, db: Session = Depends(get_db)) -> Admin:
    admin = Admin(**payload.model_dump())
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


@router.put("/admins/{id}", response_model=AdminOut)
@requires("admin:update")
def update_admin(id: str, payload: AdminUpdate, db: Session = Depends(get_db)) -> Admin:
    admin = get_or_404(db, Admin, id, "admin")
    apply_changes(admin, payload.model_dump(exclude_unset=True))
    db.commit()
    db.refresh(admin)
    return admin


@router.delete("/admins/{id}", response_model=AdminOut)
@requires("admin:delete")
def delete_admin(id: str, db: Session = Depends(get_db)) -> Admin:
    admin = get_or_404(db, Admin, id, "admin")
    admin.inactive = True
    db.commit()
    db.refresh(admin)
    return admin


@router.get("/bookkeepers", response_model=Page[BookkeeperOut])
@requires("bookkeeper:read")
def list_bookkeepers(
    include_inactive: bool = False,
    params: ListParams = Depends(list_params),
    db: Session = Depends(get_db),
) -> dict:
    conditions = [build_search_filter([Bookkeeper.first_name, Bookkeeper.last_name, Bookkeeper.email], params.search)]
    if not include_inactive:
        conditions.append(Bookkeeper.inactive.is_(False))
    stmt = apply_conditions(select(Bookkeeper), conditions)
    return paginate(db, stmt, params, build_sort(params.sort, BOOKKEEPER_SORTABLE, "last_name,first_name"))


@router.get("/bookkeepers/{id}", response_model=BookkeeperOut)
@requires("bookkeeper:read")
def get_bookkeeper(id: str, db: Session = Depends(get_db)) -> Bookkeeper:
    return get_or_404(db, Bookkeeper, id, "bookkeeper")


@router.post("/bookkeepers", response_model=BookkeeperOut, status_code=status.HTTP_201_CREATED)
@requires("bookkeeper:create")
def create_bookkeeper(payload: BookkeeperCreate, db: Session = Depends(get_db)) -> Bookkeeper:
    bookkeeper = Bookkeeper(**payload.model_dump())
    db.add(bookkeeper)
    db.commit()
    db.refresh(bookkeeper)
    return bookkeeper


@router.put("/bookkeepers/{id}", response_model=BookkeeperOut)
@requires("bookkeeper:update")
def update_bookkeeper(id: str, payload: BookkeeperUpdate, db: Session = Depends(get_db)) -> Bookkeeper:
    bookkeeper = get_or_404(db, Bookkeeper, id, "bookkeeper")
    apply_changes(bookkeeper, payload.model_dump(exclude_unset=True))
    db.commit()
    db.refresh(bookkeeper)
    return bookkeeper


@router.delete("/bookkeepers/{id}", response_model=BookkeeperOut)
@requires("bookkeeper:delete")
def delete_bookkeeper(id: str, db: Session = Depends(get_db)) -> Bookkeeper:
    bookkeeper = get_or_404(db, Bookkeeper, id, "bookkeeper")
    bookkeeper.inactive = True
    db.commit()
    db.refresh(bookkeeper)
    return bookkeeper
