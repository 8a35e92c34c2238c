from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from mca_api.db.query import ListParams, apply_conditions, build_array_condition, build_sort, list_params, paginate
from mca_api.db.session import get_db
from mca_api.models import AccessLog
from mca_api.schemas.access_logs import AccessLogOut
from mca_api.schemas.common import Page
from mca_api.security import AuthContext
from mca_api.security.dependencies import get_auth_context

router = APIRouter(prefix="/access-logs", tags=["access_logs"])

SORTABLE = {"created_at": AccessLog.created_at, "operation": AccessLog.operation}


@router.get("", response_model=Page[AccessLogOut])
def list_access_logs(
    portal: list[str] | None = Query(None),
    principal: list[str] | None = Query(None),
    operation: list[str] | None = Query(None),
    params: ListParams = Depends(list_params),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> dict:
    conditions = [build_array_condition(AccessLog.operation, operation)]
    if auth.has_permission("access_log:read"):
        conditions += [
            build_array_condition(AccessLog.portal, [p.upper() for p in portal] if portal else None),
            build_array_condition(AccessLog.principal_id, principal),
        ]
    else:
        # Without access_log:read a principal only sees their own sign-in history.
        conditions += [
            AccessLog.portal == auth.principal.portal,
            AccessLog.principal_id == auth.principal.id,
        ]

    stmt = apply_conditions(select(AccessLog), conditions)
    return paginate(db, stmt, params, build_sort(params.sort, SORTABLE, "-created_at"))
