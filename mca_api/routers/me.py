from __future__ import annotations

from fastapi import APIRouter, Depends

from mca_api.schemas.principals import MeOut
from mca_api.security import AuthContext
from mca_api.security.dependencies import get_auth_context

router = APIRouter(tags=["me"])


@router.get("/me", response_model=MeOut)
def me(auth: AuthContext = Depends(get_auth_context)) -> dict:
    """Who am I, and what can I see? Useful when debugging portal access."""
    return {
        "principal": auth.principal.to_dict(),
        "scopes": auth.scopes().describe(),
        "permissions": sorted(auth.permissions),
    }
