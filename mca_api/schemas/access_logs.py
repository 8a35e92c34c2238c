from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from mca_api.constants import PortalOperation, PortalType


class AccessLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    portal: PortalType
    principal_id: str
    operation: PortalOperation
    ip_address: str | None
    created_at: datetime
