from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from mca_api.constants import PortalOperation, PortalType
from mca_api.db.base import Base, new_id, utcnow


class AccessLog(Base):
    __tablename__ = "access_logs"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    portal: Mapped[PortalType] = mapped_column(Enum(PortalType, native_enum=False, length=32), nullable=False)
    principal_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    operation: Mapped[PortalOperation] = mapped_column(
        Enum(PortalOperation, native_enum=False, length=32), nullable=False
    )
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
