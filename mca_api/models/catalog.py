"""Per-funder lookup types used when booking fees and expenses on fundings."""

from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from mca_api.db.base import Base, TimestampMixin, new_id


class FeeType(TimestampMixin, Base):
    __tablename__ = "fee_types"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    funder_id: Mapped[str] = mapped_column(ForeignKey("funders.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    upfront: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    syndication: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    inactive: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class ExpenseType(TimestampMixin, Base):
    __tablename__ = "expense_types"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    funder_id: Mapped[str] = mapped_column(ForeignKey("funders.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    commission: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    syndication: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    inactive: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
