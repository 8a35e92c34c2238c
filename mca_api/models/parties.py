from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mca_api.db.base import Base, TimestampMixin, new_id


class Funder(TimestampMixin, Base):
    __tablename__ = "funders"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(200), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    website: Mapped[str | None] = mapped_column(String(200), nullable=True)
    inactive: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    lenders: Mapped[list["Lender"]] = relationship(back_populates="funder")


class Lender(TimestampMixin, Base):
    __tablename__ = "lenders"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    funder_id: Mapped[str] = mapped_column(ForeignKey("funders.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(200), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    internal: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    inactive: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    funder: Mapped[Funder] = relationship(back_populates="lenders")


class ISO(TimestampMixin, Base):
    __tablename__ = "isos"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(200), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    inactive: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class Merchant(TimestampMixin, Base):
    __tablename__ = "merchants"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    dba_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    email: Mapped[str | None] = mapped_column(String(200), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    ein: Mapped[str | None] = mapped_column(String(20), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    inactive: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class Syndicator(TimestampMixin, Base):
    __tablename__ = "syndicators"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    email: Mapped[str | None] = mapped_column(String(200), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    inactive: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


# ---- Relationship (link) records ------------------------------------------------------
# An inactive link is kept for history but grants no access.


class ISOFunder(TimestampMixin, Base):
    __tablename__ = "iso_funders"
    __table_args__ = (UniqueConstraint("iso_id", "funder_id", name="uq_iso_funder"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    iso_id: Mapped[str] = mapped_column(ForeignKey("isos.id"), nullable=False, index=True)
    funder_id: Mapped[str] = mapped_column(ForeignKey("funders.id"), nullable=False, index=True)
    inactive: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class ISOMerchant(TimestampMixin, Base):
    __tablename__ = "iso_merchants"
    __table_args__ = (UniqueConstraint("iso_id", "merchant_id", name="uq_iso_merchant"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    iso_id: Mapped[str] = mapped_column(ForeignKey("isos.id"), nullable=False, index=True)
    merchant_id: Mapped[str] = mapped_column(ForeignKey("merchants.id"), nullable=False, index=True)
    inactive: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class MerchantFunder(TimestampMixin, Base):
    __tablename__ = "merchant_funders"
    __table_args__ = (UniqueConstraint("merchant_id", "funder_id", name="uq_merchant_funder"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    merchant_id: Mapped[str] = mapped_column(ForeignKey("merchants.id"), nullable=False, index=True)
    funder_id: Mapped[str] = mapped_column(ForeignKey("funders.id"), nullable=False, index=True)
    inactive: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class SyndicatorFunder(TimestampMixin, Base):
    __tablename__ = "syndicator_funders"
    __table_args__ = (UniqueConstraint("syndicator_id", "funder_id", name="uq_syndicator_funder"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    syndicator_id: Mapped[str] = mapped_column(ForeignKey("syndicators.id"), nullable=False, index=True)
    funder_id: Mapped[str] = mapped_column(ForeignKey("funders.id"), nullable=False, index=True)
    inactive: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class SyndicatorLender(TimestampMixin, Base):
    __tablename__ = "syndicator_lenders"
    __table_args__ = (UniqueConstraint("syndicator_id", "lender_id", name="uq_syndicator_lender"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    syndicator_id: Mapped[str] = mapped_column(ForeignKey("syndicators.id"), nullable=False, index=True)
    lender_id: Mapped[str] = mapped_column(ForeignKey("lenders.id"), nullable=False, index=True)
    inactive: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
