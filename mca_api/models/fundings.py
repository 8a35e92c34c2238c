from __future__ import annotations

from datetime import date

from sqlalchemy import Boolean, Date, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mca_api.constants import ApplicationType, FundingType, PaybackStatus, PaymentMethod, SyndicationStatus
from mca_api.db.base import Base, TimestampMixin, new_id


class Application(TimestampMixin, Base):
    __tablename__ = "applications"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    funder_id: Mapped[str] = mapped_column(ForeignKey("funders.id"), nullable=False, index=True)
    merchant_id: Mapped[str] = mapped_column(ForeignKey("merchants.id"), nullable=False, index=True)
    iso_id: Mapped[str | None] = mapped_column(ForeignKey("isos.id"), nullable=True, index=True)
    type: Mapped[ApplicationType] = mapped_column(
        Enum(ApplicationType, native_enum=False, length=32), default=ApplicationType.NEW, nullable=False
    )
    request_amount: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    internal: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    closed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    inactive: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class Funding(TimestampMixin, Base):
    __tablename__ = "fundings"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    identifier: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    funder_id: Mapped[str] = mapped_column(ForeignKey("funders.id"), nullable=False, index=True)
    lender_id: Mapped[str] = mapped_column(ForeignKey("lenders.id"), nullable=False, index=True)
    merchant_id: Mapped[str] = mapped_column(ForeignKey("merchants.id"), nullable=False, index=True)
    iso_id: Mapped[str | None] = mapped_column(ForeignKey("isos.id"), nullable=True, index=True)
    application_id: Mapped[str | None] = mapped_column(ForeignKey("applications.id"), nullable=True)
    type: Mapped[FundingType] = mapped_column(
        Enum(FundingType, native_enum=False, length=32), default=FundingType.NEW, nullable=False
    )
    funded_amount: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    payback_amount: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    internal: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    inactive: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class Payback(TimestampMixin, Base):
    """A collection against a funding. Owner references are copied from the funding."""

    __tablename__ = "paybacks"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    funding_id: Mapped[str] = mapped_column(ForeignKey("fundings.id"), nullable=False, index=True)
    funder_id: Mapped[str] = mapped_column(ForeignKey("funders.id"), nullable=False, index=True)
    lender_id: Mapped[str] = mapped_column(ForeignKey("lenders.id"), nullable=False, index=True)
    merchant_id: Mapped[str] = mapped_column(ForeignKey("merchants.id"), nullable=False, index=True)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    processed_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    payback_amount: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        Enum(PaymentMethod, native_enum=False, length=32), default=PaymentMethod.ACH, nullable=False
    )
    status: Mapped[PaybackStatus] = mapped_column(
        Enum(PaybackStatus, native_enum=False, length=32), default=PaybackStatus.SUBMITTED, nullable=False
    )
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    funding: Mapped[Funding] = relationship()


class Syndication(TimestampMixin, Base):
    __tablename__ = "syndications"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    funding_id: Mapped[str] = mapped_column(ForeignKey("fundings.id"), nullable=False, index=True)
    funder_id: Mapped[str] = mapped_column(ForeignKey("funders.id"), nullable=False, index=True)
    lender_id: Mapped[str] = mapped_column(ForeignKey("lenders.id"), nullable=False, index=True)
    syndicator_id: Mapped[str] = mapped_column(ForeignKey("syndicators.id"), nullable=False, index=True)
    participate_amount: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    participate_percent: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[SyndicationStatus] = mapped_column(
        Enum(SyndicationStatus, native_enum=False, length=32), default=SyndicationStatus.ACTIVE, nullable=False
    )

    funding: Mapped[Funding] = relationship()


class Payout(TimestampMixin, Base):
    __tablename__ = "payouts"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    syndication_id: Mapped[str] = mapped_column(ForeignKey("syndications.id"), nullable=False, index=True)
    funding_id: Mapped[str] = mapped_column(ForeignKey("fundings.id"), nullable=False, index=True)
    funder_id: Mapped[str] = mapped_column(ForeignKey("funders.id"), nullable=False, index=True)
    lender_id: Mapped[str] = mapped_column(ForeignKey("lenders.id"), nullable=False, index=True)
    syndicator_id: Mapped[str] = mapped_column(ForeignKey("syndicators.id"), nullable=False, index=True)
    payout_amount: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    fee_amount: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    redeemed_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    pending: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    syndication: Mapped[Syndication] = relationship()
