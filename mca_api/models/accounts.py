"""
Bank/ledger accounts. Every party kind has its own table with the same shape;
only the owner column differs.
"""

from __future__ import annotations

from sqlalchemy import Boolean, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from mca_api.constants import AccountType
from mca_api.db.base import Base, TimestampMixin, new_id


class AccountMixin(TimestampMixin):
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    bank: Mapped[str | None] = mapped_column(String(200), nullable=True)
    branch: Mapped[str | None] = mapped_column(String(200), nullable=True)
    routing: Mapped[str | None] = mapped_column(String(20), nullable=True)
    account_number: Mapped[str | None] = mapped_column(String(40), nullable=True)
    available_balance: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    type: Mapped[AccountType] = mapped_column(
        Enum(AccountType, native_enum=False, length=32), default=AccountType.CHECKING, nullable=False
    )
    inactive: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class FunderAccount(AccountMixin, Base):
    __tablename__ = "funder_accounts"

    funder_id: Mapped[str] = mapped_column(ForeignKey("funders.id"), nullable=False, index=True)


class LenderAccount(AccountMixin, Base):
    __tablename__ = "lender_accounts"

    lender_id: Mapped[str] = mapped_column(ForeignKey("lenders.id"), nullable=False, index=True)


class ISOAccount(AccountMixin, Base):
    __tablename__ = "iso_accounts"

    iso_id: Mapped[str] = mapped_column(ForeignKey("isos.id"), nullable=False, index=True)


class MerchantAccount(AccountMixin, Base):
    __tablename__ = "merchant_accounts"

    merchant_id: Mapped[str] = mapped_column(ForeignKey("merchants.id"), nullable=False, index=True)


class SyndicatorAccount(AccountMixin, Base):
    __tablename__ = "syndicator_accounts"

    syndicator_id: Mapped[str] = mapped_column(ForeignKey("syndicators.id"), nullable=False, index=True)
