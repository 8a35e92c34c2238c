from __future__ import annotations

from sqlalchemy import JSON, Boolean, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from mca_api.db.base import Base, TimestampMixin, new_id


class _PersonMixin:
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    inactive: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class Admin(_PersonMixin, TimestampMixin, Base):
    __tablename__ = "admins"

    super_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class Bookkeeper(_PersonMixin, TimestampMixin, Base):
    __tablename__ = "bookkeepers"


class User(_PersonMixin, TimestampMixin, Base):
    """Funder- and lender-portal login."""

    __tablename__ = "users"

    type: Mapped[str] = mapped_column(String(32), default="funder_user", nullable=False)
    permission_list: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)


class Representative(_PersonMixin, TimestampMixin, Base):
    """ISO-portal login."""

    __tablename__ = "representatives"

    type: Mapped[str] = mapped_column(String(32), default="iso_sales", nullable=False)


class Contact(_PersonMixin, TimestampMixin, Base):
    """Merchant-portal login."""

    __tablename__ = "contacts"


# ---- Memberships ---------------------------------------------------------------------
# Which parties a login works for. Inactive rows grant nothing.


class UserFunder(TimestampMixin, Base):
    __tablename__ = "user_funders"
    __table_args__ = (UniqueConstraint("user_id", "funder_id", name="uq_user_funder"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    funder_id: Mapped[str] = mapped_column(ForeignKey("funders.id"), nullable=False, index=True)
    inactive: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class UserLender(TimestampMixin, Base):
    __tablename__ = "user_lenders"
    __table_args__ = (UniqueConstraint("user_id", "lender_id", name="uq_user_lender"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    lender_id: Mapped[str] = mapped_column(ForeignKey("lenders.id"), nullable=False, index=True)
    inactive: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class RepresentativeISO(TimestampMixin, Base):
    __tablename__ = "representative_isos"
    __table_args__ = (UniqueConstraint("representative_id", "iso_id", name="uq_representative_iso"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    representative_id: Mapped[str] = mapped_column(ForeignKey("representatives.id"), nullable=False, index=True)
    iso_id: Mapped[str] = mapped_column(ForeignKey("isos.id"), nullable=False, index=True)
    inactive: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class ContactMerchant(TimestampMixin, Base):
    __tablename__ = "contact_merchants"
    __table_args__ = (UniqueConstraint("contact_id", "merchant_id", name="uq_contact_merchant"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    contact_id: Mapped[str] = mapped_column(ForeignKey("contacts.id"), nullable=False, index=True)
    merchant_id: Mapped[str] = mapped_column(ForeignKey("merchants.id"), nullable=False, index=True)
    inactive: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
