"""
Account schemas are shared by the five account kinds. Create payloads name
the owner with a generic `owner_id`; responses carry the kind-specific column.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from mca_api.constants import AccountType

from .common import DollarAmount, Dollars


class AccountOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    bank: str | None
    branch: str | None
    routing: str | None
    account_number: str | None
    type: AccountType
    available_balance: Dollars
    inactive: bool
    created_at: datetime

    funder_id: str | None = None
    lender_id: str | None = None
    iso_id: str | None = None
    merchant_id: str | None = None
    syndicator_id: str | None = None


class AccountCreate(BaseModel):
    owner_id: str
    name: str
    bank: str | None = None
    branch: str | None = None
    routing: str | None = None
    account_number: str | None = None
    type: AccountType = AccountType.CHECKING
    available_balance: DollarAmount = 0


class AccountUpdate(BaseModel):
    name: str | None = None
    bank: str | None = None
    branch: str | None = None
    routing: str | None = None
    account_number: str | None = None
    type: AccountType | None = None
    available_balance: DollarAmount | None = None
    inactive: bool | None = None
