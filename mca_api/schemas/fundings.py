from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from mca_api.constants import ApplicationType, FundingType, PaybackStatus, PaymentMethod, SyndicationStatus

from .common import DollarAmount, Dollars


class ApplicationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    funder_id: str
    merchant_id: str
    iso_id: str | None
    type: ApplicationType
    request_amount: Dollars
    status: str | None
    internal: bool
    closed: bool
    inactive: bool
    created_at: datetime


class ApplicationCreate(BaseModel):
    name: str
    funder_id: str
    merchant_id: str
    iso_id: str | None = None
    type: ApplicationType = ApplicationType.NEW
    request_amount: DollarAmount = 0
    status: str | None = None
    internal: bool = False


class ApplicationUpdate(BaseModel):
    name: str | None = None
    type: ApplicationType | None = None
    request_amount: DollarAmount | None = None
    status: str | None = None
    internal: bool | None = None
    closed: bool | None = None
    inactive: bool | None = None


class FundingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    identifier: str | None
    funder_id: str
    lender_id: str
    merchant_id: str
    iso_id: str | None
    application_id: str | None
    type: FundingType
    funded_amount: Dollars
    payback_amount: Dollars
    status: str | None
    internal: bool
    inactive: bool
    created_at: datetime


class FundingCreate(BaseModel):
    name: str
    identifier: str | None = None
    funder_id: str
    lender_id: str
    merchant_id: str
    iso_id: str | None = None
    application_id: str | None = None
    type: FundingType = FundingType.NEW
    funded_amount: DollarAmount = 0
    payback_amount: DollarAmount = 0
    status: str | None = None
    internal: bool = False


class FundingUpdate(BaseModel):
    name: str | None = None
    identifier: str | None = None
    lender_id: str | None = None
    type: FundingType | None = None
    funded_amount: DollarAmount | None = None
    payback_amount: DollarAmount | None = None
    status: str | None = None
    internal: bool | None = None
    inactive: bool | None = None


class PaybackOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    funding_id: str
    funder_id: str
    lender_id: str
    merchant_id: str
    due_date: date
    processed_date: date | None
    payback_amount: Dollars
    payment_method: PaymentMethod
    status: PaybackStatus
    note: str | None
    created_at: datetime


class PaybackCreate(BaseModel):
    funding_id: str
    due_date: date
    processed_date: date | None = None
    payback_amount: DollarAmount
    payment_method: PaymentMethod = PaymentMethod.ACH
    status: PaybackStatus = PaybackStatus.SUBMITTED
    note: str | None = None


class PaybackUpdate(BaseModel):
    due_date: date | None = None
    processed_date: date | None = None
    payback_amount: DollarAmount | None = None
    payment_method: PaymentMethod | None = None
    status: PaybackStatus | None = None
    note: str | None = None


class SyndicationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    funding_id: str
    funder_id: str
    lender_id: str
    syndicator_id: str
    participate_amount: Dollars
    participate_percent: float
    start_date: date | None
    status: SyndicationStatus
    created_at: datetime


class SyndicationCreate(BaseModel):
    funding_id: str
    syndicator_id: str
    participate_amount: DollarAmount
    participate_percent: float = Field(0.0, ge=0, le=1)
    start_date: date | None = None


class SyndicationUpdate(BaseModel):
    participate_amount: DollarAmount | None = None
    participate_percent: float | None = Field(None, ge=0, le=1)
    start_date: date | None = None
    status: SyndicationStatus | None = None


class PayoutOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    syndication_id: str
    funding_id: str
    funder_id: str
    lender_id: str
    syndicator_id: str
    payout_amount: Dollars
    fee_amount: Dollars
    redeemed_date: date | None
    pending: bool
    created_at: datetime


class PayoutCreate(BaseModel):
    syndication_id: str
    payout_amount: DollarAmount
    fee_amount: DollarAmount = 0


class PayoutUpdate(BaseModel):
    payout_amount: DollarAmount | None = None
    fee_amount: DollarAmount | None = None
    redeemed_date: date | None = None
    pending: bool | None = None
