"""
Link schemas. Every link response shares `LinkOut`, which carries whichever
two end columns the link has; create payloads name both ends explicitly.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class LinkOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    inactive: bool
    created_at: datetime

    funder_id: str | None = None
    lender_id: str | None = None
    iso_id: str | None = None
    merchant_id: str | None = None
    syndicator_id: str | None = None
    user_id: str | None = None
    representative_id: str | None = None
    contact_id: str | None = None


class ISOFunderCreate(BaseModel):
    iso_id: str
    funder_id: str


class ISOMerchantCreate(BaseModel):
    iso_id: str
    merchant_id: str


class MerchantFunderCreate(BaseModel):
    merchant_id: str
    funder_id: str


class SyndicatorFunderCreate(BaseModel):
    syndicator_id: str
    funder_id: str


class SyndicatorLenderCreate(BaseModel):
    syndicator_id: str
    lender_id: str


class UserFunderCreate(BaseModel):
    user_id: str
    funder_id: str


class UserLenderCreate(BaseModel):
    user_id: str
    lender_id: str


class RepresentativeISOCreate(BaseModel):
    representative_id: str
    iso_id: str


class ContactMerchantCreate(BaseModel):
    contact_id: str
    merchant_id: str
