from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class FunderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str | None
    phone: str | None
    website: str | None
    inactive: bool
    created_at: datetime


class FunderCreate(BaseModel):
    name: str
    email: str | None = None
    phone: str | None = None
    website: str | None = None


class FunderUpdate(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    website: str | None = None
    inactive: bool | None = None


class LenderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    funder_id: str
    name: str
    email: str | None
    phone: str | None
    internal: bool
    inactive: bool
    created_at: datetime


class LenderCreate(BaseModel):
    funder_id: str
    name: str
    email: str | None = None
    phone: str | None = None
    internal: bool = True


class LenderUpdate(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    internal: bool | None = None
    inactive: bool | None = None


class ISOOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str | None
    phone: str | None
    inactive: bool
    created_at: datetime


class ISOCreate(BaseModel):
    name: str
    email: str | None = None
    phone: str | None = None
    # Funder to link the new ISO with; required outside the admin portal.
    funder_id: str | None = None


class ISOUpdate(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    inactive: bool | None = None


class MerchantOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    dba_name: str | None
    email: str | None
    phone: str | None
    ein: str | None
    description: str | None
    inactive: bool
    created_at: datetime


class MerchantCreate(BaseModel):
    name: str
    dba_name: str | None = None
    email: str | None = None
    phone: str | None = None
    ein: str | None = None
    description: str | None = None
    funder_id: str | None = None
    iso_id: str | None = None


class MerchantUpdate(BaseModel):
    name: str | None = None
    dba_name: str | None = None
    email: str | None = None
    phone: str | None = None
    ein: str | None = None
    description: str | None = None
    inactive: bool | None = None


class SyndicatorOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    first_name: str | None
    last_name: str | None
    email: str | None
    phone: str | None
    inactive: bool
    created_at: datetime


class SyndicatorCreate(BaseModel):
    name: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    funder_id: str | None = None


class SyndicatorUpdate(BaseModel):
    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    inactive: bool | None = None
