from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from mca_api.constants import Role


class AdminOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    email: str
    phone: str | None
    super_admin: bool
    inactive: bool
    created_at: datetime


class AdminCreate(BaseModel):
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    super_admin: bool = False


class AdminUpdate(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    super_admin: bool | None = None
    inactive: bool | None = None


class BookkeeperOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    email: str
    phone: str | None
    inactive: bool
    created_at: datetime


class BookkeeperCreate(BaseModel):
    first_name: str
    last_name: str
    email: str
    phone: str | None = None


class BookkeeperUpdate(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    inactive: bool | None = None


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    email: str
    phone: str | None
    type: str
    permission_list: list[str]
    inactive: bool
    created_at: datetime


class UserCreate(BaseModel):
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    type: Role = Role.FUNDER_USER
    permission_list: list[str] = Field(default_factory=list)
    funder_id: str | None = None


class UserUpdate(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    type: Role | None = None
    permission_list: list[str] | None = None
    inactive: bool | None = None


class RepresentativeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    email: str
    phone: str | None
    type: str
    inactive: bool
    created_at: datetime


class RepresentativeCreate(BaseModel):
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    type: Role = Role.ISO_SALES
    iso_id: str | None = None


class RepresentativeUpdate(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    type: Role | None = None
    inactive: bool | None = None


class ContactOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    email: str
    phone: str | None
    inactive: bool
    created_at: datetime


class ContactCreate(BaseModel):
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    merchant_id: str | None = None


class ContactUpdate(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    inactive: bool | None = None


class PrincipalOut(BaseModel):
    id: str
    portal: str
    role: str
    funder_list: list[str] | None
    lender_list: list[str] | None
    iso_list: list[str] | None
    merchant_list: list[str] | None
    syndicator_list: list[str] | None
    permission_list: list[str]


class MeOut(BaseModel):
    principal: PrincipalOut
    scopes: dict[str, str | list[str]]
    permissions: list[str]
