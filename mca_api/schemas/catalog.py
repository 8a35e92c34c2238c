from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class FeeTypeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    funder_id: str
    name: str
    upfront: bool
    syndication: bool
    inactive: bool
    created_at: datetime


class FeeTypeCreate(BaseModel):
    funder_id: str
    name: str
    upfront: bool = False
    syndication: bool = False


class FeeTypeUpdate(BaseModel):
    name: str | None = None
    upfront: bool | None = None
    syndication: bool | None = None
    inactive: bool | None = None


class ExpenseTypeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    funder_id: str
    name: str
    commission: bool
    syndication: bool
    inactive: bool
    created_at: datetime


class ExpenseTypeCreate(BaseModel):
    funder_id: str
    name: str
    commission: bool = False
    syndication: bool = False


class ExpenseTypeUpdate(BaseModel):
    name: str | None = None
    commission: bool | None = None
    syndication: bool | None = None
    inactive: bool | None = None
