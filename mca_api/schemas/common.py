from __future__ import annotations

from typing import Annotated, Generic, TypeVar

from pydantic import BaseModel, BeforeValidator, Field

from mca_api.money import cents_to_dollars

T = TypeVar("T")

# Stored as integer cents, exposed as dollars.
Dollars = Annotated[float | None, BeforeValidator(cents_to_dollars)]

# Incoming dollar amounts.
DollarAmount = Annotated[float, Field(ge=0)]


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class Page(BaseModel, Generic[T]):
    docs: list[T]
    pagination: Pagination
