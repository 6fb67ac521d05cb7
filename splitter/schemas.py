"""Pydantic schemas for request/response."""
import os
from typing import Optional

from pydantic import BaseModel, Field, model_serializer

DEFAULT_BASE_CURRENCY = os.getenv("DEFAULT_BASE_CURRENCY", "TWD").strip().upper() or "TWD"


# ----- People & bills -----
class Person(BaseModel):
    id: int
    name: str = ""


class Bill(BaseModel):
    id: int = 0
    title: str = ""
    amount: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    category: Optional[str] = None
    currency: Optional[str] = None
    amount_base: float = Field(default=0.0, alias="amountBase", allow_inf_nan=False)
    paid_by: int = Field(alias="paidBy")
    participants: list[int] = []

    class Config:
        populate_by_name = True

    @model_serializer(mode="wrap")
    def _omit_unconverted_amount(self, handler):
        # amountBase is only reported once a bill has been converted.
        data = handler(self)
        if not self.amount_base:
            data.pop("amountBase", None)
            data.pop("amount_base", None)
        return data


# ----- Settlement -----
class Settlement(BaseModel):
    from_: str = Field(alias="from")
    to: str
    amount: float

    class Config:
        populate_by_name = True


# ----- Rates -----
class RateTable(BaseModel):
    base: str
    rates: dict[str, float]
    date: str = ""
    fetched_at: float = 0.0


# ----- Calculate -----
class CalculateRequest(BaseModel):
    base_currency: Optional[str] = Field(default=None, alias="baseCurrency")
    people: list[Person] = []
    bills: list[Bill] = []

    class Config:
        populate_by_name = True


class CalculateResponse(BaseModel):
    settlements: list[Settlement] = []
    bills: Optional[list[Bill]] = None
    base_currency: Optional[str] = Field(default=None, alias="baseCurrency")
    rate_date: Optional[str] = Field(default=None, alias="rateDate")
    error: Optional[str] = None

    class Config:
        populate_by_name = True


# ----- Shared session (sync) -----
class SyncState(BaseModel):
    people: list[Person] = []
    bills: list[Bill] = []
    base_currency: str = Field(default=DEFAULT_BASE_CURRENCY, alias="baseCurrency")
    last_updated: int = Field(default=0, alias="lastUpdated")

    class Config:
        populate_by_name = True
